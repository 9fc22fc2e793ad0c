from .base import SourcePosition
from .config import CriticConfig
from .diagnostic import CheckMode, Diagnostic, ErrorKind, to_error_kind
from .header import DefinitelyTypedHeader
from .npm import NpmInfo
from .report import CriticReport
from .runtime_module import RuntimeModule, RuntimeValueType
from .shape import ActualShape, DeclaredProperty, DeclaredShape, DefaultExportEvidence

__all__ = [
    "ActualShape",
    "CheckMode",
    "CriticConfig",
    "CriticReport",
    "DeclaredProperty",
    "DeclaredShape",
    "DefaultExportEvidence",
    "DefinitelyTypedHeader",
    "Diagnostic",
    "ErrorKind",
    "NpmInfo",
    "RuntimeModule",
    "RuntimeValueType",
    "SourcePosition",
    "to_error_kind",
]
