"""Check TypeScript declaration files against the runtime shape of JavaScript modules."""

from dts_critic.exceptions import (
    CannotEvaluateError,
    CriticError,
    HeaderParseError,
    NameMismatchError,
    RegistryError,
)
from dts_critic.models import CheckMode, CriticConfig, Diagnostic, ErrorKind, to_error_kind
from dts_critic.services.critic import (
    DtsCritic,
    check_declaration,
    check_source,
    dts_critic,
    get_npm_info,
)
from dts_critic.services.names import dt_to_npm_name, find_dts_name, find_source_name

__all__ = [
    "CannotEvaluateError",
    "CheckMode",
    "CriticConfig",
    "CriticError",
    "Diagnostic",
    "DtsCritic",
    "ErrorKind",
    "HeaderParseError",
    "NameMismatchError",
    "RegistryError",
    "check_declaration",
    "check_source",
    "dt_to_npm_name",
    "dts_critic",
    "find_dts_name",
    "find_source_name",
    "get_npm_info",
    "to_error_kind",
]
