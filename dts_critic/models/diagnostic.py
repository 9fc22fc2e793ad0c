from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from dts_critic.models.base import SourcePosition


class ErrorKind(StrEnum):
    """Closed set of findings reported by the critic."""

    # Registry checks, produced before the structural comparison runs.
    NO_MATCHING_NPM_PACKAGE = "NoMatchingNpmPackage"
    NO_MATCHING_NPM_VERSION = "NoMatchingNpmVersion"
    NON_NPM_HAS_MATCHING_PACKAGE = "NonNpmHasMatchingPackage"
    # Structural checks.
    DTS_PROPERTY_NOT_IN_JS = "DtsPropertyNotInJs"
    JS_PROPERTY_NOT_IN_DTS = "JsPropertyNotInDts"
    DTS_CALLABLE = "DtsCallable"
    JS_CALLABLE = "JsCallable"
    NEEDS_EXPORT_EQUALS = "NeedsExportEquals"
    NO_DEFAULT_EXPORT = "NoDefaultExport"


class CheckMode(StrEnum):
    """Where the JavaScript source came from."""

    NPM = "npm"
    LOCAL = "local"


_KINDS_BY_NAME: dict[str, ErrorKind] = {kind.value.lower(): kind for kind in ErrorKind}


def to_error_kind(name: str) -> ErrorKind | None:
    """Resolve an error kind from its name, ignoring case.

    Args:
        name: Kind name such as ``"noMatchingNPMVersion"``.

    Returns:
        The matching ErrorKind, or None when the name is unknown.
    """

    return _KINDS_BY_NAME.get(name.strip().lower())


class Diagnostic(BaseModel):
    """One finding about a declaration."""

    model_config = ConfigDict(frozen=True)

    kind: ErrorKind = Field(..., description="Kind of mismatch")
    message: str = Field(..., description="Human-readable explanation")
    position: SourcePosition | None = Field(
        default=None, description="Span in the declaration text, when localized"
    )

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)
