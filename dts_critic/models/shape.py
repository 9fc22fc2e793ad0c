from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from dts_critic.models.base import SourcePosition


class DefaultExportEvidence(StrEnum):
    """What the JavaScript side says about a default export."""

    PRESENT = "present"
    ABSENT = "absent"
    UNAVAILABLE = "unavailable"


class DeclaredProperty(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    position: SourcePosition | None = None


class DeclaredShape(BaseModel):
    """Exported surface of a module as written in its declaration."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Module name used in messages")
    properties: tuple[DeclaredProperty, ...] = Field(
        default=(), description="Exported value members in source order"
    )
    is_callable: bool = False
    is_constructible: bool = False
    uses_export_equals: bool = Field(
        default=False, description="Whether the declaration uses 'export ='"
    )
    has_default_export_marker: bool = Field(
        default=False,
        description="Whether 'export default' appears outside an ambient module wrapper",
    )
    default_export_position: SourcePosition | None = None

    @property
    def property_names(self) -> tuple[str, ...]:
        return tuple(prop.name for prop in self.properties)

    @property
    def is_invocable(self) -> bool:
        return self.is_callable or self.is_constructible


class ActualShape(BaseModel):
    """Exported surface of a module as observed at runtime."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Module name used in messages")
    properties: tuple[str, ...] = Field(
        default=(), description="Own enumerable keys of the export value"
    )
    is_callable: bool = False
    is_constructible: bool = False
    uses_module_exports_assignment: bool = Field(
        default=False,
        description="Whether module.exports was replaced by an invocable or non-plain value",
    )
    default_export_evidence: DefaultExportEvidence = DefaultExportEvidence.ABSENT

    @property
    def is_invocable(self) -> bool:
        return self.is_callable or self.is_constructible
