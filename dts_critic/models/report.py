from pathlib import Path

from pydantic import BaseModel, Field

from dts_critic.models.diagnostic import CheckMode, Diagnostic


class CriticReport(BaseModel):
    """Result of critiquing one declaration file."""

    name: str = Field(..., description="Declaration (package) name")
    declaration_path: Path
    source_path: Path | None = None
    mode: CheckMode
    diagnostics: list[Diagnostic] = Field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.diagnostics
