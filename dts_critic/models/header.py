from pydantic import BaseModel, Field


class DefinitelyTypedHeader(BaseModel):
    """Header comment at the top of a Definitely Typed declaration."""

    library_name: str = Field(..., description="Library named in the header")
    library_major_version: int = Field(..., ge=0)
    library_minor_version: int = Field(..., ge=0)
    non_npm: bool = Field(
        default=False, description="Whether the header says 'non-npm package'"
    )
    projects: list[str] = Field(default_factory=list, description="Project URLs")
    typescript_version: str | None = None

    @property
    def version(self) -> str:
        return f"{self.library_major_version}.{self.library_minor_version}"
