from pydantic import BaseModel, ConfigDict, Field


class SourcePosition(BaseModel):
    """Span inside the declaration text, as UTF-8 byte offsets."""

    model_config = ConfigDict(frozen=True)

    start: int = Field(..., ge=0, description="Offset of the first byte of the span")
    length: int = Field(..., ge=0, description="Number of bytes covered by the span")

    @property
    def end(self) -> int:
        return self.start + self.length
