"""Rendered markup document."""

from pydantic import BaseModel, ConfigDict, Field


class RenderedDocument(BaseModel):
    """Self-contained HTML produced once per request and loaded by one session."""

    model_config = ConfigDict(frozen=True)

    markup: str = Field(..., repr=False, description="Complete HTML document")
    width: int = Field(..., description="Width the document was laid out for")

    def __len__(self) -> int:
        return len(self.markup)
