"""Schema definitions for positioned PDF text."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field


class TextFragment(BaseModel):
    """One positioned piece of text from a PDF text layer.

    Coordinates use a top-left origin: `y` grows downwards.
    """

    text: str
    x: float
    y: float


class PageFragments(BaseModel):
    """All fragments read from one page, in text-layer order."""

    page_no: int = Field(..., ge=1)
    fragments: List[TextFragment] = Field(default_factory=list)


class DocumentText(BaseModel):
    """Flattened text of a document, one string per page."""

    pages: List[str] = Field(default_factory=list)

    @property
    def full_text(self) -> str:
        return " ".join(page for page in self.pages if page)
