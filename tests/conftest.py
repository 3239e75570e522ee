from __future__ import annotations

from typing import Callable, Sequence

import fitz  # PyMuPDF
import pytest

PageSpec = Sequence[tuple[tuple[float, float], str]]


def build_pdf(pages: Sequence[PageSpec]) -> bytes:
    """Build an in-memory PDF; each page is a list of ((x, y), text) placements."""

    with fitz.open() as doc:
        for placements in pages:
            page = doc.new_page()
            for point, text in placements:
                page.insert_text(point, text)
        return doc.tobytes()


@pytest.fixture
def make_pdf() -> Callable[[Sequence[PageSpec]], bytes]:
    return build_pdf
