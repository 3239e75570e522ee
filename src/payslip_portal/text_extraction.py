"""Text acquisition: PDF text layer via PyMuPDF, flattened into reading order."""

from __future__ import annotations

from typing import Iterable, List, Sequence

import fitz  # PyMuPDF

from .contracts import DocumentText, PageFragments, TextFragment

LINE_TOLERANCE = 8.0
DEFAULT_MAX_PAGES = 2


def _words_to_fragments(words) -> List[TextFragment]:
    fragments: List[TextFragment] = []
    for word in words:
        # format: x0, y0, x1, y1, "text", block_no, line_no, word_no
        if len(word) < 5:
            continue
        x0, _y0, _x1, y1, text, *_ = word
        # y1 sits on the baseline, which keeps mixed font sizes on one line
        fragments.append(TextFragment(text=str(text), x=float(x0), y=float(y1)))
    return fragments


def read_pdf_fragments(data: bytes, *, max_pages: int = DEFAULT_MAX_PAGES) -> List[PageFragments]:
    """Read positioned words from the first `max_pages` pages of a PDF."""

    pages: List[PageFragments] = []
    with fitz.open(stream=data, filetype="pdf") as doc:
        for idx, page in enumerate(doc, start=1):
            if idx > max_pages:
                break
            words = page.get_text("words") or []
            pages.append(PageFragments(page_no=idx, fragments=_words_to_fragments(words)))
    return pages


def group_lines(
    fragments: Iterable[TextFragment],
    *,
    tolerance: float = LINE_TOLERANCE,
) -> List[List[TextFragment]]:
    """
    Group fragments into visual lines.

    Two fragments share a line when their vertical positions differ by less
    than `tolerance` from the first fragment of that line. Lines come out
    top-to-bottom, fragments inside a line left-to-right.
    """

    ordered = sorted(fragments, key=lambda f: (f.y, f.x))
    lines: List[List[TextFragment]] = []
    anchor_y = 0.0
    for fragment in ordered:
        if lines and abs(fragment.y - anchor_y) < tolerance:
            lines[-1].append(fragment)
            continue
        lines.append([fragment])
        anchor_y = fragment.y
    return [sorted(line, key=lambda f: f.x) for line in lines]


def flatten_page(fragments: Sequence[TextFragment], *, tolerance: float = LINE_TOLERANCE) -> str:
    """Join one page's fragments into a single space-separated string."""

    parts: List[str] = []
    for line in group_lines(fragments, tolerance=tolerance):
        for fragment in line:
            text = fragment.text.strip()
            if text:
                parts.append(text)
    return " ".join(parts)


def flatten_pages(pages: Sequence[PageFragments], *, max_pages: int = DEFAULT_MAX_PAGES) -> DocumentText:
    """Flatten pages in document order, keeping only the first `max_pages`."""

    ordered = sorted(pages, key=lambda p: p.page_no)[:max_pages]
    return DocumentText(pages=[flatten_page(p.fragments) for p in ordered])


class PyMuPDFTextLayerReader:
    """Text-layer reader backed by PyMuPDF."""

    def __init__(self, *, max_pages: int = DEFAULT_MAX_PAGES) -> None:
        self.max_pages = max_pages

    def read_pages(self, data: bytes) -> List[PageFragments]:
        return read_pdf_fragments(data, max_pages=self.max_pages)


def extract_document_text(data: bytes, *, max_pages: int = DEFAULT_MAX_PAGES) -> DocumentText:
    """Read and flatten the text layer of a PDF given as raw bytes."""

    return flatten_pages(read_pdf_fragments(data, max_pages=max_pages), max_pages=max_pages)
