from __future__ import annotations

import pytest

from payslip_portal.contracts import PageFragments, TextFragment
from payslip_portal.text_extraction import (
    PyMuPDFTextLayerReader,
    extract_document_text,
    flatten_page,
    flatten_pages,
    group_lines,
    read_pdf_fragments,
)


def _frag(text: str, x: float, y: float) -> TextFragment:
    return TextFragment(text=text, x=x, y=y)


def test_group_lines_uses_vertical_tolerance() -> None:
    lines = group_lines(
        [
            _frag("right", 200, 105),
            _frag("left", 10, 100),
            _frag("below", 10, 120),
        ]
    )
    assert [[f.text for f in line] for line in lines] == [["left", "right"], ["below"]]


def test_group_lines_anchors_on_first_fragment_of_line() -> None:
    # 100 -> 106 joins, 106 -> 112 would be within tolerance of 106 but not of 100.
    lines = group_lines([_frag("a", 0, 100), _frag("b", 10, 106), _frag("c", 20, 112)])
    assert [[f.text for f in line] for line in lines] == [["a", "b"], ["c"]]


def test_flatten_page_drops_blank_fragments() -> None:
    text = flatten_page([_frag("Net", 0, 50), _frag("  ", 30, 50), _frag("Pay", 60, 50)])
    assert text == "Net Pay"


def test_flatten_pages_keeps_document_order_and_limit() -> None:
    pages = [
        PageFragments(page_no=2, fragments=[_frag("two", 0, 0)]),
        PageFragments(page_no=3, fragments=[_frag("three", 0, 0)]),
        PageFragments(page_no=1, fragments=[_frag("one", 0, 0)]),
    ]
    document = flatten_pages(pages, max_pages=2)
    assert document.pages == ["one", "two"]
    assert document.full_text == "one two"


def test_read_pdf_fragments_reads_real_text_layer(make_pdf) -> None:
    data = make_pdf(
        [
            [((300, 200), "2,500.00"), ((72, 200), "Net Pay"), ((72, 100), "Payslip")],
            [((72, 100), "Second")],
            [((72, 100), "Third")],
        ]
    )
    pages = read_pdf_fragments(data)
    assert [p.page_no for p in pages] == [1, 2]
    assert {f.text for f in pages[0].fragments} == {"Payslip", "Net", "Pay", "2,500.00"}


def test_extract_document_text_reading_order(make_pdf) -> None:
    data = make_pdf([[((300, 200), "2,500.00"), ((72, 200), "Net Pay"), ((72, 100), "Payslip")]])
    document = extract_document_text(data)
    assert document.pages == ["Payslip Net Pay 2,500.00"]


def test_reader_respects_page_limit(make_pdf) -> None:
    data = make_pdf([[((72, 72), f"page{n}")] for n in range(1, 5)])
    pages = PyMuPDFTextLayerReader(max_pages=1).read_pages(data)
    assert len(pages) == 1
    assert pages[0].fragments[0].text == "page1"


def test_unreadable_bytes_raise() -> None:
    with pytest.raises(Exception):
        read_pdf_fragments(b"definitely not a pdf")
