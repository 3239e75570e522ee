"""
Best-effort pay-slip field guessing from flattened PDF text.

Every field is optional except the title. A field only lands in
`fields_auto_filled` when it came from the document itself, so the review
screen can highlight what the machine guessed.
"""

from __future__ import annotations

import logging
import re
from datetime import date
from pathlib import Path
from typing import Iterable, Sequence

from .models.enums import AutoField, Month
from .models.extraction import ExtractionInput, ExtractionResult, KnownEmployee, PayPeriod
from .services.ports import TextLayerReader
from .text_extraction import DEFAULT_MAX_PAGES, flatten_pages

logger = logging.getLogger(__name__)

ANALYSIS_FAILED_MESSAGE = "Automatic processing failed."

_LABEL = r"(?:NET\s*PAYABLE|NET\s*AMOUNT|TAKE\s*HOME|NET\s*PAY)"
_NOT_YTD_LABEL = r"(?![A-Z]*\s*YTD)"
_AMOUNT = r"(?<![\d,])(?P<amount>(?:GHC|GHS|GH₵|\$)?\s*\d[\d,]*\.\d{2})(?!\d)(?!\s*YTD)"

# Order matters: label-then-amount is tried before amount-then-label.
AMOUNT_PATTERNS = (
    re.compile(_LABEL + _NOT_YTD_LABEL + r"[^0-9]*?" + _AMOUNT),
    re.compile(_AMOUNT + r"\s*" + _LABEL + _NOT_YTD_LABEL),
)

_YEAR = re.compile(r"20[2-3]\d")
_FULL_MONTHS = (
    "JANUARY",
    "FEBRUARY",
    "MARCH",
    "APRIL",
    "MAY",
    "JUNE",
    "JULY",
    "AUGUST",
    "SEPTEMBER",
    "OCTOBER",
    "NOVEMBER",
    "DECEMBER",
)
_MONTH_ABBREVIATIONS = tuple(
    (month, re.compile(rf"(?<![A-Z]){month.value.upper()}(?![A-Z])")) for month in Month
)
_FILENAME_SEPARATORS = re.compile(r"[_\-.]+")


def derive_title(file_name: str) -> str:
    """Filename without extension, uppercased."""

    name = Path(file_name).name
    return re.sub(r"\.[^/.]+$", "", name).upper()


def extract_amount(upper_text: str) -> str | None:
    """Find a net-pay amount and return it as a bare decimal string."""

    for pattern in AMOUNT_PATTERNS:
        match = pattern.search(upper_text)
        if match is None:
            continue
        cleaned = re.sub(r"[^\d.]", "", match.group("amount"))
        if cleaned:
            return cleaned
    return None


def _find_full_month(haystacks: Sequence[str]) -> Month | None:
    for haystack in haystacks:
        for index, name in enumerate(_FULL_MONTHS):
            if name in haystack:
                return list(Month)[index]
    return None


def _find_abbreviated_month(haystacks: Sequence[str]) -> Month | None:
    for haystack in haystacks:
        for month, pattern in _MONTH_ABBREVIATIONS:
            if pattern.search(haystack):
                return month
    return None


def extract_period(upper_name: str, upper_text: str, *, today: date | None = None) -> PayPeriod | None:
    """
    Guess the pay period.

    The filename always wins over the body text. Without a year the current
    calendar year is assumed; without a month there is no period at all.
    """

    haystacks = (upper_name, upper_text)
    year_match = _YEAR.search(upper_name) or _YEAR.search(upper_text)
    year = year_match.group(0) if year_match else str((today or date.today()).year)

    month = _find_full_month(haystacks) or _find_abbreviated_month(haystacks)
    if month is None:
        return None
    return PayPeriod(month=month, year=year)


def _normalize_name(name: str) -> str:
    return " ".join(name.upper().split())


def match_employee(
    employees: Iterable[KnownEmployee],
    upper_name: str,
    upper_text: str,
) -> KnownEmployee | None:
    """Longest display name found in the filename or text wins."""

    name_haystack = _FILENAME_SEPARATORS.sub(" ", upper_name)
    candidates = sorted(employees, key=lambda e: len(_normalize_name(e.display_name)), reverse=True)
    for employee in candidates:
        needle = _normalize_name(employee.display_name)
        if not needle:
            continue
        if needle in upper_name or needle in name_haystack or needle in upper_text:
            return employee
    return None


def extract_fields(inp: ExtractionInput, *, today: date | None = None) -> ExtractionResult:
    """Run all heuristics over already-flattened page text."""

    title = derive_title(inp.file_name)
    upper_name = title
    upper_text = " ".join(inp.page_texts).upper()
    fields = [AutoField.TITLE]

    amount = extract_amount(upper_text)
    if amount:
        fields.append(AutoField.AMOUNT)

    period = extract_period(upper_name, upper_text, today=today)
    if period is not None:
        fields.append(AutoField.PERIOD)

    matched = match_employee(inp.known_employees, upper_name, upper_text)
    matched_id = None
    if matched is not None:
        matched_id = matched.id
        fields.append(AutoField.EMPLOYEE)
    elif len(inp.known_employees) == 1:
        # Only one candidate: preselect it, but it was not read from the file.
        matched_id = inp.known_employees[0].id

    return ExtractionResult(
        title=title,
        amount=amount,
        period=period,
        matched_employee_id=matched_id,
        fields_auto_filled=fields,
    )


class FieldExtractor:
    """Reads a PDF through a text-layer reader and guesses review fields."""

    def __init__(self, reader: TextLayerReader, *, max_pages: int = DEFAULT_MAX_PAGES) -> None:
        self.reader = reader
        self.max_pages = max_pages

    def analyze(
        self,
        file_name: str,
        data: bytes,
        known_employees: Sequence[KnownEmployee],
        *,
        today: date | None = None,
    ) -> ExtractionResult:
        """Never raises: failures degrade to a title-only result with an advisory."""

        try:
            pages = self.reader.read_pages(data)
            text = flatten_pages(pages, max_pages=self.max_pages)
            return extract_fields(
                ExtractionInput(
                    file_name=file_name,
                    page_texts=text.pages,
                    known_employees=list(known_employees),
                ),
                today=today,
            )
        except Exception as exc:
            logger.warning("Field extraction failed for %s: %s", file_name, exc)
            return ExtractionResult(title=derive_title(file_name), error=ANALYSIS_FAILED_MESSAGE)
