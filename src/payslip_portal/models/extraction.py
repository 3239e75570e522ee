from __future__ import annotations

from typing import Annotated

from pydantic import Field

from payslip_portal.models.common import StrictModel
from payslip_portal.models.enums import AutoField, Month


class KnownEmployee(StrictModel):
    """Identity eligible for name matching against document text."""

    id: str
    display_name: str


class PayPeriod(StrictModel):
    """Pay period as month plus four-digit year."""

    month: Month
    year: Annotated[str, Field(pattern=r"^\d{4}$")]

    @property
    def label(self) -> str:
        return f"{self.month.value} {self.year}"


class ExtractionInput(StrictModel):
    """Everything the field extractor looks at for one file."""

    file_name: str
    page_texts: list[str] = Field(default_factory=list)
    known_employees: list[KnownEmployee] = Field(default_factory=list)


class ExtractionResult(StrictModel):
    """Pre-filled, user-editable review fields for one uploaded file."""

    title: str
    amount: str | None = None
    period: PayPeriod | None = None
    matched_employee_id: str | None = None
    fields_auto_filled: list[AutoField] = Field(default_factory=lambda: [AutoField.TITLE])
    error: str | None = None

    def is_auto(self, field: AutoField) -> bool:
        return field in self.fields_auto_filled
