from __future__ import annotations

import csv
import io
from datetime import date

from openpyxl import load_workbook

from payslip_portal.exports import EXPORT_HEADERS, documents_to_csv, documents_to_xlsx, export_filename
from payslip_portal.models.enums import DocStatus, DocType
from payslip_portal.models.internal import PayrollDocumentRecord


def _doc(**overrides) -> PayrollDocumentRecord:
    values = dict(
        id="doc1",
        title="BONUS, Q1",
        company="Twinhill HQ",
        employee_id="u1",
        employee_name="Owusu, Ama",
        employee_email="ama@example.com",
        upload_date="Mar 1, 2026",
        payroll_period="Mar 2026",
        amount=1234.5,
        status=DocStatus.SENT,
        type=DocType.BONUS,
    )
    values.update(overrides)
    return PayrollDocumentRecord(**values)


def test_export_filename_uses_date() -> None:
    assert export_filename("csv", today=date(2026, 10, 18)) == "payroll_export_2026-10-18.csv"


def test_csv_escapes_commas_in_text_fields() -> None:
    text = documents_to_csv([_doc()])
    rows = list(csv.reader(io.StringIO(text)))
    assert rows[0] == EXPORT_HEADERS
    assert rows[1] == [
        "doc1",
        "BONUS, Q1",
        "Bonus",
        "1234.50",
        "Mar 1, 2026",
        "Mar 2026",
        "Sent",
        "Owusu, Ama",
        "ama@example.com",
    ]
    assert '"Owusu, Ama"' in text


def test_csv_with_no_documents_is_header_only() -> None:
    assert documents_to_csv([]) == ",".join(EXPORT_HEADERS) + "\n"


def test_xlsx_has_bold_header_and_numeric_amount() -> None:
    data = documents_to_xlsx([_doc(), _doc(id="doc2", amount=10.0)])
    sheet = load_workbook(io.BytesIO(data)).active
    assert sheet.title == "Documents"
    assert [c.value for c in sheet[1]] == EXPORT_HEADERS
    assert sheet.cell(row=1, column=1).font.bold
    assert sheet.cell(row=2, column=4).value == 1234.5
    assert sheet.cell(row=3, column=1).value == "doc2"
