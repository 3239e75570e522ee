from __future__ import annotations

import csv
import io
from datetime import date
from typing import Iterable

from openpyxl import Workbook
from openpyxl.styles import Font

from payslip_portal.models.internal import PayrollDocumentRecord

EXPORT_HEADERS = [
    "ID",
    "Title",
    "Type",
    "Amount",
    "Date",
    "Period",
    "Status",
    "Employee Name",
    "Employee Email",
]


def export_filename(suffix: str, *, today: date | None = None) -> str:
    return f"payroll_export_{(today or date.today()).isoformat()}.{suffix}"


def _row(doc: PayrollDocumentRecord) -> list:
    return [
        doc.id,
        doc.title,
        doc.type.value,
        doc.amount,
        doc.upload_date,
        doc.payroll_period,
        doc.status.value,
        doc.employee_name,
        doc.employee_email,
    ]


def documents_to_csv(documents: Iterable[PayrollDocumentRecord]) -> str:
    """Render documents as CSV text with a header row."""

    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(EXPORT_HEADERS)
    for doc in documents:
        row = _row(doc)
        row[3] = f"{doc.amount:.2f}"
        writer.writerow(row)
    return buf.getvalue()


def documents_to_xlsx(documents: Iterable[PayrollDocumentRecord]) -> bytes:
    """Render documents into a single-sheet workbook."""

    wb = Workbook()
    ws = wb.active
    ws.title = "Documents"
    ws.append(EXPORT_HEADERS)
    for cell in ws[1]:
        cell.font = Font(bold=True)
    for doc in documents:
        ws.append(_row(doc))
        ws.cell(row=ws.max_row, column=4).number_format = "#,##0.00"
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()
