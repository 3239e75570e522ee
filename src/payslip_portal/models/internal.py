from __future__ import annotations

from datetime import UTC, datetime
from uuid import uuid4

from pydantic import Field

from payslip_portal.models.common import StrictModel
from payslip_portal.models.enums import (
    AutoField,
    ConcernStatus,
    DocStatus,
    DocType,
    QueueStatus,
    SubmissionState,
    UserRole,
)


def _new_id() -> str:
    return uuid4().hex[:12]


def _now() -> datetime:
    return datetime.now(UTC)


class UserRecord(StrictModel):
    """Persisted user profile."""

    id: str
    name: str
    email: str
    role: UserRole = UserRole.EMPLOYEE
    joined_at: str = ""
    doc_count: int = 0
    avatar_url: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


class PayrollDocumentRecord(StrictModel):
    """Persisted payroll document owned by one employee."""

    id: str = Field(default_factory=_new_id)
    title: str
    company: str
    employee_id: str
    employee_name: str
    employee_email: str = ""
    upload_date: str
    payroll_period: str = "N/A"
    amount: float = 0.0
    status: DocStatus = DocStatus.PENDING
    type: DocType = DocType.PAY_STUB
    file_url: str | None = None
    storage_path: str | None = None
    created_at: datetime = Field(default_factory=_now)


class ConcernResponse(StrictModel):
    """One reply in a support ticket thread."""

    id: str = Field(default_factory=_new_id)
    author_id: str
    author_name: str
    role: UserRole
    message: str
    created_at: datetime = Field(default_factory=_now)


class ConcernRecord(StrictModel):
    """Support ticket raised by an employee."""

    id: str = Field(default_factory=_new_id)
    employee_id: str
    employee_name: str
    subject: str
    message: str
    status: ConcernStatus = ConcernStatus.OPEN
    created_at: datetime = Field(default_factory=_now)
    responses: list[ConcernResponse] = Field(default_factory=list)


class AuditLogEntry(StrictModel):
    """Admin action trail entry."""

    id: str = Field(default_factory=_new_id)
    action: str
    executor_id: str
    executor_name: str
    target_user_id: str
    target_user_name: str
    details: str
    timestamp: datetime = Field(default_factory=_now)


class QueuedDocument(StrictModel):
    """One file waiting for, or done with, analysis in the upload queue."""

    id: str = Field(default_factory=_new_id)
    file_name: str
    file_size: int = 0
    content: bytes = Field(default=b"", exclude=True, repr=False)
    status: QueueStatus = QueueStatus.PENDING

    title: str = ""
    selected_user_id: str = ""
    is_manual_entry: bool = False
    manual_name: str = ""
    manual_email: str = ""
    doc_type: DocType = DocType.PAY_STUB
    period: str = ""
    amount: str = ""

    extracted_fields: list[AutoField] = Field(default_factory=list)
    error_msg: str | None = None

    @property
    def has_employee(self) -> bool:
        if self.is_manual_entry:
            return bool(self.manual_name.strip() and self.manual_email.strip())
        return bool(self.selected_user_id)


class SubmissionOutcome(StrictModel):
    """Per-item result of submitting a reviewed upload batch."""

    item_id: str
    file_name: str
    state: SubmissionState
    document_id: str | None = None
    reason: str | None = None
