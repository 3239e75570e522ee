from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import Field

from payslip_portal.models.common import StrictModel
from payslip_portal.models.enums import (
    AutoField,
    ConcernStatus,
    DocStatus,
    DocType,
    QueueStatus,
    UserRole,
)
from payslip_portal.models.internal import (
    AuditLogEntry,
    ConcernRecord,
    ConcernResponse,
    PayrollDocumentRecord,
    QueuedDocument,
    SubmissionOutcome,
    UserRecord,
)
from payslip_portal.models.version import SCHEMA_VERSION


class QueueItemResponse(StrictModel):
    """Public view of one queued upload, without file content."""

    id: str
    file_name: str
    file_size: int
    status: QueueStatus
    title: str
    selected_user_id: str
    is_manual_entry: bool
    manual_name: str
    manual_email: str
    doc_type: DocType
    period: str
    amount: str
    extracted_fields: list[AutoField] = Field(default_factory=list)
    error_msg: str | None = None

    @classmethod
    def from_item(cls, item: QueuedDocument) -> "QueueItemResponse":
        return cls(**item.model_dump())


class QueueResponse(StrictModel):
    """Whole upload queue with its active-item pointer."""

    schema_version: Literal["v1"] = SCHEMA_VERSION
    active_id: str | None = None
    items: list[QueueItemResponse] = Field(default_factory=list)


class SubmitResponse(StrictModel):
    """Per-item outcomes of a batch submission."""

    schema_version: Literal["v1"] = SCHEMA_VERSION
    saved_count: int
    outcomes: list[SubmissionOutcome] = Field(default_factory=list)


class DocumentResponse(StrictModel):
    """Document metadata; file bytes are served by the download route."""

    id: str
    title: str
    company: str
    employee_id: str
    employee_name: str
    employee_email: str
    upload_date: str
    payroll_period: str
    amount: float
    status: DocStatus
    type: DocType
    has_file: bool = False
    created_at: datetime

    @classmethod
    def from_record(cls, record: PayrollDocumentRecord) -> "DocumentResponse":
        data = record.model_dump(exclude={"file_url", "storage_path"})
        return cls(**data, has_file=bool(record.file_url))


class DocumentListResponse(StrictModel):
    schema_version: Literal["v1"] = SCHEMA_VERSION
    total: int
    items: list[DocumentResponse]


class DashboardStats(StrictModel):
    """Headline numbers for the dashboard of one user."""

    schema_version: Literal["v1"] = SCHEMA_VERSION
    total_documents: int
    complete_documents: int
    total_amount: float
    status_counts: dict[str, int] = Field(default_factory=dict)
    employee_count: int | None = None
    recent: list[DocumentResponse] = Field(default_factory=list)


class UserResponse(StrictModel):
    id: str
    name: str
    email: str
    role: UserRole
    joined_at: str
    doc_count: int
    avatar_url: str | None = None

    @classmethod
    def from_record(cls, record: UserRecord) -> "UserResponse":
        return cls(**record.model_dump())


class UserListResponse(StrictModel):
    schema_version: Literal["v1"] = SCHEMA_VERSION
    total: int
    admins: int
    employees: int
    items: list[UserResponse]


class AuditLogResponse(StrictModel):
    schema_version: Literal["v1"] = SCHEMA_VERSION
    items: list[AuditLogEntry]


class ConcernView(StrictModel):
    """Support ticket with its reply thread."""

    id: str
    employee_id: str
    employee_name: str
    subject: str
    message: str
    status: ConcernStatus
    created_at: datetime
    responses: list[ConcernResponse] = Field(default_factory=list)

    @classmethod
    def from_record(cls, record: ConcernRecord) -> "ConcernView":
        return cls(**record.model_dump())


class ConcernListResponse(StrictModel):
    schema_version: Literal["v1"] = SCHEMA_VERSION
    total: int
    items: list[ConcernView]
