"""Public model exports."""

from payslip_portal.models.common import StrictModel
from payslip_portal.models.enums import (
    AutoField,
    ConcernStatus,
    DocStatus,
    DocType,
    Month,
    QueueStatus,
    SubmissionState,
    UserRole,
)
from payslip_portal.models.extraction import (
    ExtractionInput,
    ExtractionResult,
    KnownEmployee,
    PayPeriod,
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

__all__ = [
    "AuditLogEntry",
    "AutoField",
    "ConcernRecord",
    "ConcernResponse",
    "ConcernStatus",
    "DocStatus",
    "DocType",
    "ExtractionInput",
    "ExtractionResult",
    "KnownEmployee",
    "Month",
    "PayPeriod",
    "PayrollDocumentRecord",
    "QueueStatus",
    "QueuedDocument",
    "SCHEMA_VERSION",
    "StrictModel",
    "SubmissionOutcome",
    "SubmissionState",
    "UserRecord",
    "UserRole",
]
