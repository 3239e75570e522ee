from __future__ import annotations

from enum import Enum


class UserRole(str, Enum):
    """Portal roles stored on each user profile."""

    ADMIN = "Admin"
    EMPLOYEE = "Employee"

    @classmethod
    def _missing_(cls, value: object) -> "UserRole | None":
        # Older profiles store roles in lowercase.
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.strip().lower():
                    return member
        return None


class DocStatus(str, Enum):
    """Lifecycle status of a payroll document."""

    PENDING = "Pending"
    PROCESSED = "Processed"  # Uploaded and assigned by an admin.
    SENT = "Sent"
    COMPLETE = "Complete"  # Downloaded by the employee.


class DocType(str, Enum):
    """Kinds of payroll documents."""

    PAY_STUB = "Pay Stub"
    BONUS = "Bonus"
    ALLOWANCE = "Allowance"


class ConcernStatus(str, Enum):
    """Support ticket status."""

    OPEN = "Open"
    RESOLVED = "Resolved"


class QueueStatus(str, Enum):
    """State of one file in the upload analysis queue."""

    PENDING = "pending"  # Waiting for its turn.
    ANALYZING = "analyzing"  # Text extraction is running.
    SUCCESS = "success"
    ERROR = "error"  # Extraction failed, fields stay manually editable.


class AutoField(str, Enum):
    """Review fields that can be pre-filled from document content."""

    TITLE = "title"
    AMOUNT = "amount"
    PERIOD = "period"
    EMPLOYEE = "employee"


class Month(str, Enum):
    """Three-letter month labels used in payroll periods."""

    JAN = "Jan"
    FEB = "Feb"
    MAR = "Mar"
    APR = "Apr"
    MAY = "May"
    JUN = "Jun"
    JUL = "Jul"
    AUG = "Aug"
    SEP = "Sep"
    OCT = "Oct"
    NOV = "Nov"
    DEC = "Dec"


class SubmissionState(str, Enum):
    """Outcome of writing one reviewed queue item."""

    SAVED = "saved"
    SKIPPED = "skipped"
    FAILED = "failed"
