from __future__ import annotations

from typing import Protocol

from payslip_portal.contracts import PageFragments
from payslip_portal.models.enums import DocStatus, UserRole
from payslip_portal.models.internal import (
    AuditLogEntry,
    ConcernRecord,
    PayrollDocumentRecord,
    UserRecord,
)


class TextLayerReader(Protocol):
    """Reads positioned text fragments from raw PDF bytes."""

    def read_pages(self, data: bytes) -> list[PageFragments]:
        """Return fragments for the leading pages of a document."""

        ...


class UserRepository(Protocol):
    """Persistence contract for user profiles."""

    async def get(self, user_id: str) -> UserRecord | None:
        """Load one user by id."""

        ...

    async def save(self, user: UserRecord) -> None:
        """Insert or replace a user profile."""

        ...

    async def list(self) -> list[UserRecord]:
        """List all users."""

        ...

    async def set_role(self, user_id: str, role: UserRole) -> None:
        """Update a user's role."""

        ...

    async def increment_doc_count(self, user_id: str, amount: int = 1) -> None:
        """Bump the stored document counter of a user."""

        ...


class DocumentRepository(Protocol):
    """Persistence contract for payroll documents."""

    async def add(self, document: PayrollDocumentRecord) -> None:
        """Persist a new document."""

        ...

    async def get(self, document_id: str) -> PayrollDocumentRecord | None:
        """Load one document by id."""

        ...

    async def list(self, *, employee_id: str | None = None) -> list[PayrollDocumentRecord]:
        """List documents, optionally for one owner only."""

        ...

    async def set_status(self, document_id: str, status: DocStatus) -> None:
        """Update one document status."""

        ...

    async def set_status_many(self, document_ids: list[str], status: DocStatus) -> None:
        """Update several document statuses as one batch."""

        ...

    async def delete(self, document_id: str) -> None:
        """Remove one document."""

        ...


class ConcernRepository(Protocol):
    """Persistence contract for support tickets."""

    async def add(self, concern: ConcernRecord) -> None:
        """Persist a new ticket."""

        ...

    async def get(self, concern_id: str) -> ConcernRecord | None:
        """Load one ticket by id."""

        ...

    async def save(self, concern: ConcernRecord) -> None:
        """Replace an existing ticket."""

        ...

    async def list(self, *, employee_id: str | None = None) -> list[ConcernRecord]:
        """List tickets, optionally raised by one employee only."""

        ...

    async def delete(self, concern_id: str) -> None:
        """Remove one ticket."""

        ...


class AuditLogRepository(Protocol):
    """Append-only audit trail."""

    async def append(self, entry: AuditLogEntry) -> None:
        """Record one entry."""

        ...

    async def recent(self, *, limit: int = 20) -> list[AuditLogEntry]:
        """Newest entries first."""

        ...
