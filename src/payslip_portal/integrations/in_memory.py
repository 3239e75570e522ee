from __future__ import annotations

import asyncio

from payslip_portal.models.enums import DocStatus, UserRole
from payslip_portal.models.internal import (
    AuditLogEntry,
    ConcernRecord,
    PayrollDocumentRecord,
    UserRecord,
)


class InMemoryUserRepository:
    """In-memory user store for local development and tests."""

    def __init__(self, users: list[UserRecord] | None = None) -> None:
        self._items: dict[str, UserRecord] = {u.id: u for u in users or []}
        self._lock = asyncio.Lock()

    async def get(self, user_id: str) -> UserRecord | None:
        async with self._lock:
            return self._items.get(user_id)

    async def save(self, user: UserRecord) -> None:
        async with self._lock:
            self._items[user.id] = user

    async def list(self) -> list[UserRecord]:
        async with self._lock:
            return list(self._items.values())

    async def set_role(self, user_id: str, role: UserRole) -> None:
        async with self._lock:
            user = self._items.get(user_id)
            if user is None:
                raise KeyError(user_id)
            user.role = role

    async def increment_doc_count(self, user_id: str, amount: int = 1) -> None:
        async with self._lock:
            user = self._items.get(user_id)
            if user is None:
                raise KeyError(user_id)
            user.doc_count += amount


class InMemoryDocumentRepository:
    """In-memory document store, newest first."""

    def __init__(self) -> None:
        self._items: dict[str, PayrollDocumentRecord] = {}
        self._lock = asyncio.Lock()

    async def add(self, document: PayrollDocumentRecord) -> None:
        async with self._lock:
            self._items[document.id] = document

    async def get(self, document_id: str) -> PayrollDocumentRecord | None:
        async with self._lock:
            return self._items.get(document_id)

    async def list(self, *, employee_id: str | None = None) -> list[PayrollDocumentRecord]:
        async with self._lock:
            values = [d for d in self._items.values() if employee_id is None or d.employee_id == employee_id]
            return sorted(values, key=lambda d: d.created_at, reverse=True)

    async def set_status(self, document_id: str, status: DocStatus) -> None:
        async with self._lock:
            document = self._items.get(document_id)
            if document is None:
                raise KeyError(document_id)
            document.status = status

    async def set_status_many(self, document_ids: list[str], status: DocStatus) -> None:
        async with self._lock:
            missing = [doc_id for doc_id in document_ids if doc_id not in self._items]
            if missing:
                raise KeyError(missing[0])
            # All-or-nothing, like a committed write batch.
            for doc_id in document_ids:
                self._items[doc_id].status = status

    async def delete(self, document_id: str) -> None:
        async with self._lock:
            if self._items.pop(document_id, None) is None:
                raise KeyError(document_id)


class InMemoryConcernRepository:
    """In-memory support ticket store, newest first."""

    def __init__(self) -> None:
        self._items: dict[str, ConcernRecord] = {}
        self._lock = asyncio.Lock()

    async def add(self, concern: ConcernRecord) -> None:
        async with self._lock:
            self._items[concern.id] = concern

    async def get(self, concern_id: str) -> ConcernRecord | None:
        async with self._lock:
            return self._items.get(concern_id)

    async def save(self, concern: ConcernRecord) -> None:
        async with self._lock:
            self._items[concern.id] = concern

    async def list(self, *, employee_id: str | None = None) -> list[ConcernRecord]:
        async with self._lock:
            values = [c for c in self._items.values() if employee_id is None or c.employee_id == employee_id]
            return sorted(values, key=lambda c: c.created_at, reverse=True)

    async def delete(self, concern_id: str) -> None:
        async with self._lock:
            if self._items.pop(concern_id, None) is None:
                raise KeyError(concern_id)


class InMemoryAuditLogRepository:
    """Append-only in-memory audit trail."""

    def __init__(self) -> None:
        self._items: list[AuditLogEntry] = []
        self._lock = asyncio.Lock()

    async def append(self, entry: AuditLogEntry) -> None:
        async with self._lock:
            self._items.append(entry)

    async def recent(self, *, limit: int = 20) -> list[AuditLogEntry]:
        async with self._lock:
            return sorted(self._items, key=lambda e: e.timestamp, reverse=True)[:limit]
