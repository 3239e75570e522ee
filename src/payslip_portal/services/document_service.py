from __future__ import annotations

import base64
import logging

from payslip_portal.models.api_responses import DashboardStats, DocumentResponse
from payslip_portal.models.enums import DocStatus, DocType, UserRole
from payslip_portal.models.internal import PayrollDocumentRecord, UserRecord
from payslip_portal.services.ports import DocumentRepository, UserRepository

logger = logging.getLogger(__name__)

RECENT_LIMIT = 5


def require_admin(actor: UserRecord) -> None:
    if actor.role != UserRole.ADMIN:
        raise PermissionError("admin role required")


def decode_data_url(file_url: str | None) -> bytes | None:
    """Return file bytes stored as a base64 data URL, if any."""

    if not file_url or not file_url.startswith("data:") or "," not in file_url:
        return None
    header, payload = file_url.split(",", 1)
    if not header.endswith(";base64"):
        return None
    return base64.b64decode(payload)


class DocumentService:
    """Role-aware access to payroll documents."""

    def __init__(self, documents: DocumentRepository, users: UserRepository) -> None:
        self.documents = documents
        self.users = users

    async def _visible(self, actor: UserRecord) -> list[PayrollDocumentRecord]:
        if actor.role == UserRole.ADMIN:
            return await self.documents.list()
        return await self.documents.list(employee_id=actor.id)

    async def list_documents(
        self,
        actor: UserRecord,
        *,
        search: str = "",
        doc_type: DocType | None = None,
        status: DocStatus | None = None,
    ) -> list[PayrollDocumentRecord]:
        """Documents the actor may see, filtered like the documents table."""

        term = search.strip().lower()
        result = []
        for doc in await self._visible(actor):
            haystacks = [doc.title]
            if actor.role == UserRole.ADMIN:
                haystacks += [doc.employee_name, doc.employee_email]
            if term and not any(term in h.lower() for h in haystacks):
                continue
            if doc_type is not None and doc.type != doc_type:
                continue
            if status is not None and doc.status != status:
                continue
            result.append(doc)
        return result

    async def get_document(self, actor: UserRecord, document_id: str) -> PayrollDocumentRecord:
        doc = await self.documents.get(document_id)
        if doc is None:
            raise KeyError(document_id)
        if actor.role != UserRole.ADMIN and doc.employee_id != actor.id:
            # Hide existence of other people's documents.
            raise KeyError(document_id)
        return doc

    async def acknowledge_download(self, actor: UserRecord, document_id: str) -> PayrollDocumentRecord:
        """Employee downloads mark their document complete."""

        doc = await self.get_document(actor, document_id)
        if actor.role == UserRole.EMPLOYEE and doc.status != DocStatus.COMPLETE:
            await self.documents.set_status(doc.id, DocStatus.COMPLETE)
            doc.status = DocStatus.COMPLETE
        return doc

    async def download(self, actor: UserRecord, document_id: str) -> tuple[PayrollDocumentRecord, bytes]:
        doc = await self.acknowledge_download(actor, document_id)
        content = decode_data_url(doc.file_url)
        if content is None:
            raise KeyError(document_id)
        return doc, content

    async def bulk_mark_processed(self, actor: UserRecord, document_ids: list[str]) -> int:
        require_admin(actor)
        ids = list(dict.fromkeys(document_ids))
        await self.documents.set_status_many(ids, DocStatus.PROCESSED)
        return len(ids)

    async def delete_document(self, actor: UserRecord, document_id: str) -> None:
        require_admin(actor)
        await self.documents.delete(document_id)
        logger.info("Document %s deleted by %s", document_id, actor.id)

    async def bulk_delete(self, actor: UserRecord, document_ids: list[str]) -> list[str]:
        """Delete each id independently; returns ids that could not be deleted."""

        require_admin(actor)
        failed: list[str] = []
        for document_id in dict.fromkeys(document_ids):
            try:
                await self.delete_document(actor, document_id)
            except KeyError:
                failed.append(document_id)
        return failed

    async def select_for_export(
        self,
        actor: UserRecord,
        document_ids: list[str] | None = None,
        *,
        search: str = "",
        doc_type: DocType | None = None,
        status: DocStatus | None = None,
    ) -> list[PayrollDocumentRecord]:
        """Explicit selection wins; otherwise export the filtered table rows."""

        require_admin(actor)
        if not document_ids:
            return await self.list_documents(actor, search=search, doc_type=doc_type, status=status)
        wanted = set(document_ids)
        return [doc for doc in await self._visible(actor) if doc.id in wanted]

    async def dashboard(self, actor: UserRecord) -> DashboardStats:
        docs = await self._visible(actor)
        counts = {status.value: 0 for status in DocStatus}
        for doc in docs:
            counts[doc.status.value] += 1
        employee_count = None
        if actor.role == UserRole.ADMIN:
            employee_count = len(await self.users.list())
        return DashboardStats(
            total_documents=len(docs),
            complete_documents=counts[DocStatus.COMPLETE.value],
            total_amount=round(sum(doc.amount for doc in docs), 2),
            status_counts=counts,
            employee_count=employee_count,
            recent=[DocumentResponse.from_record(doc) for doc in docs[:RECENT_LIMIT]],
        )
