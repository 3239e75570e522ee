from __future__ import annotations

import base64
import logging
from datetime import date, datetime

from payslip_portal.models.enums import DocStatus, QueueStatus, SubmissionState
from payslip_portal.models.internal import (
    PayrollDocumentRecord,
    QueuedDocument,
    SubmissionOutcome,
    UserRecord,
)
from payslip_portal.services.ports import DocumentRepository, UserRepository
from payslip_portal.services.upload_queue import UploadQueue

logger = logging.getLogger(__name__)

INLINE_STORAGE_PATH = "inline"


class UploadValidationError(ValueError):
    """Reviewed batch is not ready to be written."""


def _format_day(value: date) -> str:
    return f"{value:%b} {value.day}, {value.year}"


def period_to_upload_date(period: str, *, today: date | None = None) -> str:
    """Turn `"Feb 2026"` into `"Feb 1, 2026"`; fall back to today."""

    fallback = _format_day(today or date.today())
    parts = (period or "").split()
    if period.strip() in ("", "N/A") or len(parts) != 2:
        return fallback
    month, year = parts
    for fmt in ("%b %Y", "%B %Y"):
        try:
            return _format_day(datetime.strptime(f"{month} {year}", fmt).date())
        except ValueError:
            continue
    return fallback


def parse_amount(raw: str) -> float:
    try:
        return float(raw)
    except (TypeError, ValueError):
        return 0.0


def to_data_url(content: bytes) -> str:
    return "data:application/pdf;base64," + base64.b64encode(content).decode("ascii")


class UploadService:
    """Writes reviewed queue items one by one with independent outcomes."""

    def __init__(
        self,
        users: UserRepository,
        documents: DocumentRepository,
        *,
        company: str,
        max_inline_bytes: int,
    ) -> None:
        self.users = users
        self.documents = documents
        self.company = company
        self.max_inline_bytes = max_inline_bytes

    def validate(self, items: list[QueuedDocument]) -> None:
        """Reject the batch when analysis is unfinished or owners are missing."""

        if not items:
            raise UploadValidationError("No documents queued.")
        busy = [i for i in items if i.status in (QueueStatus.PENDING, QueueStatus.ANALYZING)]
        if busy:
            raise UploadValidationError(f"{len(busy)} document(s) are still being analyzed.")
        missing = [i for i in items if not i.has_employee]
        if missing:
            raise UploadValidationError(f"Please select an employee for all {len(items)} documents.")

    async def submit(self, queue: UploadQueue, *, today: date | None = None) -> list[SubmissionOutcome]:
        """Validate and write the whole queue, then drop saved items from it."""

        items = queue.items
        self.validate(items)
        outcomes: list[SubmissionOutcome] = []
        for item in items:
            outcomes.append(await self._submit_one(item, today=today))
        queue.remove_many(o.item_id for o in outcomes if o.state == SubmissionState.SAVED)
        saved = sum(1 for o in outcomes if o.state == SubmissionState.SAVED)
        logger.info("Upload batch finished: %d of %d saved", saved, len(outcomes))
        return outcomes

    def build_document(
        self,
        item: QueuedDocument,
        owner: UserRecord,
        *,
        today: date | None = None,
    ) -> PayrollDocumentRecord:
        period = item.period.strip() or "N/A"
        return PayrollDocumentRecord(
            title=item.title.strip() or item.file_name,
            company=self.company,
            employee_id=owner.id,
            employee_name=owner.name,
            employee_email=owner.email,
            upload_date=period_to_upload_date(period, today=today),
            payroll_period=period,
            amount=parse_amount(item.amount),
            status=DocStatus.PROCESSED,
            type=item.doc_type,
            file_url=to_data_url(item.content),
            storage_path=INLINE_STORAGE_PATH,
        )

    async def _submit_one(self, item: QueuedDocument, *, today: date | None) -> SubmissionOutcome:
        def outcome(state: SubmissionState, reason: str | None = None, document_id: str | None = None):
            return SubmissionOutcome(
                item_id=item.id,
                file_name=item.file_name,
                state=state,
                reason=reason,
                document_id=document_id,
            )

        if item.file_size > self.max_inline_bytes:
            return outcome(
                SubmissionState.SKIPPED,
                f"File size ({item.file_size // 1024}KB) exceeds limit of {self.max_inline_bytes // 1024}KB.",
            )
        if item.is_manual_entry:
            # Documents live under their owner; manual entries have none.
            return outcome(SubmissionState.SKIPPED, "Manual entries are not linked to an account.")

        owner = await self.users.get(item.selected_user_id)
        if owner is None:
            return outcome(SubmissionState.FAILED, "Selected employee no longer exists.")

        document = self.build_document(item, owner, today=today)
        try:
            await self.documents.add(document)
        except Exception as exc:
            logger.error("Saving %s failed: %s", item.file_name, exc)
            return outcome(SubmissionState.FAILED, f"Failed to save {item.file_name}.")

        try:
            await self.users.increment_doc_count(owner.id)
        except Exception as exc:
            logger.warning("Document counter update failed for %s: %s", owner.id, exc)
        return outcome(SubmissionState.SAVED, document_id=document.id)
