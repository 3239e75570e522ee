from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Callable, Iterable

from payslip_portal.field_extraction import FieldExtractor
from payslip_portal.models.enums import QueueStatus
from payslip_portal.models.extraction import ExtractionResult, KnownEmployee
from payslip_portal.models.internal import QueuedDocument

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset(
    {
        "title",
        "selected_user_id",
        "is_manual_entry",
        "manual_name",
        "manual_email",
        "doc_type",
        "period",
        "amount",
    }
)

StatusListener = Callable[[QueuedDocument], None]


def is_pdf(file_name: str, content_type: str | None) -> bool:
    """Accept by content type when given, by extension otherwise."""

    if content_type:
        return "pdf" in content_type.lower()
    return Path(file_name).suffix.lower() == ".pdf"


class UploadQueue:
    """
    Ordered list of uploaded files analysed strictly one at a time.

    `_active_id` is the only pointer to in-flight work; while it is set no
    other item leaves the pending state.
    """

    def __init__(
        self,
        extractor: FieldExtractor,
        *,
        settle_sec: float = 0.5,
        listener: StatusListener | None = None,
    ) -> None:
        self.extractor = extractor
        self.settle_sec = settle_sec
        self.listener = listener
        self.known_employees: list[KnownEmployee] = []
        self._items: list[QueuedDocument] = []
        self._active_id: str | None = None

    @property
    def items(self) -> list[QueuedDocument]:
        return list(self._items)

    @property
    def active_id(self) -> str | None:
        return self._active_id

    def set_known_employees(self, employees: Iterable[KnownEmployee]) -> None:
        self.known_employees = list(employees)

    def add_files(self, files: Iterable[tuple[str, bytes, str | None]]) -> list[QueuedDocument]:
        """Queue PDFs for analysis; non-PDF files are dropped."""

        default_user = self.known_employees[0].id if len(self.known_employees) == 1 else ""
        added = [
            QueuedDocument(
                file_name=name,
                file_size=len(content),
                content=content,
                selected_user_id=default_user,
            )
            for name, content, content_type in files
            if is_pdf(name, content_type)
        ]
        if not added:
            raise ValueError("Only PDF files are supported.")
        self._items.extend(added)
        logger.info("Queued %d file(s), %d pending", len(added), len(self.pending()))
        return added

    def get(self, item_id: str) -> QueuedDocument:
        for item in self._items:
            if item.id == item_id:
                return item
        raise KeyError(item_id)

    def pending(self) -> list[QueuedDocument]:
        return [item for item in self._items if item.status == QueueStatus.PENDING]

    def update(self, item_id: str, **changes: Any) -> QueuedDocument:
        """Apply reviewer edits to one item."""

        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"fields not editable: {', '.join(sorted(unknown))}")
        item = self.get(item_id)
        validated = QueuedDocument.model_validate({**item.model_dump(), **changes, "content": item.content})
        # Mutate in place so an in-flight analysis still sees the same object.
        for key in changes:
            setattr(item, key, getattr(validated, key))
        return item

    def remove(self, item_id: str) -> None:
        """Drop an item; in-flight analysis of it still runs to completion."""

        item = self.get(item_id)
        self._items.remove(item)

    def remove_many(self, item_ids: Iterable[str]) -> None:
        ids = set(item_ids)
        self._items = [item for item in self._items if item.id not in ids]

    def _set_status(self, item: QueuedDocument, status: QueueStatus) -> None:
        item.status = status
        if self.listener is not None:
            self.listener(item)

    async def process_next(self) -> QueuedDocument | None:
        """Analyse the oldest pending item; no-op while another one is active."""

        if self._active_id is not None:
            return None
        pending = self.pending()
        if not pending:
            return None
        item = pending[0]
        self._active_id = item.id
        self._set_status(item, QueueStatus.ANALYZING)
        try:
            result = await asyncio.to_thread(
                self.extractor.analyze,
                item.file_name,
                item.content,
                list(self.known_employees),
            )
            self._apply_result(item, result)
        finally:
            await asyncio.sleep(self.settle_sec)
            self._active_id = None
        return item

    async def run(self) -> list[QueuedDocument]:
        """Drain every pending item in FIFO order."""

        processed: list[QueuedDocument] = []
        while True:
            item = await self.process_next()
            if item is None:
                return processed
            processed.append(item)

    def _apply_result(self, item: QueuedDocument, result: ExtractionResult) -> None:
        item.title = result.title
        item.extracted_fields = list(result.fields_auto_filled)
        if result.error:
            item.error_msg = result.error
            self._set_status(item, QueueStatus.ERROR)
            return
        item.amount = result.amount or ""
        item.period = result.period.label if result.period else ""
        item.selected_user_id = result.matched_employee_id or ""
        item.manual_name = ""
        item.is_manual_entry = False
        item.error_msg = None
        self._set_status(item, QueueStatus.SUCCESS)
