from __future__ import annotations

from dataclasses import dataclass, field

from payslip_portal import config
from payslip_portal.field_extraction import FieldExtractor
from payslip_portal.integrations.in_memory import (
    InMemoryAuditLogRepository,
    InMemoryConcernRepository,
    InMemoryDocumentRepository,
    InMemoryUserRepository,
)
from payslip_portal.services.concern_service import ConcernService
from payslip_portal.services.document_service import DocumentService
from payslip_portal.services.upload_queue import UploadQueue
from payslip_portal.services.upload_service import UploadService
from payslip_portal.services.user_service import UserService
from payslip_portal.text_extraction import PyMuPDFTextLayerReader


@dataclass
class AppContainer:
    """Runtime dependency container for API/CLI wiring."""

    users_repo: InMemoryUserRepository
    documents_repo: InMemoryDocumentRepository
    concerns_repo: InMemoryConcernRepository
    audit_repo: InMemoryAuditLogRepository
    extractor: FieldExtractor
    users: UserService
    documents: DocumentService
    concerns: ConcernService
    uploads: UploadService
    settle_sec: float = 0.5
    queues: dict[str, UploadQueue] = field(default_factory=dict)

    def queue_for(self, user_id: str) -> UploadQueue:
        """Each uploader reviews their own queue."""

        if user_id not in self.queues:
            self.queues[user_id] = UploadQueue(self.extractor, settle_sec=self.settle_sec)
        return self.queues[user_id]


def build_container(*, settle_sec: float | None = None) -> AppContainer:
    """Create default in-memory runtime container for local execution."""

    users_repo = InMemoryUserRepository()
    documents_repo = InMemoryDocumentRepository()
    concerns_repo = InMemoryConcernRepository()
    audit_repo = InMemoryAuditLogRepository()
    extractor = FieldExtractor(PyMuPDFTextLayerReader(max_pages=config.MAX_PAGES), max_pages=config.MAX_PAGES)
    return AppContainer(
        users_repo=users_repo,
        documents_repo=documents_repo,
        concerns_repo=concerns_repo,
        audit_repo=audit_repo,
        extractor=extractor,
        users=UserService(users_repo, audit_repo, bootstrap_admins=config.BOOTSTRAP_ADMIN_EMAILS),
        documents=DocumentService(documents_repo, users_repo),
        concerns=ConcernService(concerns_repo),
        uploads=UploadService(
            users_repo,
            documents_repo,
            company=config.COMPANY_NAME,
            max_inline_bytes=config.MAX_INLINE_BYTES,
        ),
        settle_sec=config.QUEUE_SETTLE_SEC if settle_sec is None else settle_sec,
    )
