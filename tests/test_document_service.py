from __future__ import annotations

import asyncio

import pytest

from payslip_portal.integrations.in_memory import InMemoryDocumentRepository, InMemoryUserRepository
from payslip_portal.models.enums import DocStatus, DocType, UserRole
from payslip_portal.models.internal import PayrollDocumentRecord, UserRecord
from payslip_portal.services.document_service import DocumentService, decode_data_url
from payslip_portal.services.upload_service import to_data_url

ADMIN = UserRecord(id="admin", name="Adjoa Admin", email="adjoa@example.com", role=UserRole.ADMIN)
AMA = UserRecord(id="u1", name="Ama Owusu", email="ama@example.com")
KOFI = UserRecord(id="u2", name="Kofi Mensah", email="kofi@example.com")


def _doc(owner: UserRecord, title: str, **overrides) -> PayrollDocumentRecord:
    values = dict(
        title=title,
        company="Twinhill HQ",
        employee_id=owner.id,
        employee_name=owner.name,
        employee_email=owner.email,
        upload_date="Feb 1, 2026",
        payroll_period="Feb 2026",
        amount=100.0,
        status=DocStatus.PROCESSED,
        file_url=to_data_url(b"%PDF-" + title.encode()),
    )
    values.update(overrides)
    return PayrollDocumentRecord(**values)


def _service(*docs: PayrollDocumentRecord) -> tuple[DocumentService, InMemoryDocumentRepository]:
    documents = InMemoryDocumentRepository()
    for doc in docs:
        asyncio.run(documents.add(doc))
    users = InMemoryUserRepository([ADMIN, AMA, KOFI])
    return DocumentService(documents, users), documents


def test_employee_only_sees_own_documents() -> None:
    ama_doc = _doc(AMA, "AMA_FEB")
    service, _ = _service(ama_doc, _doc(KOFI, "KOFI_FEB"))

    assert [d.id for d in asyncio.run(service.list_documents(AMA))] == [ama_doc.id]
    assert len(asyncio.run(service.list_documents(ADMIN))) == 2


def test_search_matches_owner_fields_for_admins_only() -> None:
    service, _ = _service(_doc(AMA, "FEB_SLIP"), _doc(KOFI, "MAR_SLIP"))

    assert [d.title for d in asyncio.run(service.list_documents(ADMIN, search="kofi"))] == ["MAR_SLIP"]
    assert asyncio.run(service.list_documents(AMA, search="ama")) == []
    assert [d.title for d in asyncio.run(service.list_documents(AMA, search="feb"))] == ["FEB_SLIP"]


def test_type_and_status_filters() -> None:
    bonus = _doc(AMA, "BONUS", type=DocType.BONUS)
    done = _doc(AMA, "DONE", status=DocStatus.COMPLETE)
    service, _ = _service(bonus, done)

    assert [d.id for d in asyncio.run(service.list_documents(ADMIN, doc_type=DocType.BONUS))] == [bonus.id]
    assert [d.id for d in asyncio.run(service.list_documents(ADMIN, status=DocStatus.COMPLETE))] == [done.id]


def test_other_peoples_documents_look_missing() -> None:
    kofi_doc = _doc(KOFI, "KOFI_FEB")
    service, _ = _service(kofi_doc)
    with pytest.raises(KeyError):
        asyncio.run(service.get_document(AMA, kofi_doc.id))


def test_employee_download_marks_document_complete() -> None:
    doc = _doc(AMA, "AMA_FEB")
    service, documents = _service(doc)

    got, content = asyncio.run(service.download(AMA, doc.id))
    assert content == b"%PDF-AMA_FEB"
    assert got.status == DocStatus.COMPLETE
    assert asyncio.run(documents.get(doc.id)).status == DocStatus.COMPLETE


def test_admin_download_keeps_status() -> None:
    doc = _doc(AMA, "AMA_FEB")
    service, documents = _service(doc)
    asyncio.run(service.download(ADMIN, doc.id))
    assert asyncio.run(documents.get(doc.id)).status == DocStatus.PROCESSED


def test_download_without_inline_content_is_missing() -> None:
    doc = _doc(AMA, "NO_FILE", file_url=None)
    service, _ = _service(doc)
    with pytest.raises(KeyError):
        asyncio.run(service.download(AMA, doc.id))


def test_bulk_operations_require_admin() -> None:
    doc = _doc(AMA, "AMA_FEB")
    service, _ = _service(doc)
    with pytest.raises(PermissionError):
        asyncio.run(service.bulk_mark_processed(AMA, [doc.id]))
    with pytest.raises(PermissionError):
        asyncio.run(service.bulk_delete(AMA, [doc.id]))
    with pytest.raises(PermissionError):
        asyncio.run(service.delete_document(AMA, doc.id))


def test_bulk_mark_processed_is_all_or_nothing() -> None:
    doc = _doc(AMA, "AMA_FEB", status=DocStatus.COMPLETE)
    service, documents = _service(doc)

    with pytest.raises(KeyError):
        asyncio.run(service.bulk_mark_processed(ADMIN, [doc.id, "missing"]))
    assert asyncio.run(documents.get(doc.id)).status == DocStatus.COMPLETE

    assert asyncio.run(service.bulk_mark_processed(ADMIN, [doc.id, doc.id])) == 1
    assert asyncio.run(documents.get(doc.id)).status == DocStatus.PROCESSED


def test_bulk_delete_reports_failures() -> None:
    first, second = _doc(AMA, "A"), _doc(KOFI, "B")
    service, documents = _service(first, second)

    failed = asyncio.run(service.bulk_delete(ADMIN, [first.id, "missing", second.id]))
    assert failed == ["missing"]
    assert asyncio.run(documents.list()) == []


def test_select_for_export_uses_selection_or_filters() -> None:
    ama_doc = _doc(AMA, "A")
    kofi_bonus = _doc(KOFI, "B", type=DocType.BONUS)
    kofi_done = _doc(KOFI, "C", status=DocStatus.COMPLETE)
    service, _ = _service(ama_doc, kofi_bonus, kofi_done)

    assert len(asyncio.run(service.select_for_export(ADMIN, None))) == 3
    assert [d.id for d in asyncio.run(service.select_for_export(ADMIN, [ama_doc.id]))] == [ama_doc.id]
    by_search = asyncio.run(service.select_for_export(ADMIN, search="kofi"))
    assert {d.id for d in by_search} == {kofi_bonus.id, kofi_done.id}
    by_type = asyncio.run(service.select_for_export(ADMIN, search="kofi", doc_type=DocType.BONUS))
    assert [d.id for d in by_type] == [kofi_bonus.id]
    by_status = asyncio.run(service.select_for_export(ADMIN, [], status=DocStatus.COMPLETE))
    assert [d.id for d in by_status] == [kofi_done.id]


def test_export_is_admin_only() -> None:
    doc = _doc(AMA, "A")
    service, _ = _service(doc)
    with pytest.raises(PermissionError):
        asyncio.run(service.select_for_export(AMA, None))
    with pytest.raises(PermissionError):
        asyncio.run(service.select_for_export(AMA, [doc.id]))


def test_dashboard_totals() -> None:
    service, _ = _service(
        _doc(AMA, "A", amount=100.5, status=DocStatus.COMPLETE),
        _doc(AMA, "B", amount=200.25),
        _doc(KOFI, "C", amount=50.0),
    )

    admin_stats = asyncio.run(service.dashboard(ADMIN))
    assert admin_stats.total_documents == 3
    assert admin_stats.total_amount == 350.75
    assert admin_stats.complete_documents == 1
    assert admin_stats.employee_count == 3
    assert admin_stats.status_counts["Processed"] == 2

    ama_stats = asyncio.run(service.dashboard(AMA))
    assert ama_stats.total_documents == 2
    assert ama_stats.employee_count is None
    assert len(ama_stats.recent) == 2


def test_decode_data_url_ignores_non_inline_urls() -> None:
    assert decode_data_url("https://files.example.com/a.pdf") is None
    assert decode_data_url("data:application/pdf,raw") is None
    assert decode_data_url(to_data_url(b"abc")) == b"abc"
