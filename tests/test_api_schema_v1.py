"""Contract tests for the v1 request/response schema."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from payslip_portal.models.api_requests import DocumentIdsRequest, ProfileRequest, QueueItemUpdateRequest
from payslip_portal.models.api_responses import DocumentResponse, QueueItemResponse
from payslip_portal.models.extraction import PayPeriod
from payslip_portal.models.internal import PayrollDocumentRecord, QueuedDocument


def _get_app():
    """Lazily import FastAPI app to allow model-only tests without web deps."""

    pytest.importorskip("fastapi")
    from payslip_portal.api.main import app

    return app


def test_unknown_fields_are_rejected() -> None:
    """Request models forbid extra keys."""

    with pytest.raises(ValidationError):
        QueueItemUpdateRequest(title="A", status="success")


def test_bulk_request_needs_at_least_one_id() -> None:
    with pytest.raises(ValidationError):
        DocumentIdsRequest(ids=[])


def test_profile_request_requires_user_id() -> None:
    with pytest.raises(ValidationError):
        ProfileRequest(user_id="", email="a@example.com")


def test_pay_period_year_must_have_four_digits() -> None:
    assert PayPeriod(month="Feb", year="2026").label == "Feb 2026"
    with pytest.raises(ValidationError):
        PayPeriod(month="Feb", year="26")
    with pytest.raises(ValidationError):
        PayPeriod(month="February", year="2026")


def test_queue_item_response_never_carries_file_bytes() -> None:
    item = QueuedDocument(file_name="a.pdf", file_size=3, content=b"abc")
    dumped = QueueItemResponse.from_item(item).model_dump()
    assert "content" not in dumped
    assert dumped["file_size"] == 3


def test_document_response_hides_storage_fields() -> None:
    record = PayrollDocumentRecord(
        title="A",
        company="Twinhill HQ",
        employee_id="u1",
        employee_name="Ama",
        upload_date="Feb 1, 2026",
        file_url="data:application/pdf;base64,YWJj",
        storage_path="inline",
    )
    dumped = DocumentResponse.from_record(record).model_dump()
    assert "file_url" not in dumped
    assert "storage_path" not in dumped
    assert dumped["has_file"] is True


def test_openapi_lists_v1_routes() -> None:
    paths = _get_app().openapi()["paths"]
    for path in (
        "/healthz",
        "/v1/uploads",
        "/v1/uploads/submit",
        "/v1/documents",
        "/v1/documents/export",
        "/v1/concerns",
        "/v1/users/{user_id}/toggle-role",
    ):
        assert path in paths
