from __future__ import annotations

import os
import re
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import BackgroundTasks, FastAPI, File, Header, HTTPException, Query, Request, UploadFile
from fastapi.responses import JSONResponse, Response

from payslip_portal import config
from payslip_portal.exports import documents_to_csv, documents_to_xlsx, export_filename
from payslip_portal.integrations.container import AppContainer, build_container
from payslip_portal.logging_config import setup_logging
from payslip_portal.models.api_requests import (
    ConcernCreateRequest,
    ConcernFilter,
    ConcernReplyRequest,
    DocumentIdsRequest,
    ProfileRequest,
    QueueItemUpdateRequest,
)
from payslip_portal.models.api_responses import (
    AuditLogResponse,
    ConcernListResponse,
    ConcernView,
    DashboardStats,
    DocumentListResponse,
    DocumentResponse,
    QueueItemResponse,
    QueueResponse,
    SubmitResponse,
    UserListResponse,
    UserResponse,
)
from payslip_portal.models.enums import DocStatus, DocType, SubmissionState, UserRole
from payslip_portal.models.internal import UserRecord
from payslip_portal.services.document_service import require_admin
from payslip_portal.services.upload_queue import UploadQueue
from payslip_portal.services.upload_service import UploadValidationError

container: AppContainer = build_container()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Configure logging once the server starts."""

    setup_logging(level=config.LOG_LEVEL)
    yield


app = FastAPI(title="payslip_portal", version="0.1.0", lifespan=lifespan)


@app.exception_handler(PermissionError)
async def permission_error_handler(request: Request, exc: PermissionError) -> JSONResponse:
    return JSONResponse(status_code=403, content={"detail": str(exc) or "forbidden"})


async def _actor(x_user_id: str | None) -> UserRecord:
    """Resolve the caller's profile from the identity header."""

    if not x_user_id:
        raise HTTPException(status_code=401, detail="X-User-Id header is required")
    try:
        return await container.users.resolve_actor(x_user_id)
    except KeyError as exc:
        raise HTTPException(status_code=401, detail="unknown user") from exc


def _queue_response(queue: UploadQueue) -> QueueResponse:
    return QueueResponse(
        active_id=queue.active_id,
        items=[QueueItemResponse.from_item(item) for item in queue.items],
    )


def _inline_analysis_enabled() -> bool:
    return os.getenv("RUN_INLINE_ANALYSIS", "true").lower() == "true"


@app.get("/healthz")
async def healthz() -> dict[str, str]:
    """Lightweight health endpoint for liveness checks."""

    return {"status": "ok"}


# -- Users --------------------------------------------------------------------


@app.post("/v1/profiles", response_model=UserResponse)
async def ensure_profile(req: ProfileRequest) -> UserResponse:
    """Register the signed-in identity on first visit."""

    user = await container.users.ensure_profile(req.user_id, req.email, req.display_name)
    return UserResponse.from_record(user)


@app.get("/v1/me", response_model=UserResponse)
async def me(x_user_id: str | None = Header(None)) -> UserResponse:
    actor = await _actor(x_user_id)
    return UserResponse.from_record(actor)


@app.get("/v1/users", response_model=UserListResponse)
async def list_users(x_user_id: str | None = Header(None)) -> UserListResponse:
    actor = await _actor(x_user_id)
    users = await container.users.list_users(actor)
    return UserListResponse(
        total=len(users),
        admins=sum(1 for u in users if u.role == UserRole.ADMIN),
        employees=sum(1 for u in users if u.role == UserRole.EMPLOYEE),
        items=[UserResponse.from_record(u) for u in users],
    )


@app.post("/v1/users/{user_id}/toggle-role", response_model=UserResponse)
async def toggle_role(user_id: str, x_user_id: str | None = Header(None)) -> UserResponse:
    actor = await _actor(x_user_id)
    try:
        user = await container.users.toggle_role(actor, user_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="user not found") from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return UserResponse.from_record(user)


@app.get("/v1/audit-logs", response_model=AuditLogResponse)
async def audit_logs(limit: int = 20, x_user_id: str | None = Header(None)) -> AuditLogResponse:
    actor = await _actor(x_user_id)
    return AuditLogResponse(items=await container.users.recent_audit_logs(actor, limit=limit))


# -- Upload queue -------------------------------------------------------------


@app.get("/v1/uploads", response_model=QueueResponse)
async def get_upload_queue(x_user_id: str | None = Header(None)) -> QueueResponse:
    actor = await _actor(x_user_id)
    require_admin(actor)
    return _queue_response(container.queue_for(actor.id))


@app.post("/v1/uploads", response_model=QueueResponse)
async def add_uploads(
    background_tasks: BackgroundTasks,
    files: list[UploadFile] = File(...),
    x_user_id: str | None = Header(None),
) -> QueueResponse:
    """Queue PDFs for sequential field extraction."""

    actor = await _actor(x_user_id)
    require_admin(actor)
    queue = container.queue_for(actor.id)
    queue.set_known_employees(await container.users.known_employees(actor))
    payload = []
    for file in files:
        payload.append((file.filename or "document.pdf", await file.read(), file.content_type))
        await file.close()
    try:
        queue.add_files(payload)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if _inline_analysis_enabled():
        background_tasks.add_task(queue.run)
    return _queue_response(queue)


@app.post("/v1/uploads/process", response_model=QueueResponse)
async def process_uploads(x_user_id: str | None = Header(None)) -> QueueResponse:
    """Drain pending items now and return the analysed queue."""

    actor = await _actor(x_user_id)
    require_admin(actor)
    queue = container.queue_for(actor.id)
    await queue.run()
    return _queue_response(queue)


@app.patch("/v1/uploads/{item_id}", response_model=QueueItemResponse)
async def update_upload(
    item_id: str,
    req: QueueItemUpdateRequest,
    x_user_id: str | None = Header(None),
) -> QueueItemResponse:
    actor = await _actor(x_user_id)
    require_admin(actor)
    queue = container.queue_for(actor.id)
    try:
        item = queue.update(item_id, **req.model_dump(exclude_unset=True, exclude_none=True))
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="queue item not found") from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return QueueItemResponse.from_item(item)


@app.delete("/v1/uploads/{item_id}", response_model=QueueResponse)
async def remove_upload(item_id: str, x_user_id: str | None = Header(None)) -> QueueResponse:
    actor = await _actor(x_user_id)
    require_admin(actor)
    queue = container.queue_for(actor.id)
    try:
        queue.remove(item_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="queue item not found") from exc
    return _queue_response(queue)


@app.post("/v1/uploads/submit", response_model=SubmitResponse)
async def submit_uploads(x_user_id: str | None = Header(None)) -> SubmitResponse:
    """Write every reviewed item; each item succeeds or fails on its own."""

    actor = await _actor(x_user_id)
    require_admin(actor)
    queue = container.queue_for(actor.id)
    try:
        outcomes = await container.uploads.submit(queue)
    except UploadValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    saved = sum(1 for o in outcomes if o.state == SubmissionState.SAVED)
    return SubmitResponse(saved_count=saved, outcomes=outcomes)


# -- Documents ----------------------------------------------------------------


@app.get("/v1/documents", response_model=DocumentListResponse)
async def list_documents(
    search: str = "",
    type: DocType | None = None,
    status: DocStatus | None = None,
    x_user_id: str | None = Header(None),
) -> DocumentListResponse:
    actor = await _actor(x_user_id)
    docs = await container.documents.list_documents(actor, search=search, doc_type=type, status=status)
    items = [DocumentResponse.from_record(d) for d in docs]
    return DocumentListResponse(total=len(items), items=items)


@app.get("/v1/documents/export")
async def export_documents(
    format: str = "csv",
    ids: list[str] | None = Query(None),
    search: str = "",
    type: DocType | None = None,
    status: DocStatus | None = None,
    x_user_id: str | None = Header(None),
) -> Response:
    """Export selected (or all filtered) documents as CSV or XLSX."""

    actor = await _actor(x_user_id)
    docs = await container.documents.select_for_export(actor, ids, search=search, doc_type=type, status=status)
    if format == "csv":
        filename = export_filename("csv")
        return Response(
            content=documents_to_csv(docs),
            media_type="text/csv; charset=utf-8",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )
    if format == "xlsx":
        filename = export_filename("xlsx")
        return Response(
            content=documents_to_xlsx(docs),
            media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )
    raise HTTPException(status_code=400, detail="format must be csv or xlsx")


@app.get("/v1/documents/{document_id}/download")
async def download_document(document_id: str, x_user_id: str | None = Header(None)) -> Response:
    """Serve the stored PDF; employees downloading mark it complete."""

    actor = await _actor(x_user_id)
    try:
        doc, content = await container.documents.download(actor, document_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="document not found") from exc
    safe_name = re.sub(r"[^A-Za-z0-9_.-]+", "_", doc.title).strip("_") or doc.id
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{safe_name}.pdf"'},
    )


@app.post("/v1/documents/bulk/processed")
async def bulk_mark_processed(req: DocumentIdsRequest, x_user_id: str | None = Header(None)) -> dict[str, int]:
    actor = await _actor(x_user_id)
    try:
        updated = await container.documents.bulk_mark_processed(actor, req.ids)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="document not found") from exc
    return {"updated": updated}


@app.post("/v1/documents/bulk/delete")
async def bulk_delete(req: DocumentIdsRequest, x_user_id: str | None = Header(None)) -> dict[str, list[str]]:
    actor = await _actor(x_user_id)
    failed = await container.documents.bulk_delete(actor, req.ids)
    return {"failed": failed}


@app.delete("/v1/documents/{document_id}")
async def delete_document(document_id: str, x_user_id: str | None = Header(None)) -> dict[str, str]:
    actor = await _actor(x_user_id)
    try:
        await container.documents.delete_document(actor, document_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="document not found") from exc
    return {"status": "deleted"}


@app.get("/v1/dashboard", response_model=DashboardStats)
async def dashboard(x_user_id: str | None = Header(None)) -> DashboardStats:
    actor = await _actor(x_user_id)
    return await container.documents.dashboard(actor)


# -- Concerns -----------------------------------------------------------------


@app.get("/v1/concerns", response_model=ConcernListResponse)
async def list_concerns(status: ConcernFilter = "All", x_user_id: str | None = Header(None)) -> ConcernListResponse:
    actor = await _actor(x_user_id)
    concerns = await container.concerns.list_concerns(actor, status=status)
    return ConcernListResponse(total=len(concerns), items=[ConcernView.from_record(c) for c in concerns])


@app.post("/v1/concerns", response_model=ConcernView)
async def submit_concern(req: ConcernCreateRequest, x_user_id: str | None = Header(None)) -> ConcernView:
    actor = await _actor(x_user_id)
    try:
        concern = await container.concerns.submit(actor, req.subject, req.message)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return ConcernView.from_record(concern)


@app.post("/v1/concerns/{concern_id}/replies", response_model=ConcernView)
async def reply_concern(
    concern_id: str,
    req: ConcernReplyRequest,
    x_user_id: str | None = Header(None),
) -> ConcernView:
    actor = await _actor(x_user_id)
    try:
        concern = await container.concerns.reply(actor, concern_id, req.message)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="concern not found") from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return ConcernView.from_record(concern)


@app.post("/v1/concerns/{concern_id}/resolve", response_model=ConcernView)
async def resolve_concern(concern_id: str, x_user_id: str | None = Header(None)) -> ConcernView:
    actor = await _actor(x_user_id)
    try:
        concern = await container.concerns.resolve(actor, concern_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="concern not found") from exc
    return ConcernView.from_record(concern)


@app.delete("/v1/concerns/{concern_id}")
async def delete_concern(concern_id: str, x_user_id: str | None = Header(None)) -> dict[str, str]:
    actor = await _actor(x_user_id)
    try:
        await container.concerns.delete(actor, concern_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="concern not found") from exc
    return {"status": "deleted"}


def run() -> None:
    """Local API entrypoint used by script/console command."""

    import uvicorn

    uvicorn.run(
        "payslip_portal.api.main:app",
        host=config.HOST,
        port=config.PORT,
        reload=False,
    )


if __name__ == "__main__":
    run()
