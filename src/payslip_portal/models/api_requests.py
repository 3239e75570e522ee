from __future__ import annotations

from typing import Annotated, Literal

from pydantic import Field

from payslip_portal.models.common import StrictModel
from payslip_portal.models.enums import DocType


class QueueItemUpdateRequest(StrictModel):
    """Reviewer edits for one queued upload; unset fields are left alone."""

    title: str | None = None
    selected_user_id: str | None = None
    is_manual_entry: bool | None = None
    manual_name: str | None = None
    manual_email: str | None = None
    doc_type: DocType | None = None
    period: str | None = None
    amount: str | None = None


class DocumentIdsRequest(StrictModel):
    """Selection of documents for a bulk action."""

    ids: Annotated[list[str], Field(min_length=1)]


class ConcernCreateRequest(StrictModel):
    """New support ticket."""

    subject: str
    message: str


class ConcernReplyRequest(StrictModel):
    """Reply appended to a ticket thread."""

    message: str


ConcernFilter = Literal["All", "Open", "Resolved"]


class ProfileRequest(StrictModel):
    """Identity handed over by the external auth provider after sign-in."""

    user_id: str = Field(min_length=1)
    email: str = Field(min_length=3)
    display_name: str | None = None
