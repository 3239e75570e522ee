from __future__ import annotations

from payslip_portal.models.enums import ConcernStatus, UserRole
from payslip_portal.models.internal import ConcernRecord, ConcernResponse, UserRecord
from payslip_portal.services.document_service import require_admin
from payslip_portal.services.ports import ConcernRepository

ANONYMOUS_NAME = "Anonymous User"


class ConcernService:
    """Support tickets between employees and admins."""

    def __init__(self, concerns: ConcernRepository) -> None:
        self.concerns = concerns

    async def _get_visible(self, actor: UserRecord, concern_id: str) -> ConcernRecord:
        concern = await self.concerns.get(concern_id)
        if concern is None:
            raise KeyError(concern_id)
        if actor.role != UserRole.ADMIN and concern.employee_id != actor.id:
            raise KeyError(concern_id)
        return concern

    async def list_concerns(self, actor: UserRecord, *, status: str = "All") -> list[ConcernRecord]:
        if actor.role == UserRole.ADMIN:
            concerns = await self.concerns.list()
        else:
            concerns = await self.concerns.list(employee_id=actor.id)
        if status == "All":
            return concerns
        wanted = ConcernStatus(status)
        return [c for c in concerns if c.status == wanted]

    async def submit(self, actor: UserRecord, subject: str, message: str) -> ConcernRecord:
        if not subject.strip() or not message.strip():
            raise ValueError("Please fill in both the subject and the message.")
        concern = ConcernRecord(
            employee_id=actor.id,
            employee_name=ANONYMOUS_NAME,
            subject=subject.strip(),
            message=message.strip(),
        )
        await self.concerns.add(concern)
        return concern

    async def reply(self, actor: UserRecord, concern_id: str, message: str) -> ConcernRecord:
        """Append a reply; any new activity re-opens the ticket."""

        text = message.strip()
        if not text:
            raise ValueError("Reply message is empty.")
        concern = await self._get_visible(actor, concern_id)
        concern.responses.append(
            ConcernResponse(
                author_id=actor.id,
                author_name=actor.name if actor.role == UserRole.ADMIN else ANONYMOUS_NAME,
                role=actor.role,
                message=text,
            )
        )
        concern.status = ConcernStatus.OPEN
        await self.concerns.save(concern)
        return concern

    async def resolve(self, actor: UserRecord, concern_id: str) -> ConcernRecord:
        require_admin(actor)
        concern = await self._get_visible(actor, concern_id)
        concern.status = ConcernStatus.RESOLVED
        await self.concerns.save(concern)
        return concern

    async def delete(self, actor: UserRecord, concern_id: str) -> None:
        require_admin(actor)
        await self.concerns.delete(concern_id)
