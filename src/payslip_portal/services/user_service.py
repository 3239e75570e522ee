from __future__ import annotations

import logging
from datetime import date

from payslip_portal.models.enums import UserRole
from payslip_portal.models.extraction import KnownEmployee
from payslip_portal.models.internal import AuditLogEntry, UserRecord
from payslip_portal.services.document_service import require_admin
from payslip_portal.services.ports import AuditLogRepository, UserRepository

logger = logging.getLogger(__name__)

ROLE_CHANGE = "ROLE_CHANGE"


class UserService:
    """User directory, role management and the audit trail."""

    def __init__(
        self,
        users: UserRepository,
        audit_log: AuditLogRepository,
        *,
        bootstrap_admins: set[str] | None = None,
    ) -> None:
        self.users = users
        self.audit_log = audit_log
        self.bootstrap_admins = {e.lower() for e in bootstrap_admins or set()}

    async def resolve_actor(self, user_id: str) -> UserRecord:
        """Role lookup for the calling user."""

        user = await self.users.get(user_id)
        if user is None:
            raise KeyError(user_id)
        return user

    async def ensure_profile(
        self,
        user_id: str,
        email: str,
        display_name: str | None = None,
        *,
        today: date | None = None,
    ) -> UserRecord:
        """Return the stored profile, creating it on first sight."""

        existing = await self.users.get(user_id)
        if existing is not None:
            return existing
        role = UserRole.ADMIN if email.strip().lower() in self.bootstrap_admins else UserRole.EMPLOYEE
        joined = today or date.today()
        user = UserRecord(
            id=user_id,
            name=(display_name or "").strip() or email.split("@")[0] or "User",
            email=email,
            role=role,
            joined_at=f"{joined:%b} {joined.year}",
        )
        await self.users.save(user)
        logger.info("Created %s profile for %s", role.value, user_id)
        return user

    async def list_users(self, actor: UserRecord) -> list[UserRecord]:
        if actor.role != UserRole.ADMIN:
            return [actor]
        return sorted(await self.users.list(), key=lambda u: u.name.lower())

    async def known_employees(self, actor: UserRecord) -> list[KnownEmployee]:
        """Names the upload heuristic may match against."""

        return [KnownEmployee(id=u.id, display_name=u.name) for u in await self.list_users(actor)]

    async def toggle_role(self, actor: UserRecord, target_id: str) -> UserRecord:
        """Flip Admin/Employee on another user and record it."""

        require_admin(actor)
        if target_id == actor.id:
            raise ValueError("You cannot change your own role.")
        target = await self.users.get(target_id)
        if target is None:
            raise KeyError(target_id)
        old_role = target.role
        new_role = UserRole.EMPLOYEE if old_role == UserRole.ADMIN else UserRole.ADMIN
        await self.users.set_role(target.id, new_role)
        target.role = new_role
        try:
            await self.audit_log.append(
                AuditLogEntry(
                    action=ROLE_CHANGE,
                    executor_id=actor.id,
                    executor_name=actor.name,
                    target_user_id=target.id,
                    target_user_name=target.name,
                    details=f"Changed role from {old_role.value} to {new_role.value}",
                )
            )
        except Exception as exc:
            logger.error("Failed to write audit log for %s: %s", target.id, exc)
        return target

    async def recent_audit_logs(self, actor: UserRecord, *, limit: int = 20) -> list[AuditLogEntry]:
        require_admin(actor)
        return await self.audit_log.recent(limit=limit)
