from __future__ import annotations

import asyncio

import pytest

from payslip_portal.integrations.in_memory import InMemoryConcernRepository
from payslip_portal.models.enums import ConcernStatus, UserRole
from payslip_portal.models.internal import UserRecord
from payslip_portal.services.concern_service import ANONYMOUS_NAME, ConcernService

ADMIN = UserRecord(id="admin", name="Adjoa Admin", email="adjoa@example.com", role=UserRole.ADMIN)
AMA = UserRecord(id="u1", name="Ama Owusu", email="ama@example.com")
KOFI = UserRecord(id="u2", name="Kofi Mensah", email="kofi@example.com")


def _service() -> ConcernService:
    return ConcernService(InMemoryConcernRepository())


def test_submit_requires_subject_and_message() -> None:
    service = _service()
    with pytest.raises(ValueError):
        asyncio.run(service.submit(AMA, "  ", "hello"))
    with pytest.raises(ValueError):
        asyncio.run(service.submit(AMA, "Tax", ""))


def test_concerns_are_anonymous_and_private() -> None:
    service = _service()
    concern = asyncio.run(service.submit(AMA, " Missing bonus ", "My March bonus is missing."))
    assert concern.employee_name == ANONYMOUS_NAME
    assert concern.subject == "Missing bonus"
    assert concern.status == ConcernStatus.OPEN

    assert [c.id for c in asyncio.run(service.list_concerns(AMA))] == [concern.id]
    assert asyncio.run(service.list_concerns(KOFI)) == []
    assert len(asyncio.run(service.list_concerns(ADMIN))) == 1
    with pytest.raises(KeyError):
        asyncio.run(service.reply(KOFI, concern.id, "me too"))


def test_reply_reopens_and_names_admins_only() -> None:
    service = _service()
    concern = asyncio.run(service.submit(AMA, "Tax", "Wrong tax code"))

    asyncio.run(service.reply(ADMIN, concern.id, "Looking into it"))
    asyncio.run(service.resolve(ADMIN, concern.id))
    assert asyncio.run(service.list_concerns(ADMIN, status="Resolved"))[0].id == concern.id

    updated = asyncio.run(service.reply(AMA, concern.id, "Still wrong"))
    assert updated.status == ConcernStatus.OPEN
    assert [r.author_name for r in updated.responses] == ["Adjoa Admin", ANONYMOUS_NAME]
    assert [r.role for r in updated.responses] == [UserRole.ADMIN, UserRole.EMPLOYEE]
    assert asyncio.run(service.list_concerns(ADMIN, status="Resolved")) == []


def test_blank_reply_rejected() -> None:
    service = _service()
    concern = asyncio.run(service.submit(AMA, "Tax", "Wrong tax code"))
    with pytest.raises(ValueError):
        asyncio.run(service.reply(AMA, concern.id, "   "))


def test_resolve_and_delete_are_admin_only() -> None:
    service = _service()
    concern = asyncio.run(service.submit(AMA, "Tax", "Wrong tax code"))
    with pytest.raises(PermissionError):
        asyncio.run(service.resolve(AMA, concern.id))
    with pytest.raises(PermissionError):
        asyncio.run(service.delete(AMA, concern.id))

    asyncio.run(service.delete(ADMIN, concern.id))
    assert asyncio.run(service.list_concerns(ADMIN)) == []
    with pytest.raises(KeyError):
        asyncio.run(service.delete(ADMIN, concern.id))
