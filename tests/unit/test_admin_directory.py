"""Unit tests for the admin lifecycle state machine"""

import pytest
from datetime import datetime, timedelta, timezone
from sqlalchemy import select

from wallet_gateway.config import settings
from wallet_gateway.domain.exceptions import (
    AccessDenied,
    AdminCreationError,
    AdminNotFound,
    AlreadyActivated,
    AlreadyDeactivated,
)
from wallet_gateway.domain.models import Role
from wallet_gateway.infrastructure.database.models import Admin
from wallet_gateway.infrastructure.security.passwords import password_hasher
from wallet_gateway.services.admin_directory import AdminDirectory


FIXED_TIME = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
ROOT = "ROOT-ADMIN01"


async def is_active(session_factory, code: str) -> bool:
    async with session_factory() as session:
        result = await session.execute(select(Admin.is_active).where(Admin.code == code))
        active = result.scalar_one()
        await session.commit()
        return active


@pytest.fixture
async def root_admin(make_admin):
    """Active super admin performing state changes"""
    return await make_admin(ROOT, role=Role.SUPER)


async def test_create_admin_starts_active(db):
    admin = await AdminDirectory(db).create("Alice", "s3cret-pass", Role.SUPER)

    assert admin.is_active is True
    assert admin.role == "super"
    assert len(admin.code) == settings.admin_code_length
    assert admin.password_hash != "s3cret-pass"
    assert password_hasher.verify(admin.password_hash, "s3cret-pass")


async def test_create_admin_defaults_to_standard_role(db):
    admin = await AdminDirectory(db).create("Bob", "s3cret-pass")
    assert admin.role == Role.STANDARD.value


async def test_code_collision_retries_with_fresh_timestamp(db):
    """Second create sees the first code, then succeeds on a new timestamp"""
    times = iter([FIXED_TIME, FIXED_TIME, FIXED_TIME + timedelta(seconds=1)])
    directory = AdminDirectory(db, clock=lambda: next(times))

    first = await directory.create("Alice", "s3cret-pass")
    first_code = first.code
    second = await directory.create("Alice", "s3cret-pass")

    assert second.code != first_code
    assert len(await directory.find_all()) == 2


async def test_code_collision_exhausts_attempts(db):
    directory = AdminDirectory(db, clock=lambda: FIXED_TIME)
    await directory.create("Alice", "s3cret-pass")

    with pytest.raises(AdminCreationError):
        await directory.create("Alice", "s3cret-pass")

    assert len(await directory.find_all()) == 1


async def test_find_by_code(db, make_admin):
    await make_admin("ADMIN-A")

    admin = await AdminDirectory(db).find_by_code("ADMIN-A")
    assert admin.code == "ADMIN-A"


async def test_find_by_code_not_found(db):
    with pytest.raises(AdminNotFound):
        await AdminDirectory(db).find_by_code("MISSING")


async def test_find_all(db, make_admin):
    await make_admin("ADMIN-A")
    await make_admin("ADMIN-B", role=Role.SUPER)

    codes = {a.code for a in await AdminDirectory(db).find_all()}
    assert codes == {"ADMIN-A", "ADMIN-B"}


async def test_deactivate_then_reactivate(db, make_admin, session_factory, root_admin):
    await make_admin("ADMIN-A")
    directory = AdminDirectory(db)

    deactivated = await directory.deactivate("ADMIN-A", ROOT)
    assert deactivated.is_active is False
    assert await is_active(session_factory, "ADMIN-A") is False

    activated = await directory.activate("ADMIN-A", ROOT)
    assert activated.is_active is True
    assert await is_active(session_factory, "ADMIN-A") is True


async def test_activate_active_admin_rejected(db, make_admin, session_factory, root_admin):
    await make_admin("ADMIN-A")

    with pytest.raises(AlreadyActivated):
        await AdminDirectory(db).activate("ADMIN-A", ROOT)

    assert await is_active(session_factory, "ADMIN-A") is True


async def test_deactivate_deactivated_admin_rejected(db, make_admin, session_factory, root_admin):
    await make_admin("ADMIN-A", is_active=False)

    with pytest.raises(AlreadyDeactivated):
        await AdminDirectory(db).deactivate("ADMIN-A", ROOT)

    assert await is_active(session_factory, "ADMIN-A") is False


@pytest.mark.parametrize("action", ["activate", "deactivate"])
async def test_transition_unknown_admin(db, action, root_admin):
    with pytest.raises(AdminNotFound):
        await getattr(AdminDirectory(db), action)("MISSING", ROOT)


async def test_list_users_for_admin(db, make_admin, make_user):
    await make_admin("ADMIN-A")
    await make_admin("ADMIN-B")
    await make_user("u1@example.com", "ADMIN-A")
    await make_user("u2@example.com", "ADMIN-A")
    await make_user("u3@example.com", "ADMIN-B")

    users = await AdminDirectory(db).list_users("ADMIN-A")
    assert sorted(u.email for u in users) == ["u1@example.com", "u2@example.com"]


async def test_list_users_unknown_admin(db):
    with pytest.raises(AdminNotFound):
        await AdminDirectory(db).list_users("MISSING")


async def test_deactivated_super_cannot_reactivate_itself(db, make_admin, session_factory):
    await make_admin("SUPER-B", role=Role.SUPER, is_active=False)

    with pytest.raises(AccessDenied):
        await AdminDirectory(db).activate("SUPER-B", "SUPER-B")

    assert await is_active(session_factory, "SUPER-B") is False


async def test_deactivated_super_cannot_deactivate_others(db, make_admin, session_factory):
    await make_admin("SUPER-B", role=Role.SUPER, is_active=False)
    await make_admin("ADMIN-A")

    with pytest.raises(AccessDenied):
        await AdminDirectory(db).deactivate("ADMIN-A", "SUPER-B")

    assert await is_active(session_factory, "ADMIN-A") is True


async def test_standard_admin_cannot_change_state(db, make_admin, session_factory):
    """Role is read from the stored admin, whatever the session claims"""
    await make_admin("ADMIN-A")
    await make_admin("ADMIN-B")

    with pytest.raises(AccessDenied):
        await AdminDirectory(db).deactivate("ADMIN-B", "ADMIN-A")

    assert await is_active(session_factory, "ADMIN-B") is True


@pytest.mark.parametrize("action", ["activate", "deactivate"])
async def test_unknown_acting_admin_denied(db, make_admin, action):
    await make_admin("ADMIN-A", is_active=False)

    with pytest.raises(AccessDenied):
        await getattr(AdminDirectory(db), action)("ADMIN-A", "NOBODY")


async def test_super_admin_may_deactivate_itself(db, root_admin, session_factory):
    admin = await AdminDirectory(db).deactivate(ROOT, ROOT)

    assert admin.is_active is False
    assert await is_active(session_factory, ROOT) is False
