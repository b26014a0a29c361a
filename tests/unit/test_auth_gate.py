"""Unit tests for login and session tokens"""

import pytest
from datetime import timedelta
from unittest.mock import patch
from sqlalchemy.exc import OperationalError

from conftest import DEFAULT_PASSWORD
from wallet_gateway.domain.exceptions import AccessDenied
from wallet_gateway.domain.models import Role, SessionClaims
from wallet_gateway.infrastructure.security.tokens import SessionTokens
from wallet_gateway.services.auth_gate import AuthGate
from wallet_gateway.utils.date_utils import utc_now


async def test_login_returns_claims(db, make_admin):
    await make_admin("ADMIN-S", role=Role.SUPER)

    claims = await AuthGate(db).login("ADMIN-S", DEFAULT_PASSWORD)

    assert claims == SessionClaims(admin_code="ADMIN-S", role=Role.SUPER)
    assert claims.is_super


async def test_login_allowed_for_deactivated_admin(db, make_admin):
    """Activation gates operations, not login"""
    await make_admin("ADMIN-A", is_active=False)

    claims = await AuthGate(db).login("ADMIN-A", DEFAULT_PASSWORD)
    assert claims.admin_code == "ADMIN-A"


async def test_wrong_password_and_unknown_code_look_identical(db, make_admin):
    await make_admin("ADMIN-A")
    gate = AuthGate(db)

    with pytest.raises(AccessDenied) as wrong_password:
        await gate.login("ADMIN-A", "not-the-password")
    with pytest.raises(AccessDenied) as unknown_code:
        await gate.login("NOBODY", DEFAULT_PASSWORD)

    assert wrong_password.value.detail == unknown_code.value.detail


async def test_store_failure_during_login_is_masked(db, make_admin):
    await make_admin("ADMIN-A")

    with patch(
        "wallet_gateway.infrastructure.database.repositories.AdminRepository.get_by_code",
        side_effect=OperationalError("SELECT", {}, Exception("database is locked")),
    ):
        with pytest.raises(AccessDenied) as exc_info:
            await AuthGate(db).login("ADMIN-A", DEFAULT_PASSWORD)

    assert exc_info.value.__cause__ is None


def test_session_round_trip():
    tokens = SessionTokens(secret="test-secret")
    claims = SessionClaims(admin_code="ADMIN-A", role=Role.STANDARD)

    assert tokens.resolve(tokens.issue(claims)) == claims


def test_tampered_token_rejected():
    tokens = SessionTokens(secret="test-secret")
    token = tokens.issue(SessionClaims(admin_code="ADMIN-A", role=Role.STANDARD))
    header, payload, signature = token.split(".")
    forged = ".".join([header, payload, signature[::-1]])

    with pytest.raises(AccessDenied):
        tokens.resolve(forged)


def test_token_from_other_secret_rejected():
    token = SessionTokens(secret="other-secret").issue(SessionClaims(admin_code="ADMIN-A", role=Role.SUPER))

    with pytest.raises(AccessDenied):
        SessionTokens(secret="test-secret").resolve(token)


def test_expired_token_rejected():
    tokens = SessionTokens(secret="test-secret", ttl_minutes=5)
    token = tokens.issue(
        SessionClaims(admin_code="ADMIN-A", role=Role.STANDARD),
        now_utc=utc_now() - timedelta(hours=1),
    )

    with pytest.raises(AccessDenied):
        tokens.resolve(token)


@pytest.mark.parametrize("token", [None, "", "not-a-jwt"])
async def test_resolve_session_rejects_missing_or_malformed(db, token):
    with pytest.raises(AccessDenied):
        AuthGate(db).resolve_session(token)
