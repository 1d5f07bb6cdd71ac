"""Tests for the WebSocket connection authenticator."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from docstore_service.features.realtime.authenticator import (
    AuthenticatedIdentity,
    ConnectionAuthenticator,
    ConnectionRejected,
)
from docstore_service.features.realtime.schemas import ErrorCode
from docstore_service.infra.metrics import REGISTRY
from tests.conftest import ALICE_TOKEN, BOB_TOKEN, COMPANY_C_ADMIN_TOKEN

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker


@pytest.fixture
def authenticator(
    seeded_session_factory: async_sessionmaker[AsyncSession],
) -> ConnectionAuthenticator:
    return ConnectionAuthenticator(seeded_session_factory)


class BrokenSessionFactory:
    """Stands in for a session factory whose database is unreachable."""

    def __call__(self):
        raise ConnectionError("database unreachable")


async def _rejection(authenticator: ConnectionAuthenticator, tenant_id, token) -> ErrorCode:
    with pytest.raises(ConnectionRejected) as exc_info:
        await authenticator.authenticate(tenant_id, token)
    return exc_info.value.code


@pytest.mark.asyncio
async def test_valid_credentials_yield_identity(authenticator: ConnectionAuthenticator) -> None:
    identity = await authenticator.authenticate("company_a", ALICE_TOKEN)

    assert isinstance(identity, AuthenticatedIdentity)
    assert identity.tenant_id == "company_a"
    assert identity.username == "alice"
    assert identity.user_id


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("tenant_id", "token"),
    [
        (None, ALICE_TOKEN),
        ("", ALICE_TOKEN),
        ("company_a", None),
        ("company_a", ""),
        (123, ALICE_TOKEN),
        ("company_a", ["token"]),
    ],
)
async def test_missing_values_are_auth_required(
    authenticator: ConnectionAuthenticator, tenant_id: object, token: object
) -> None:
    assert await _rejection(authenticator, tenant_id, token) is ErrorCode.AUTH_REQUIRED


@pytest.mark.asyncio
async def test_unknown_tenant_is_invalid_tenant(authenticator: ConnectionAuthenticator) -> None:
    assert await _rejection(authenticator, "company_z", ALICE_TOKEN) is ErrorCode.INVALID_TENANT


@pytest.mark.asyncio
async def test_inactive_tenant_is_invalid_tenant(authenticator: ConnectionAuthenticator) -> None:
    """Tenant checks come before token checks, even with a valid token."""
    code = await _rejection(authenticator, "company_c", COMPANY_C_ADMIN_TOKEN)

    assert code is ErrorCode.INVALID_TENANT


@pytest.mark.asyncio
async def test_unknown_token_is_invalid_token(authenticator: ConnectionAuthenticator) -> None:
    assert await _rejection(authenticator, "company_a", "bogus") is ErrorCode.INVALID_TOKEN


@pytest.mark.asyncio
async def test_token_of_other_tenant_is_invalid_token(
    authenticator: ConnectionAuthenticator,
) -> None:
    assert await _rejection(authenticator, "company_a", BOB_TOKEN) is ErrorCode.INVALID_TOKEN


@pytest.mark.asyncio
async def test_unexpected_failure_is_internal_error(caplog: pytest.LogCaptureFixture) -> None:
    authenticator = ConnectionAuthenticator(BrokenSessionFactory())

    code = await _rejection(authenticator, "company_a", ALICE_TOKEN)

    assert code is ErrorCode.INTERNAL_ERROR
    assert ALICE_TOKEN not in caplog.text


@pytest.mark.asyncio
async def test_rejections_are_counted_by_code(authenticator: ConnectionAuthenticator) -> None:
    labels = {"code": "INVALID_TOKEN"}
    before = REGISTRY.get_sample_value("websocket_auth_rejections_total", labels) or 0.0

    await _rejection(authenticator, "company_a", "bogus")

    assert REGISTRY.get_sample_value("websocket_auth_rejections_total", labels) == before + 1
