"""Authentication gate for real-time connections."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING, Any, NoReturn

from docstore_service.features.realtime.schemas import ErrorCode
from docstore_service.features.tenants.service import TenantDirectory
from docstore_service.features.users.service import AuthenticationService
from docstore_service.infra.metrics.prometheus import websocket_auth_rejections_total

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

logger = logging.getLogger(__name__)

_REJECTION_MESSAGES = {
    ErrorCode.AUTH_REQUIRED: "tenantId and token required in auth payload",
    ErrorCode.INVALID_TENANT: "Invalid or inactive tenant ID",
    ErrorCode.INVALID_TOKEN: "Invalid or expired token",
    ErrorCode.INTERNAL_ERROR: "Internal authentication error",
}


@dataclass(frozen=True, slots=True)
class AuthenticatedIdentity:
    """Identity bound to a connection for its whole lifetime."""

    tenant_id: str
    user_id: str
    username: str


class ConnectionRejected(Exception):
    """A connection attempt was refused; ``code`` says why."""

    def __init__(self, code: ErrorCode, message: str | None = None) -> None:
        self.code = code
        self.message = message or _REJECTION_MESSAGES.get(code, "Authentication failed")
        super().__init__(self.message)


class ConnectionAuthenticator:
    """Resolves ``(tenant_id, token)`` to an identity or rejects the connection.

    Checks run in order: presence of both values, tenant exists and is
    active, token belongs to a user of that tenant. Any unexpected failure
    rejects with ``INTERNAL_ERROR``; ambiguity never admits. The token value
    is never logged.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def authenticate(self, tenant_id: Any, credential: Any) -> AuthenticatedIdentity:
        """Authenticate a connection attempt.

        Raises:
            ConnectionRejected: With ``AUTH_REQUIRED``, ``INVALID_TENANT``,
                ``INVALID_TOKEN`` or ``INTERNAL_ERROR``.
        """
        if not isinstance(tenant_id, str) or not tenant_id or not isinstance(credential, str) or not credential:
            self._reject(ErrorCode.AUTH_REQUIRED, tenant_id if isinstance(tenant_id, str) else None)

        try:
            async with self._session_factory() as session:
                if not await TenantDirectory(session).is_valid_tenant(tenant_id):
                    self._reject(ErrorCode.INVALID_TENANT, tenant_id)

                user = await AuthenticationService(session).find_user_by_token(tenant_id, credential)
                if user is None:
                    self._reject(ErrorCode.INVALID_TOKEN, tenant_id)
        except ConnectionRejected:
            raise
        except Exception:
            logger.exception(
                "Connection authentication failed unexpectedly",
                extra={"tenant_id": tenant_id, "operation": "authenticate"},
            )
            self._reject(ErrorCode.INTERNAL_ERROR, tenant_id)

        return AuthenticatedIdentity(tenant_id=tenant_id, user_id=user.id, username=user.username)

    @staticmethod
    def _reject(code: ErrorCode, tenant_id: str | None) -> NoReturn:
        websocket_auth_rejections_total.labels(code=code.value).inc()
        logger.info(
            "Connection rejected",
            extra={"tenant_id": tenant_id, "code": code.value},
        )
        raise ConnectionRejected(code)
