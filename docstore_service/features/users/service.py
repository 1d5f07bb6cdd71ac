"""Authentication service: resolves opaque tokens to users within a tenant."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from docstore_service.core.database import generate_token
from docstore_service.core.exceptions import ConflictException
from docstore_service.features.users.models import Token, User
from docstore_service.features.users.repository import (
    TokenRepository,
    UserRepository,
    get_token_repository,
    get_user_repository,
)
from docstore_service.features.users.schemas import UserWithToken

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession

    from docstore_service.features.users.models import UserRole

logger = logging.getLogger(__name__)


class AuthenticationService:
    """User and token management scoped to a tenant.

    A token only ever resolves inside the tenant it was issued for; the same
    token string presented with another tenant id resolves to nothing.
    Token values are never logged.
    """

    def __init__(
        self,
        session: AsyncSession,
        users: UserRepository | None = None,
        tokens: TokenRepository | None = None,
    ) -> None:
        self._session = session
        self._users = users or get_user_repository()
        self._tokens = tokens or get_token_repository()

    async def find_user_by_token(self, tenant_id: str, token: str) -> UserWithToken | None:
        """Resolve ``token`` to a user of ``tenant_id``.

        Returns:
            The user with its token, or None if the token is unknown in that tenant.
        """
        record = await self._tokens.get_by_token(self._session, tenant_id, token)
        if record is None:
            return None
        user = await self._users.get_in_tenant(self._session, tenant_id, record.user_id)
        if user is None:
            return None
        return _to_schema(user, record.token)

    async def get_user_by_username(self, tenant_id: str, username: str) -> User | None:
        return await self._users.get_by_username(self._session, tenant_id, username)

    async def list_users(self, tenant_id: str) -> Sequence[User]:
        return await self._users.list_for_tenant(self._session, tenant_id)

    async def create_user(
        self,
        tenant_id: str,
        username: str,
        role: UserRole = "user",
        token: str | None = None,
    ) -> UserWithToken:
        """Create a user and issue its token.

        Args:
            tenant_id: Owning tenant
            username: Unique within the tenant
            role: ``admin`` or ``user``
            token: Predefined token value (seeding); generated when omitted

        Raises:
            ConflictException: If the username is already taken in the tenant.
        """
        if await self._users.get_by_username(self._session, tenant_id, username) is not None:
            raise ConflictException(
                detail=f"Username '{username}' already exists",
                code="USERNAME_EXISTS",
                extra={"tenant_id": tenant_id, "username": username},
            )

        user = await self._users.create(
            self._session, User(tenant_id=tenant_id, username=username, role=role)
        )
        token_value = token or generate_token()
        await self._tokens.create(
            self._session,
            Token(tenant_id=tenant_id, token=token_value, user_id=user.id),
        )
        await self._session.commit()

        logger.info(
            "User created",
            extra={"tenant_id": tenant_id, "user_id": user.id, "role": role},
        )
        return _to_schema(user, token_value)

    async def regenerate_token(self, tenant_id: str, user_id: str) -> str | None:
        """Replace the user's token with a fresh one.

        Returns:
            The new token value, or None if the user does not exist in the tenant.
        """
        user = await self._users.get_in_tenant(self._session, tenant_id, user_id)
        if user is None:
            return None

        await self._tokens.delete_for_user(self._session, user_id)
        token_value = generate_token()
        await self._tokens.create(
            self._session,
            Token(tenant_id=tenant_id, token=token_value, user_id=user_id),
        )
        await self._session.commit()
        self._session.expire(user, ["token"])

        logger.info("Token regenerated", extra={"tenant_id": tenant_id, "user_id": user_id})
        return token_value

    async def delete_token(self, tenant_id: str, user_id: str) -> bool:
        """Revoke the user's token. Returns True if a token was removed."""
        user = await self._users.get_in_tenant(self._session, tenant_id, user_id)
        if user is None:
            return False
        deleted = await self._tokens.delete_for_user(self._session, user_id)
        await self._session.commit()
        self._session.expire(user, ["token"])
        if deleted:
            logger.info("Token revoked", extra={"tenant_id": tenant_id, "user_id": user_id})
        return deleted


def _to_schema(user: User, token: str | None) -> UserWithToken:
    return UserWithToken(
        id=user.id,
        tenant_id=user.tenant_id,
        username=user.username,
        role=user.role,
        token=token,
    )
