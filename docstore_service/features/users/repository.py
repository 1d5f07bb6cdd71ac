"""Repositories for the users feature."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import delete, select

from docstore_service.core.database.repository import BaseRepository
from docstore_service.features.users.models import Token, User

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession


class UserRepository(BaseRepository[User]):
    """Repository for User model; every query is tenant-scoped."""

    def __init__(self) -> None:
        super().__init__(User)

    async def get_in_tenant(self, session: AsyncSession, tenant_id: str, user_id: str) -> User | None:
        stmt = select(User).where(User.tenant_id == tenant_id, User.id == user_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_username(
        self,
        session: AsyncSession,
        tenant_id: str,
        username: str,
    ) -> User | None:
        stmt = select(User).where(User.tenant_id == tenant_id, User.username == username)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_tenant(self, session: AsyncSession, tenant_id: str) -> Sequence[User]:
        stmt = select(User).where(User.tenant_id == tenant_id).order_by(User.username.asc())
        result = await session.execute(stmt)
        return result.scalars().all()


class TokenRepository(BaseRepository[Token]):
    """Repository for Token model."""

    def __init__(self) -> None:
        super().__init__(Token)

    async def get_by_token(self, session: AsyncSession, tenant_id: str, token: str) -> Token | None:
        stmt = select(Token).where(Token.tenant_id == tenant_id, Token.token == token)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def delete_for_user(self, session: AsyncSession, user_id: str) -> bool:
        """Delete the user's token. Returns True if one existed."""
        result = await session.execute(delete(Token).where(Token.user_id == user_id))
        await session.flush()
        return (result.rowcount or 0) > 0


_user_repository = UserRepository()
_token_repository = TokenRepository()


def get_user_repository() -> UserRepository:
    return _user_repository


def get_token_repository() -> TokenRepository:
    return _token_repository
