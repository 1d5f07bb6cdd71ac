"""User and token models."""

from __future__ import annotations

from typing import Literal

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from docstore_service.core.database import Base, TimestampMixin, generate_uuid7

UserRole = Literal["admin", "user"]


def _new_id() -> str:
    return str(generate_uuid7())


class User(Base, TimestampMixin):
    """A user belonging to exactly one tenant.

    Usernames are unique within a tenant, not globally.
    """

    __tablename__ = "users"
    __table_args__ = (UniqueConstraint("tenant_id", "username"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    tenant_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True
    )
    username: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(16), nullable=False, default="user")

    token: Mapped[Token | None] = relationship(
        "Token",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, tenant_id={self.tenant_id}, username={self.username})>"


class Token(Base, TimestampMixin):
    """Opaque access token; each user holds at most one."""

    __tablename__ = "tokens"
    __table_args__ = (UniqueConstraint("tenant_id", "token"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    tenant_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False
    )
    token: Mapped[str] = mapped_column(String(255), nullable=False)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True
    )

    user: Mapped[User] = relationship("User", back_populates="token")

    def __repr__(self) -> str:
        return f"<Token(id={self.id}, user_id={self.user_id})>"
