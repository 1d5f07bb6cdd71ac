"""Tenant model for multi-tenancy support."""

from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from docstore_service.core.database import Base, TimestampMixin


class Tenant(Base, TimestampMixin):
    """Organization using the document store.

    Every event buffer, user and token is scoped to exactly one tenant.

    Attributes:
        id: Unique tenant identifier, as sent in the ``X-Tenant-ID`` header
        name: Tenant display name
        is_active: Inactive tenants are rejected on every entry point
    """

    __tablename__ = "tenants"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Tenant(id={self.id}, name={self.name}, is_active={self.is_active})>"
