"""Database configuration settings."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """SQLAlchemy async database settings.

    Environment variables use DB_ prefix.
    Example: DB_URL=sqlite+aiosqlite:///./docstore.db
    """

    url: str = Field(
        default="sqlite+aiosqlite:///./docstore.db",
        min_length=1,
        description="SQLAlchemy async database URL",
    )

    echo: bool = Field(
        default=False,
        description="Log emitted SQL statements",
    )

    create_tables: bool = Field(
        default=True,
        description="Create missing tables on startup",
    )

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    @property
    def is_sqlite(self) -> bool:
        """Whether the configured backend is SQLite."""
        return self.url.startswith("sqlite")
