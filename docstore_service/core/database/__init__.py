"""Database foundations: declarative base, repository and id helpers."""

from docstore_service.core.database.base import NAMING_CONVENTION, Base, TimestampMixin
from docstore_service.core.database.repository import BaseRepository
from docstore_service.core.database.utils import generate_token, generate_uuid7

__all__ = [
    "NAMING_CONVENTION",
    "Base",
    "BaseRepository",
    "TimestampMixin",
    "generate_token",
    "generate_uuid7",
]
