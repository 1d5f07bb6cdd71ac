"""CLI utilities for running async operations and formatting output."""

from docstore_service.cli.utils.async_runner import coro
from docstore_service.cli.utils.database import cli_session_factory
from docstore_service.cli.utils.formatters import (
    error,
    header,
    info,
    success,
    warning,
)

__all__ = [
    "cli_session_factory",
    "coro",
    "error",
    "header",
    "info",
    "success",
    "warning",
]
