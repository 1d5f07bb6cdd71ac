"""Logging infrastructure.

Structured JSONL logging with automatic context injection and
non-blocking output through a QueueHandler/QueueListener pair.

Basic usage:
    from docstore_service.infra.logging import set_log_context
    import logging

    logger = logging.getLogger(__name__)

    set_log_context(request_id="abc-123", tenant_id="company_a")
    logger.info("Processing request")  # Includes request_id and tenant_id
"""

from docstore_service.infra.logging.config import configure_logging, setup_logging, shutdown
from docstore_service.infra.logging.context import (
    ContextInjectingFilter,
    clear_log_context,
    get_log_context,
    remove_from_log_context,
    set_log_context,
)
from docstore_service.infra.logging.formatters import JSONFormatter

__all__ = [
    "ContextInjectingFilter",
    "JSONFormatter",
    "clear_log_context",
    "configure_logging",
    "get_log_context",
    "remove_from_log_context",
    "set_log_context",
    "setup_logging",
    "shutdown",
]
