"""Ingest validation shared by the HTTP and WebSocket ingestion paths."""

from __future__ import annotations

from typing import Any

from docstore_service.core.exceptions import ValidationException

MESSAGE_REQUIRED = "MESSAGE_REQUIRED"
MESSAGE_EMPTY = "MESSAGE_EMPTY"
MESSAGE_TOO_LARGE = "MESSAGE_TOO_LARGE"


class IngestRejected(ValidationException):
    """A submitted event message failed validation.

    Renders as 422, except ``MESSAGE_TOO_LARGE`` which is 413.
    """

    def __init__(self, code: str, detail: str, extra: dict[str, Any] | None = None) -> None:
        super().__init__(
            detail=detail,
            code=code,
            type=code.lower().replace("_", "-"),
            status_code=413 if code == MESSAGE_TOO_LARGE else 422,
            extra=extra,
        )


class IngestValidator:
    """Validates raw event messages and returns the string to store."""

    def __init__(self, max_length: int = 2048) -> None:
        if max_length < 1:
            msg = "max_length must be positive"
            raise ValueError(msg)
        self.max_length = max_length

    def validate(self, raw: object) -> str:
        """Return the trimmed message or raise IngestRejected.

        Raises:
            IngestRejected: ``MESSAGE_REQUIRED`` if missing or not a string,
                ``MESSAGE_EMPTY`` if blank after trimming, ``MESSAGE_TOO_LARGE``
                if the trimmed message exceeds ``max_length``.
        """
        if raw is None or not isinstance(raw, str):
            raise IngestRejected(MESSAGE_REQUIRED, "Message is required")

        message = raw.strip()
        if not message:
            raise IngestRejected(MESSAGE_EMPTY, "Message cannot be empty")

        if len(message) > self.max_length:
            raise IngestRejected(
                MESSAGE_TOO_LARGE,
                f"Message too large (max {self.max_length} characters)",
                extra={"max_length": self.max_length},
            )
        return message
