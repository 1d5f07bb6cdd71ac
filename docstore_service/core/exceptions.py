"""Custom exception classes for the application."""

from __future__ import annotations

from typing import Any


class AppException(Exception):
    """Base application exception.

    All custom exceptions should inherit from this class.
    Follows RFC 7807 Problem Details for HTTP APIs, extended with a
    machine-readable ``code`` that clients can switch on.

    Attributes:
        status_code: HTTP status code for the error.
        detail: Human-readable error message.
        code: Stable machine-readable error code (e.g. ``TENANT_INVALID``).
        type: Error type identifier (used in RFC 7807 problem details).
        title: Short, human-readable summary of the problem type.
        instance: URI reference that identifies the specific occurrence of the problem.
        extra: Additional context-specific information about the error.

    Example:
            raise AppException(
            status_code=404,
            detail="Tenant not found or inactive",
            code="TENANT_INVALID",
            type="tenant-invalid",
        )
    """

    def __init__(
        self,
        status_code: int,
        detail: str,
        code: str = "ERROR",
        type: str = "about:blank",
        title: str | None = None,
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.status_code = status_code
        self.detail = detail
        self.code = code
        self.type = type
        self.title = title or self._default_title(status_code)
        self.instance = instance
        self.extra = extra or {}
        super().__init__(detail)

    @staticmethod
    def _default_title(status_code: int) -> str:
        """Get default title for HTTP status code."""
        titles = {
            400: "Bad Request",
            401: "Unauthorized",
            403: "Forbidden",
            404: "Not Found",
            409: "Conflict",
            413: "Payload Too Large",
            422: "Unprocessable Entity",
            500: "Internal Server Error",
            503: "Service Unavailable",
        }
        return titles.get(status_code, "Error")


class BadRequestException(AppException):
    """Exception raised for malformed requests (400)."""

    def __init__(
        self,
        detail: str,
        code: str = "BAD_REQUEST",
        type: str = "bad-request",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=400,
            detail=detail,
            code=code,
            type=type,
            title="Bad Request",
            instance=instance,
            extra=extra,
        )


class UnauthorizedException(AppException):
    """Exception raised for authentication failures (401).

    Example:
            raise UnauthorizedException(
            detail="Invalid user token",
            code="INVALID_TOKEN",
        )
    """

    def __init__(
        self,
        detail: str,
        code: str = "UNAUTHORIZED",
        type: str = "unauthorized",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=401,
            detail=detail,
            code=code,
            type=type,
            title="Unauthorized",
            instance=instance,
            extra=extra,
        )


class NotFoundException(AppException):
    """Exception raised when a resource is not found (404)."""

    def __init__(
        self,
        detail: str,
        code: str = "NOT_FOUND",
        type: str = "not-found",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=404,
            detail=detail,
            code=code,
            type=type,
            title="Not Found",
            instance=instance,
            extra=extra,
        )


class ConflictException(AppException):
    """Exception raised when a resource already exists (409)."""

    def __init__(
        self,
        detail: str,
        code: str = "CONFLICT",
        type: str = "conflict",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=409,
            detail=detail,
            code=code,
            type=type,
            title="Conflict",
            instance=instance,
            extra=extra,
        )


class ValidationException(AppException):
    """Exception raised for validation errors (422 unless overridden).

    Example:
            raise ValidationException(
            detail="Message is required",
            code="MESSAGE_REQUIRED",
            extra={"field": "message"}
        )
    """

    def __init__(
        self,
        detail: str,
        code: str = "VALIDATION_ERROR",
        type: str = "validation-error",
        status_code: int = 422,
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=status_code,
            detail=detail,
            code=code,
            type=type,
            title="Validation Error",
            instance=instance,
            extra=extra,
        )


class TenantException(AppException):
    """Exception raised when the caller's tenant cannot be resolved."""


class ServiceUnavailableException(AppException):
    """Exception raised when a dependency is unavailable (503)."""

    def __init__(
        self,
        detail: str,
        code: str = "SERVICE_UNAVAILABLE",
        type: str = "service-unavailable",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=503,
            detail=detail,
            code=code,
            type=type,
            title="Service Unavailable",
            instance=instance,
            extra=extra,
        )
