"""Core exception hierarchy for aggfetch."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from aggfetch.core.exceptions.codes import ErrorCode


class AggFetchError(Exception):
    """Base class for every error raised by aggfetch."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode | str = ErrorCode.GENERAL,
        details: dict[str, Any] | None = None,
    ):
        """Initialise the error.

        Args:
            message: Human readable description.
            error_code: Machine readable code.
            details: Extra structured context.
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code.value if isinstance(error_code, ErrorCode) else error_code
        self.details = details or {}

    def to_payload(self) -> dict[str, Any]:
        """Return a serializable payload representing the error."""

        return {"code": self.error_code, "message": self.message, "details": dict(self.details)}


class RequestValidationError(AggFetchError):
    """Invalid aggregate request parameters."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        if field:
            super_details["field"] = field
        super().__init__(message, ErrorCode.VALIDATION, super_details)
        self.field = field


class ConfigError(AggFetchError):
    """Unreadable or malformed run configuration."""

    def __init__(
        self,
        message: str,
        path: str | Path | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        if path is not None:
            super_details["path"] = str(path)
        super().__init__(message, ErrorCode.CONFIG, super_details)


class InitError(AggFetchError):
    """The HTTP client could not be constructed; fatal for the whole run."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, ErrorCode.INIT, details)


class FetchError(AggFetchError):
    """Fetching one page of aggregates failed."""

    def __init__(
        self,
        message: str,
        url: str | None = None,
        error_code: ErrorCode = ErrorCode.FETCH,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        if url is not None:
            super_details["url"] = url
        super().__init__(message, error_code, super_details)
        self.url = url


class FetchSendError(FetchError):
    """The request could not be sent or no response was received."""

    def __init__(self, message: str, url: str | None = None, details: dict[str, Any] | None = None):
        super().__init__(message, url, ErrorCode.FETCH_SEND, details)


class FetchStatusError(FetchError):
    """The server answered with an HTTP error status."""

    def __init__(
        self,
        message: str,
        status_code: int,
        url: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        super_details["status_code"] = status_code
        super().__init__(message, url, ErrorCode.FETCH_STATUS, super_details)
        self.status_code = status_code


class FetchDecodeError(FetchError):
    """The response body is not a valid aggregates page."""

    def __init__(self, message: str, url: str | None = None, details: dict[str, Any] | None = None):
        super().__init__(message, url, ErrorCode.FETCH_DECODE, details)


class FileError(AggFetchError):
    """Persisting records to disk failed."""

    def __init__(
        self,
        message: str,
        operation: str,
        path: str | Path | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        super_details["operation"] = operation
        if path is not None:
            super_details["path"] = str(path)
        super().__init__(message, ErrorCode.FILE, super_details)
        self.operation = operation
        self.path = Path(path) if path is not None else None
