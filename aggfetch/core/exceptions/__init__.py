"""Exception handling module."""

from aggfetch.core.exceptions.base import (
    AggFetchError,
    ConfigError,
    FetchDecodeError,
    FetchError,
    FetchSendError,
    FetchStatusError,
    FileError,
    InitError,
    RequestValidationError,
)
from aggfetch.core.exceptions.codes import ErrorCode

__all__ = [
    "AggFetchError",
    "ConfigError",
    "ErrorCode",
    "FetchDecodeError",
    "FetchError",
    "FetchSendError",
    "FetchStatusError",
    "FileError",
    "InitError",
    "RequestValidationError",
]
