"""Standardized error codes shared across the aggfetch error hierarchy."""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Machine readable error codes attached to every :class:`AggFetchError`."""

    GENERAL = "GENERAL_ERROR"
    VALIDATION = "VALIDATION_ERROR"
    CONFIG = "CONFIG_ERROR"
    INIT = "INIT_ERROR"
    FETCH = "FETCH_ERROR"
    FETCH_SEND = "FETCH_SEND_ERROR"
    FETCH_STATUS = "FETCH_STATUS_ERROR"
    FETCH_DECODE = "FETCH_DECODE_ERROR"
    FILE = "FILE_ERROR"


__all__ = ["ErrorCode"]
