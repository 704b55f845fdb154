"""Logging utilities for monitoring and debugging."""

from aggfetch.core.logging.config import LogConfig
from aggfetch.core.logging.logger import (
    configure_logging,
    current_trace_id,
    log_context,
    logger,
)

__all__ = [
    "LogConfig",
    "configure_logging",
    "current_trace_id",
    "log_context",
    "logger",
]
