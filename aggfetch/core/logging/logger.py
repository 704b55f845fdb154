"""Structured logging utilities with trace and symbol propagation."""

from __future__ import annotations

import json
import os
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, IO, Iterator
from uuid import uuid4

from loguru import logger

from aggfetch.core.logging.config import LogConfig

_TRACE_ID_VAR: ContextVar[str | None] = ContextVar("aggfetch_trace_id", default=None)
_CONTEXT_VAR: ContextVar[dict[str, Any]] = ContextVar("aggfetch_log_context", default={})

_RESERVED_KEYS = {"trace_id", "symbol", "error_code"}


def _ensure_trace_id() -> str:
    trace_id = _TRACE_ID_VAR.get()
    if trace_id is None:
        trace_id = uuid4().hex
        _TRACE_ID_VAR.set(trace_id)
    return trace_id


def _patch_record(record: dict[str, Any]) -> None:
    extra = record["extra"]
    if not extra.get("trace_id"):
        extra["trace_id"] = _ensure_trace_id()

    for key, value in _CONTEXT_VAR.get().items():
        if extra.get(key) is None:
            extra[key] = value

    extra.setdefault("symbol", None)
    extra.setdefault("error_code", None)


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def _format_payload(record: dict[str, Any]) -> dict[str, Any]:
    extra = record.get("extra", {})
    context = {k: v for k, v in extra.items() if k not in _RESERVED_KEYS and not k.startswith("_")}
    level = record.get("level")
    payload: dict[str, Any] = {
        "timestamp": record["time"].isoformat() if "time" in record else datetime.now(timezone.utc).isoformat(),
        "level": getattr(level, "name", str(level) if level is not None else "INFO"),
        "message": record.get("message"),
        "trace_id": extra.get("trace_id"),
        "symbol": extra.get("symbol"),
        "error_code": extra.get("error_code"),
    }
    if context:
        payload["context"] = context
    exception = record.get("exception")
    if exception:
        payload["exception"] = f"{exception.type.__name__}: {exception.value}" if exception.type else str(exception)
    return payload


def _render_line(record: dict[str, Any]) -> str:
    return json.dumps(_format_payload(record), default=_json_default)


class _StreamJsonSink:
    """Sink writing structured JSON payloads to a text stream."""

    def __init__(self, stream: IO[str]) -> None:
        self._stream = stream

    def __call__(self, message: Any) -> None:
        self._stream.write(_render_line(message.record))
        self._stream.write("\n")
        self._stream.flush()


def _file_format(record: dict[str, Any]) -> str:
    # loguru treats the returned string as a template, so the rendered line
    # goes through ``extra`` instead of being returned verbatim.
    record["extra"]["_json_line"] = _render_line(record)
    return "{extra[_json_line]}\n"


def _configure_from_config(config: LogConfig) -> None:
    handlers: list[dict[str, Any]] = []
    if config.console_output:
        stream = config.console_stream or sys.stderr
        handlers.append({"sink": _StreamJsonSink(stream), "level": config.level.upper()})
    if config.file_output and config.file_path:
        directory = os.path.dirname(config.file_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        handlers.append(
            {
                "sink": config.file_path,
                "level": config.level.upper(),
                "format": _file_format,
                "rotation": config.rotation,
                "retention": config.retention,
                "enqueue": config.enqueue,
            }
        )

    configure_kwargs: dict[str, Any] = {"handlers": handlers, "patcher": _patch_record}
    if config.extra:
        configure_kwargs["extra"] = config.extra
    logger.configure(**configure_kwargs)


def configure_logging(level: str = "INFO", **kwargs: Any) -> None:
    """Configure structured logging with the provided level and options."""

    _configure_from_config(LogConfig(level=level, **kwargs))


@contextmanager
def log_context(*, trace_id: str | None = None, **extra: Any) -> Iterator[str]:
    """Propagate a trace id and extra fields (e.g. ``symbol``) to nested log events.

    Backed by context variables, so every asyncio task gets its own view.
    """

    context_token = _CONTEXT_VAR.set({**_CONTEXT_VAR.get(), **extra})
    active_trace = trace_id or uuid4().hex
    trace_token = _TRACE_ID_VAR.set(active_trace)

    try:
        yield active_trace
    finally:
        _TRACE_ID_VAR.reset(trace_token)
        _CONTEXT_VAR.reset(context_token)


def current_trace_id() -> str:
    """Return the currently active trace id, generating one if required."""

    return _ensure_trace_id()


__all__ = [
    "configure_logging",
    "current_trace_id",
    "log_context",
    "logger",
]
