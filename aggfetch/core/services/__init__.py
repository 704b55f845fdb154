"""Fetch pipeline services."""

from aggfetch.core.services.orchestrator import (
    FetchOrchestrator,
    RunSummary,
    SymbolOutcome,
    SymbolStatus,
)
from aggfetch.core.services.pagination import PageStream, StreamState
from aggfetch.core.services.progress import ProgressCounter, estimate_intervals, estimate_pages
from aggfetch.core.services.service import create_client, fetch_aggregates
from aggfetch.core.services.writer import (
    AggregateFileWriter,
    aggregate_path,
    append_records,
    record_to_row,
)

__all__ = [
    "AggregateFileWriter",
    "FetchOrchestrator",
    "PageStream",
    "ProgressCounter",
    "RunSummary",
    "StreamState",
    "SymbolOutcome",
    "SymbolStatus",
    "aggregate_path",
    "append_records",
    "create_client",
    "estimate_intervals",
    "estimate_pages",
    "fetch_aggregates",
    "record_to_row",
]
