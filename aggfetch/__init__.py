"""aggfetch - download price aggregates from a paginated API into per-symbol CSV files.

Typical library use::

    import asyncio
    from aggfetch import RunConfig, fetch_aggregates

    summary = asyncio.run(fetch_aggregates(config, api_key))
"""

from aggfetch.core.config import AggFetchSettings, RunConfig
from aggfetch.core.exceptions import (
    AggFetchError,
    FetchError,
    FileError,
    InitError,
    RequestValidationError,
)
from aggfetch.core.models import AggregateRecord, AggregateRequest, Granularity, build_request
from aggfetch.core.services import FetchOrchestrator, RunSummary, fetch_aggregates

__version__ = "0.1.0"

__all__ = [
    "AggFetchError",
    "AggFetchSettings",
    "AggregateRecord",
    "AggregateRequest",
    "FetchError",
    "FetchOrchestrator",
    "FileError",
    "Granularity",
    "InitError",
    "RequestValidationError",
    "RunConfig",
    "RunSummary",
    "build_request",
    "fetch_aggregates",
]
