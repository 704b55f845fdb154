"""aggfetch core: models, errors, HTTP adapter and the fetch pipeline."""

from aggfetch.core.config import AggFetchSettings, RunConfig
from aggfetch.core.http_adapter import AggregatesClient, HttpConfig
from aggfetch.core.models import (
    AggregatePage,
    AggregateRecord,
    AggregateRequest,
    Granularity,
    build_request,
)

__all__ = [
    "AggFetchSettings",
    "AggregatePage",
    "AggregateRecord",
    "AggregateRequest",
    "AggregatesClient",
    "Granularity",
    "HttpConfig",
    "RunConfig",
    "build_request",
]
