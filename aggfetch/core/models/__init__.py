"""Data models module."""

from aggfetch.core.models.aggregates import AggregatePage, AggregateRecord
from aggfetch.core.models.market import Granularity
from aggfetch.core.models.request import AggregateRequest, build_request, to_millis

__all__ = [
    "AggregatePage",
    "AggregateRecord",
    "AggregateRequest",
    "Granularity",
    "build_request",
    "to_millis",
]
