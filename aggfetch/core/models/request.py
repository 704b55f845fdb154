"""Immutable description of one paged aggregates fetch."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone

from aggfetch.core.exceptions import RequestValidationError
from aggfetch.core.models.market import Granularity


def to_millis(value: datetime) -> int:
    """Return the Unix millisecond timestamp of ``value``; naive values are UTC."""

    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp() * 1000)


@dataclass(frozen=True)
class AggregateRequest:
    """Parameters of a paged aggregates query for a single symbol."""

    symbol: str
    range_start: datetime
    range_end: datetime
    page_limit: int
    granularity: Granularity = Granularity.MINUTE
    continuation: str | None = None

    def __post_init__(self):
        """Validate request parameters."""
        if not self.symbol or not self.symbol.strip():
            raise RequestValidationError("symbol cannot be empty", field="symbol")
        if not isinstance(self.granularity, Granularity):
            raise RequestValidationError(
                f"unknown granularity: {self.granularity!r}", field="granularity"
            )
        if to_millis(self.range_end) < to_millis(self.range_start):
            raise RequestValidationError(
                "range_end must not be before range_start",
                field="range_end",
                details={
                    "range_start": self.range_start.isoformat(),
                    "range_end": self.range_end.isoformat(),
                },
            )
        if self.page_limit <= 0:
            raise RequestValidationError(
                "page_limit must be positive",
                field="page_limit",
                details={"page_limit": self.page_limit},
            )

    @property
    def start_millis(self) -> int:
        return to_millis(self.range_start)

    @property
    def end_millis(self) -> int:
        return to_millis(self.range_end)

    def with_continuation(self, continuation: str | None) -> AggregateRequest:
        """Return a copy of this request pointing at ``continuation``."""
        return replace(self, continuation=continuation)


def build_request(
    symbol: str,
    granularity: Granularity,
    range_start: datetime,
    range_end: datetime,
    page_limit: int,
) -> AggregateRequest:
    """Build the first-page request for ``symbol``.

    Raises:
        RequestValidationError: symbol is empty, the range is inverted or
            ``page_limit`` is not positive.
    """
    return AggregateRequest(
        symbol=symbol,
        granularity=granularity,
        range_start=range_start,
        range_end=range_end,
        page_limit=page_limit,
    )
