"""Aggregate (candle) records and the paged response envelope."""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class AggregateRecord(BaseModel):
    """One OHLCV bar for a single time bucket."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    # Unix millisecond timestamp for the start of the aggregate window.
    timestamp: int = Field(0, alias="t")
    open: Decimal = Field(..., alias="o")
    high: Decimal = Field(..., alias="h")
    low: Decimal = Field(..., alias="l")
    close: Decimal = Field(..., alias="c")
    volume: Decimal = Field(Decimal(0), alias="v")
    transactions: int | None = Field(None, alias="n")
    # Left off by the server when false.
    otc: bool | None = None
    vwap: Decimal | None = Field(None, alias="vw")


class AggregatePage(BaseModel):
    """One page of the aggregates endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    ticker: str
    adjusted: bool
    query_count: int = Field(..., alias="queryCount")
    request_id: str
    results_count: int = Field(..., alias="resultsCount")
    status: str
    results: list[AggregateRecord] = Field(default_factory=list)
    next_url: str | None = None

    @property
    def is_last(self) -> bool:
        return self.next_url is None
