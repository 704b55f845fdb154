"""Shared progress counter and the page-count estimate used as its target."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from aggfetch.core.models import Granularity, to_millis

ProgressListener = Callable[[int, int], None]

_MILLIS_PER = {
    "second": 1_000,
    "minute": 60_000,
    "hour": 3_600_000,
    "day": 86_400_000,
    "week": 604_800_000,
}


def estimate_intervals(granularity: Granularity, range_start: datetime, range_end: datetime) -> int:
    """Number of whole ``granularity`` buckets between the two timestamps.

    Months, quarters and years are approximated from whole weeks or days;
    the result only feeds the progress display.
    """
    duration = to_millis(range_end) - to_millis(range_start)
    if duration <= 0:
        return 0
    if granularity is Granularity.MONTH:
        return duration // _MILLIS_PER["week"] // 4
    if granularity is Granularity.QUARTER:
        return duration // _MILLIS_PER["week"] // 12
    if granularity is Granularity.YEAR:
        return duration // _MILLIS_PER["day"] // 365
    return duration // _MILLIS_PER[granularity.value]


def estimate_pages(
    granularity: Granularity,
    range_start: datetime,
    range_end: datetime,
    page_limit: int,
) -> int:
    """Rough number of pages one symbol needs for the given range."""
    if page_limit <= 0:
        return 0
    return estimate_intervals(granularity, range_start, range_end) // page_limit


class ProgressCounter:
    """Page counter shared by every symbol pipeline of a run.

    Increments happen synchronously on the event loop thread (there is no
    await between read and write), so concurrent pipelines never lose an
    update. Listeners are called with ``(completed, total)`` after each change.
    """

    def __init__(self, total: int = 0) -> None:
        self.total = total
        self._completed = 0
        self._listeners: list[ProgressListener] = []

    @property
    def completed(self) -> int:
        return self._completed

    def subscribe(self, listener: ProgressListener) -> None:
        self._listeners.append(listener)

    def set_total(self, total: int) -> None:
        self.total = total
        self._notify()

    def advance(self, amount: int = 1) -> int:
        self._completed += amount
        self._notify()
        return self._completed

    def _notify(self) -> None:
        for listener in self._listeners:
            listener(self._completed, self.total)


__all__ = ["ProgressCounter", "ProgressListener", "estimate_intervals", "estimate_pages"]
