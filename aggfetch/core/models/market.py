"""Market-related enums and types."""

from enum import Enum


class Granularity(str, Enum):
    """Width of the time bucket aggregated into one candle."""

    SECOND = "second"
    MINUTE = "minute"
    HOUR = "hour"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"

    def __str__(self) -> str:
        return self.value
