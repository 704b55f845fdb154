"""Pytest configuration and shared fixtures for the aggfetch test suite."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterator
from decimal import Decimal

import pytest
from loguru import logger

from aggfetch.core.interfaces import PageFetcher
from aggfetch.core.models import AggregatePage, AggregateRecord, AggregateRequest


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register command-line options for controlling integration tests."""

    parser.addoption(
        "--aggfetch-run-integration",
        action="store_true",
        default=False,
        help="Run aggfetch integration tests that require network access.",
    )


def pytest_configure(config: pytest.Config) -> None:
    """Register the integration marker for aggfetch tests."""

    config.addinivalue_line(
        "markers",
        "integration: marks aggfetch tests requiring network or external services",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip integration tests unless explicitly requested."""

    if config.getoption("--aggfetch-run-integration"):
        return

    skip_integration = pytest.mark.skip(reason="integration tests require --aggfetch-run-integration")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


@pytest.fixture(autouse=True)
def _reset_logger() -> Iterator[None]:
    yield
    logger.remove()


class ScriptedFetcher(PageFetcher):
    """Fetcher replaying a fixed list of pages or errors, recording every request."""

    def __init__(self, script: list[AggregatePage | Exception], delay: float = 0.0) -> None:
        self.script = list(script)
        self.delay = delay
        self.calls: list[AggregateRequest] = []

    async def fetch(self, request: AggregateRequest) -> AggregatePage:
        self.calls.append(request)
        await asyncio.sleep(self.delay)
        item = self.script[len(self.calls) - 1]
        if isinstance(item, Exception):
            raise item
        return item


def make_record(timestamp: int, price: str = "10.5", **overrides: object) -> AggregateRecord:
    values: dict[str, object] = {
        "timestamp": timestamp,
        "open": Decimal(price),
        "high": Decimal(price) + 1,
        "low": Decimal(price) - 1,
        "close": Decimal(price),
        "volume": Decimal("1000"),
    }
    values.update(overrides)
    return AggregateRecord(**values)


def make_page(
    records: list[AggregateRecord],
    next_url: str | None = None,
    ticker: str = "AAPL",
) -> AggregatePage:
    return AggregatePage(
        ticker=ticker,
        adjusted=True,
        query_count=len(records),
        request_id="req-1",
        results_count=len(records),
        status="OK",
        results=records,
        next_url=next_url,
    )


@pytest.fixture
def record_factory() -> Callable[..., AggregateRecord]:
    return make_record


@pytest.fixture
def page_factory() -> Callable[..., AggregatePage]:
    return make_page


@pytest.fixture
def scripted_fetcher() -> Callable[..., ScriptedFetcher]:
    return ScriptedFetcher
