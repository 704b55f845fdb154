"""Concurrent fan-out of per-symbol fetch pipelines."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path

from aggfetch.core.config import DEFAULT_CONCURRENCY_LIMIT, DEFAULT_PAGE_DELAY_MS, RunConfig
from aggfetch.core.exceptions import FetchError, FileError, RequestValidationError
from aggfetch.core.interfaces import PageFetcher
from aggfetch.core.logging import log_context, logger
from aggfetch.core.models import AggregateRequest, build_request
from aggfetch.core.services.pagination import PageStream
from aggfetch.core.services.progress import ProgressCounter, estimate_pages
from aggfetch.core.services.writer import AggregateFileWriter


class SymbolStatus(str, Enum):
    """Final state of one symbol pipeline."""

    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class SymbolOutcome:
    """What happened to one symbol during a run."""

    symbol: str
    status: SymbolStatus = SymbolStatus.COMPLETED
    pages: int = 0
    records: int = 0
    error: str | None = None
    path: Path | None = None


@dataclass
class RunSummary:
    """Diagnostic summary of a run; failures are reported here, never raised."""

    outcomes: list[SymbolOutcome] = field(default_factory=list)
    total_time_seconds: float = 0.0

    def _symbols(self, status: SymbolStatus) -> list[str]:
        return [outcome.symbol for outcome in self.outcomes if outcome.status is status]

    @property
    def completed(self) -> list[str]:
        return self._symbols(SymbolStatus.COMPLETED)

    @property
    def failed(self) -> list[str]:
        return self._symbols(SymbolStatus.FAILED)

    @property
    def skipped(self) -> list[str]:
        return self._symbols(SymbolStatus.SKIPPED)

    @property
    def pages(self) -> int:
        return sum(outcome.pages for outcome in self.outcomes)

    @property
    def records(self) -> int:
        return sum(outcome.records for outcome in self.outcomes)


class FetchOrchestrator:
    """Runs one page stream + file writer pipeline per symbol.

    At most ``concurrency_limit`` pipelines are active at once; the rest
    wait on a semaphore. A fetch or file error stops only the affected
    symbol and is logged, never raised.
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        *,
        concurrency_limit: int = DEFAULT_CONCURRENCY_LIMIT,
        page_delay: float = DEFAULT_PAGE_DELAY_MS / 1000,
        progress: ProgressCounter | None = None,
    ) -> None:
        if concurrency_limit <= 0:
            raise ValueError("concurrency_limit must be positive")
        if page_delay < 0:
            raise ValueError("page_delay must be non-negative")
        self.fetcher = fetcher
        self.concurrency_limit = concurrency_limit
        self.page_delay = page_delay
        self.progress = progress or ProgressCounter()
        self._active = 0
        self.max_active = 0

    @property
    def active_pipelines(self) -> int:
        return self._active

    async def run(self, config: RunConfig) -> RunSummary:
        """Fetch every symbol of ``config`` and persist it under ``config.output_root``."""
        start_time = datetime.now()
        logger.info(
            "Starting to fetch data...",
            num_tickers=len(config.symbols),
            granularity=config.granularity.value,
            output_dir=str(config.output_root),
            range_start=config.range_start.isoformat(),
            range_end=config.range_end.isoformat(),
        )

        per_symbol = estimate_pages(
            config.granularity, config.range_start, config.range_end, config.page_limit
        )
        self.progress.set_total(len(config.symbols) * per_symbol)

        semaphore = asyncio.Semaphore(self.concurrency_limit)
        outcomes = await asyncio.gather(
            *(self._pipeline(semaphore, config, symbol) for symbol in config.symbols)
        )

        summary = RunSummary(
            outcomes=list(outcomes),
            total_time_seconds=(datetime.now() - start_time).total_seconds(),
        )
        logger.info(
            "Finished fetching data!",
            completed=len(summary.completed),
            failed=len(summary.failed),
            skipped=len(summary.skipped),
            pages=summary.pages,
            records=summary.records,
        )
        return summary

    async def _pipeline(
        self, semaphore: asyncio.Semaphore, config: RunConfig, symbol: str
    ) -> SymbolOutcome:
        with log_context(symbol=symbol):
            try:
                request = build_request(
                    symbol,
                    config.granularity,
                    config.range_start,
                    config.range_end,
                    config.page_limit,
                )
            except RequestValidationError as error:
                logger.error(
                    "Encountered an error when building a request",
                    error=error.message,
                    error_code=error.error_code,
                )
                return SymbolOutcome(symbol, SymbolStatus.SKIPPED, error=error.message)

            async with semaphore:
                return await self._run_symbol(request, config.output_root)

    async def _run_symbol(self, request: AggregateRequest, output_root: Path) -> SymbolOutcome:
        outcome = SymbolOutcome(request.symbol)
        self._active += 1
        self.max_active = max(self.max_active, self._active)
        logger.info("Fetching data for ticker")
        try:
            await self.save_aggregates(request, output_root, outcome)
        except (FetchError, FileError) as error:
            outcome.status = SymbolStatus.FAILED
            outcome.error = error.message
            logger.error(
                "Encountered an error when processing a ticker",
                error=error.message,
                error_code=error.error_code,
                details=error.details,
            )
        finally:
            self._active -= 1
        logger.info(
            "Finished fetching data for ticker",
            status=outcome.status.value,
            pages=outcome.pages,
            records=outcome.records,
        )
        return outcome

    async def save_aggregates(
        self,
        request: AggregateRequest,
        output_root: Path,
        outcome: SymbolOutcome | None = None,
    ) -> SymbolOutcome:
        """Stream every page of ``request`` into its CSV file.

        Page N+1 is requested only after page N has been flushed and the
        page delay has elapsed.
        """
        outcome = outcome or SymbolOutcome(request.symbol)
        async with AggregateFileWriter(output_root, request.symbol, request.granularity) as writer:
            outcome.path = writer.path
            async for records in PageStream(self.fetcher, request):
                if not records:
                    logger.warning("Got no results")
                else:
                    logger.debug("Processing batch of records", num_records=len(records))
                    outcome.records += await writer.append(records)
                outcome.pages += 1
                self.progress.advance()
                await asyncio.sleep(self.page_delay)
        return outcome


__all__ = ["FetchOrchestrator", "RunSummary", "SymbolOutcome", "SymbolStatus"]
