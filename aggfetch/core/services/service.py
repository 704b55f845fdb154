"""Entry point wiring settings, the HTTP client and the orchestrator together."""

from __future__ import annotations

from aggfetch.core.config import AggFetchSettings, RunConfig
from aggfetch.core.exceptions import InitError
from aggfetch.core.http_adapter import AggregatesClient, HttpConfig
from aggfetch.core.services.orchestrator import FetchOrchestrator, RunSummary
from aggfetch.core.services.progress import ProgressCounter


def create_client(api_key: str | None, settings: AggFetchSettings) -> AggregatesClient:
    """Build the shared client for a run.

    Raises:
        InitError: missing or malformed key, or an unusable base URL.
    """
    try:
        http_config = HttpConfig(base_url=settings.base_url, timeout=settings.timeout)
    except ValueError as exc:
        raise InitError(f"Invalid base URL: {exc}", details={"base_url": settings.base_url}) from exc
    return AggregatesClient(api_key or "", http_config)


async def fetch_aggregates(
    config: RunConfig,
    api_key: str | None = None,
    *,
    settings: AggFetchSettings | None = None,
    progress: ProgressCounter | None = None,
) -> RunSummary:
    """Run a full fetch for ``config``.

    Only client construction can fail the run; per-symbol problems end up
    in the returned summary and the log.
    """
    settings = settings or AggFetchSettings()
    async with create_client(api_key or settings.polygon_api_key, settings) as client:
        orchestrator = FetchOrchestrator(
            client,
            concurrency_limit=settings.concurrency_limit,
            page_delay=settings.page_delay_ms / 1000,
            progress=progress,
        )
        return await orchestrator.run(config)


__all__ = ["create_client", "fetch_aggregates"]
