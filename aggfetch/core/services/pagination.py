"""Lazy, strictly ordered page stream for a single symbol."""

from __future__ import annotations

from enum import Enum

from aggfetch.core.exceptions import FetchError
from aggfetch.core.interfaces import PageFetcher
from aggfetch.core.logging import logger
from aggfetch.core.models import AggregateRecord, AggregateRequest


class StreamState(str, Enum):
    """Lifecycle of a :class:`PageStream`."""

    START = "start"
    PAGING = "paging"
    TERMINAL = "terminal"
    FAILED = "failed"


class PageStream:
    """Async iterator over the record batches of one symbol.

    Each ``__anext__`` performs exactly one fetch: the first uses the request
    as built, later ones swap in the continuation URL returned by the
    previous page. A page without a continuation ends the stream. A failed
    fetch is raised once and ends the stream as well; the stream cannot be
    restarted.

    Example:
        >>> async for records in PageStream(client, request):
        ...     await writer.append(records)
    """

    def __init__(self, fetcher: PageFetcher, request: AggregateRequest) -> None:
        self._fetcher = fetcher
        self._request = request.with_continuation(None)
        self.state = StreamState.START
        self.pages_fetched = 0

    @property
    def symbol(self) -> str:
        return self._request.symbol

    @property
    def finished(self) -> bool:
        return self.state in (StreamState.TERMINAL, StreamState.FAILED)

    def __aiter__(self) -> "PageStream":
        return self

    async def __anext__(self) -> list[AggregateRecord]:
        if self.finished:
            raise StopAsyncIteration

        try:
            page = await self._fetcher.fetch(self._request)
        except FetchError:
            self.state = StreamState.FAILED
            raise

        self.pages_fetched += 1
        if page.next_url is None:
            logger.debug(
                "Got final page of data",
                symbol=self.symbol,
                num_results=page.results_count,
            )
            self.state = StreamState.TERMINAL
        else:
            self._request = self._request.with_continuation(page.next_url)
            self.state = StreamState.PAGING
        return page.results


__all__ = ["PageStream", "StreamState"]
