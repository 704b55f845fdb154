"""
Core interfaces and abstract base classes for aggfetch.

This module defines the contracts that the fetch pipeline depends on,
enabling loose coupling between the HTTP layer and the orchestration code
and making the pipeline testable with scripted fetchers.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from aggfetch.core.models import AggregatePage, AggregateRequest


class PageFetcher(ABC):
    """
    Abstract base class for anything that can fetch one page of aggregates.

    Implementations must be safe to share between concurrently running
    symbol pipelines: a call must not depend on state left by earlier calls.
    """

    @abstractmethod
    async def fetch(self, request: AggregateRequest) -> AggregatePage:
        """
        Fetch the page described by ``request``.

        Args:
            request: The request to execute. When ``request.continuation`` is
                set it is used verbatim as the target URL.

        Returns:
            AggregatePage: the decoded page envelope

        Raises:
            FetchError: When sending, the HTTP status or decoding fails
        """
        pass
