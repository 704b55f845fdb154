"""
HTTP adapter for the aggregates endpoint.

This module provides the HTTP client used by every symbol pipeline: it
builds first-page URLs, follows server-supplied continuation URLs verbatim,
authenticates with a bearer token and classifies failures into send, status
and decode errors. It never retries; the caller decides what a failure means.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Optional
from urllib.parse import parse_qsl, quote, urlencode, urlsplit, urlunsplit

import httpx
from pydantic import ValidationError

from aggfetch.core.exceptions import (
    FetchDecodeError,
    FetchSendError,
    FetchStatusError,
    InitError,
)
from aggfetch.core.interfaces import PageFetcher
from aggfetch.core.logging import logger
from aggfetch.core.models import AggregatePage, AggregateRequest

BASE_URL = "https://api.polygon.io"
MULTIPLIER = 1

_SENSITIVE_PARAMS = {"apikey", "api_key", "token"}


@dataclass
class HttpConfig:
    """Configuration for HTTP client behavior."""

    base_url: str = BASE_URL
    timeout: float = 30.0
    max_redirects: int = 5
    user_agent: str = "aggfetch/0.1.0"
    headers: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        """Validate HTTP configuration."""
        if not self.base_url:
            raise ValueError("base_url cannot be empty")
        if urlsplit(self.base_url).scheme not in ("http", "https"):
            raise ValueError(f"base_url must be an http(s) URL: {self.base_url}")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if self.max_redirects < 0:
            raise ValueError("max_redirects must be non-negative")
        self.base_url = self.base_url.rstrip("/")


def redact_url(url: str) -> str:
    """Mask credential-looking query parameters so URLs are safe to log."""
    parts = urlsplit(url)
    if not parts.query:
        return url
    query = [
        (key, "***" if key.lower() in _SENSITIVE_PARAMS else value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
    ]
    return urlunsplit(parts._replace(query=urlencode(query, safe="*")))


def _auth_headers(api_key: str) -> Dict[str, str]:
    if not api_key or not api_key.strip():
        raise InitError("Invalid API key: the key is empty")
    if not (api_key.isascii() and api_key.isprintable()):
        raise InitError("Invalid API key: the key is not a valid header value")
    return {
        "Authorization": f"Bearer {api_key}",
        "Accept": "application/json",
    }


class AggregatesClient(PageFetcher):
    """
    Async client for ``/v2/aggs`` pages.

    One instance is shared by all symbol pipelines of a run; headers are
    negotiated once here and every call is independent of the others.
    """

    def __init__(
        self,
        api_key: str,
        http_config: Optional[HttpConfig] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the client.

        Raises:
            InitError: the API key is malformed or the transport cannot be built.
        """
        headers = _auth_headers(api_key)
        try:
            self.http_config = http_config or HttpConfig()
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.http_config.timeout),
                follow_redirects=True,
                max_redirects=self.http_config.max_redirects,
                headers={
                    "User-Agent": self.http_config.user_agent,
                    **self.http_config.headers,
                    **headers,
                },
                transport=transport,
            )
        except (ValueError, TypeError, httpx.HTTPError) as exc:
            raise InitError(
                f"Failed to initialize the client: {exc}",
                details={"error_type": type(exc).__name__},
            ) from exc

    async def __aenter__(self) -> "AggregatesClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self) -> None:
        """Close HTTP client and cleanup resources."""
        await self._client.aclose()

    def build_url(self, request: AggregateRequest) -> str:
        """Build the first-page URL for ``request``."""
        symbol = quote(request.symbol, safe=":.")
        return (
            f"{self.http_config.base_url}/v2/aggs/ticker/{symbol}/range/{MULTIPLIER}/"
            f"{request.granularity.value}/{request.start_millis}/{request.end_millis}"
            f"?limit={request.page_limit}"
        )

    async def fetch(self, request: AggregateRequest) -> AggregatePage:
        """Fetch one page; continuation URLs are used verbatim."""
        url = request.continuation or self.build_url(request)
        safe_url = redact_url(url)

        try:
            response = await self._client.get(url)
        except (httpx.RequestError, httpx.InvalidURL) as exc:
            raise FetchSendError(f"Error sending request: {exc}", url=safe_url) from exc

        if response.is_error:
            raise FetchStatusError(
                f"Unexpected status code: {response.status_code}",
                status_code=response.status_code,
                url=safe_url,
                details={"body": response.text[:500]},
            )

        try:
            payload = json.loads(response.text, parse_float=Decimal)
            page = AggregatePage.model_validate(payload)
        except (ValueError, ValidationError) as exc:
            raise FetchDecodeError(f"Failed to deserialize response: {exc}", url=safe_url) from exc

        logger.debug(
            "Got response",
            symbol=request.symbol,
            status=response.status_code,
            num_results=len(page.results),
        )
        return page


def create_http_config(base_url: str = BASE_URL, timeout: float = 30.0, **kwargs) -> HttpConfig:
    """Factory function to create HTTP configuration."""
    return HttpConfig(base_url=base_url, timeout=timeout, **kwargs)
