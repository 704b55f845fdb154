"""
Tests for the aggregates HTTP adapter.

Requests are served by ``httpx.MockTransport`` so URL construction, headers
and failure classification can be checked without network access.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from decimal import Decimal

import httpx
import pytest

from aggfetch.core.config import AggFetchSettings
from aggfetch.core.exceptions import (
    FetchDecodeError,
    FetchError,
    FetchSendError,
    FetchStatusError,
    InitError,
)
from aggfetch.core.http_adapter import (
    AggregatesClient,
    HttpConfig,
    create_http_config,
    redact_url,
)
from aggfetch.core.models import Granularity, build_request
from aggfetch.core.services import create_client

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)
T1 = datetime(2024, 1, 2, tzinfo=timezone.utc)

PAGE_BODY = """
{
  "ticker": "AAPL",
  "queryCount": 2,
  "resultsCount": 2,
  "adjusted": true,
  "results": [
    {"v": 70790813, "vw": 131.6292, "o": 133.52, "c": 132.05, "h": 133.6116, "l": 131.1,
     "t": 1704067200000, "n": 645365},
    {"v": 1.5, "o": 0.123456789012345678, "c": 0.2, "h": 0.3, "l": 0.1, "t": 1704067260000}
  ],
  "status": "OK",
  "request_id": "6a7e466379af0a71039d60cc78e72282",
  "next_url": "https://api.polygon.io/v2/aggs/ticker/AAPL/range/1/day/1704067200000/1704153600000?cursor=bGltaXQ9Mg"
}
"""


def _client(handler, **kwargs) -> AggregatesClient:
    return AggregatesClient("secret-key", transport=httpx.MockTransport(handler), **kwargs)


def _request(**overrides):
    values = {
        "symbol": "AAPL",
        "granularity": Granularity.DAY,
        "range_start": T0,
        "range_end": T1,
        "page_limit": 100,
    }
    values.update(overrides)
    return build_request(**values)


class TestHttpConfig:
    """Test HttpConfig data class."""

    def test_http_config_defaults(self):
        config = HttpConfig()

        assert config.base_url == "https://api.polygon.io"
        assert config.timeout == 30.0
        assert config.headers == {}

    def test_trailing_slash_is_stripped(self):
        assert create_http_config("https://api.example.com/").base_url == "https://api.example.com"

    def test_http_config_validation_empty_url(self):
        with pytest.raises(ValueError, match="base_url cannot be empty"):
            HttpConfig(base_url="")

    def test_http_config_validation_scheme(self):
        with pytest.raises(ValueError, match="http"):
            HttpConfig(base_url="ftp://files.example.com")

    def test_http_config_validation_negative_timeout(self):
        with pytest.raises(ValueError, match="timeout must be positive"):
            HttpConfig(timeout=-1.0)


class TestClientInitialization:
    """Construction failures are reported as InitError."""

    def test_empty_api_key(self):
        with pytest.raises(InitError, match="empty"):
            AggregatesClient("")

    def test_api_key_with_control_characters(self):
        with pytest.raises(InitError, match="header"):
            AggregatesClient("abc\r\ndef")

    def test_invalid_base_url_from_settings(self):
        settings = AggFetchSettings(base_url="not a url")

        with pytest.raises(InitError, match="Invalid base URL"):
            create_client("secret-key", settings)

    def test_missing_key_from_settings(self):
        settings = AggFetchSettings(polygon_api_key=None)

        with pytest.raises(InitError):
            create_client(None, settings)


class TestFetch:
    """Behaviour of AggregatesClient.fetch."""

    @pytest.mark.asyncio
    async def test_first_page_url_and_headers(self):
        captured: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(200, text=PAGE_BODY)

        async with _client(handler) as client:
            await client.fetch(_request())

        assert len(captured) == 1
        sent = captured[0]
        assert sent.method == "GET"
        assert str(sent.url) == (
            "https://api.polygon.io/v2/aggs/ticker/AAPL/range/1/day/"
            "1704067200000/1704153600000?limit=100"
        )
        assert sent.headers["Authorization"] == "Bearer secret-key"
        assert sent.headers["Accept"] == "application/json"

    @pytest.mark.asyncio
    async def test_continuation_url_is_used_verbatim(self):
        captured: list[str] = []
        next_url = "https://api.polygon.io/v2/aggs/ticker/AAPL/range/1/day/1704067200000/1704153600000?cursor=bGltaXQ9Mg"

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(str(request.url))
            return httpx.Response(200, text=PAGE_BODY)

        async with _client(handler, http_config=HttpConfig(base_url="https://other.example.com")) as client:
            await client.fetch(_request().with_continuation(next_url))

        assert captured == [next_url]

    @pytest.mark.asyncio
    async def test_page_is_decoded_with_exact_decimals(self):
        async with _client(lambda request: httpx.Response(200, text=PAGE_BODY)) as client:
            page = await client.fetch(_request())

        assert page.ticker == "AAPL"
        assert page.results_count == 2
        assert page.next_url is not None and page.next_url.endswith("cursor=bGltaXQ9Mg")
        first, second = page.results
        assert first.vwap == Decimal("131.6292")
        assert first.transactions == 645365
        assert second.open == Decimal("0.123456789012345678")
        assert second.volume == Decimal("1.5")
        assert second.transactions is None

    @pytest.mark.asyncio
    async def test_fetch_does_not_mutate_request(self):
        request = _request()
        snapshot = (request.symbol, request.continuation, request.page_limit)

        async with _client(lambda r: httpx.Response(200, text=PAGE_BODY)) as client:
            await client.fetch(request)
            await client.fetch(request)

        assert (request.symbol, request.continuation, request.page_limit) == snapshot

    @pytest.mark.asyncio
    async def test_url_is_rebuilt_identically(self):
        urls: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            urls.append(str(request.url))
            return httpx.Response(200, text=PAGE_BODY)

        async with _client(handler) as client:
            await client.fetch(_request())
            await client.fetch(_request())

        assert urls[0] == urls[1]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [400, 403, 429, 500, 503])
    async def test_error_status_raises_status_error(self, status_code):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status_code, json={"status": "ERROR", "error": "nope"})

        async with _client(handler) as client:
            with pytest.raises(FetchStatusError) as exc_info:
                await client.fetch(_request())

        assert exc_info.value.status_code == status_code
        assert exc_info.value.details["status_code"] == status_code
        assert isinstance(exc_info.value, FetchError)

    @pytest.mark.asyncio
    async def test_transport_failure_raises_send_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with _client(handler) as client:
            with pytest.raises(FetchSendError, match="connection refused"):
                await client.fetch(_request())

    @pytest.mark.asyncio
    async def test_invalid_json_raises_decode_error(self):
        async with _client(lambda r: httpx.Response(200, text="<html>oops</html>")) as client:
            with pytest.raises(FetchDecodeError):
                await client.fetch(_request())

    @pytest.mark.asyncio
    async def test_wrong_envelope_raises_decode_error(self):
        body = json.dumps({"status": "OK", "results": []})

        async with _client(lambda r: httpx.Response(200, text=body)) as client:
            with pytest.raises(FetchDecodeError):
                await client.fetch(_request())

    @pytest.mark.asyncio
    async def test_no_retry_on_failure(self):
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(503)

        async with _client(handler) as client:
            with pytest.raises(FetchStatusError):
                await client.fetch(_request())

        assert len(calls) == 1


def test_redact_url_masks_credentials():
    assert (
        redact_url("https://api.example.com/v2/aggs?cursor=abc&apiKey=secret")
        == "https://api.example.com/v2/aggs?cursor=abc&apiKey=***"
    )
    assert redact_url("https://api.example.com/v2/aggs") == "https://api.example.com/v2/aggs"
