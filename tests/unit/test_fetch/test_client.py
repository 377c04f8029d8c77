"""Unit tests for the HTTP fetcher."""

import httpx
import pytest

from src.fetch.client import HttpFetcher, classify_status
from src.fetch.config import FetchConfig
from src.fetch.metrics import FetchMetrics
from src.fetch.models import FetchErrorClass, FetchResult


URL = "https://dev.to/api/articles"


def _fetcher(handler, config: FetchConfig | None = None) -> HttpFetcher:
    return HttpFetcher(config=config, transport=httpx.MockTransport(handler))


class TestHttpFetcherSuccess:
    """Tests for successful fetches."""

    def test_returns_body_and_status(self) -> None:
        """Test a 200 response is returned without error."""
        fetcher = _fetcher(lambda request: httpx.Response(200, json=[{"id": 1}]))

        result = fetcher.fetch(URL)

        assert result.is_success
        assert result.error is None
        assert result.decode_json() == [{"id": 1}]

    def test_sends_params_and_headers(self) -> None:
        """Test query parameters and extra headers reach the server."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[])

        fetcher = _fetcher(handler, FetchConfig(user_agent="tests/1.0"))
        fetcher.fetch(
            URL,
            params={"tag": "xchallenge", "page": 2, "per_page": 30},
            extra_headers={"api-key": "secret"},
        )

        request = seen[0]
        assert request.url.params["tag"] == "xchallenge"
        assert request.url.params["page"] == "2"
        assert request.url.params["per_page"] == "30"
        assert request.headers["api-key"] == "secret"
        assert request.headers["User-Agent"] == "tests/1.0"

    def test_single_attempt_per_call(self) -> None:
        """Test that failures are not retried."""
        calls: list[int] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(1)
            return httpx.Response(503)

        _fetcher(handler).fetch(URL)

        assert len(calls) == 1

    def test_records_metrics(self) -> None:
        """Test that requests and bytes are counted."""
        fetcher = _fetcher(lambda request: httpx.Response(200, content=b"[]"))

        fetcher.fetch(URL)

        metrics = FetchMetrics.get_instance()
        assert metrics.http_requests_total == {200: 1}
        assert metrics.http_bytes_total == 2


class TestHttpFetcherFailures:
    """Tests for classified failures."""

    @pytest.mark.parametrize(
        ("status", "error_class"),
        [
            (404, FetchErrorClass.HTTP_4XX),
            (429, FetchErrorClass.RATE_LIMITED),
            (500, FetchErrorClass.HTTP_5XX),
            (503, FetchErrorClass.HTTP_5XX),
        ],
    )
    def test_status_classification(
        self, status: int, error_class: FetchErrorClass
    ) -> None:
        """Test non-2xx statuses map to error classes."""
        result = _fetcher(lambda request: httpx.Response(status)).fetch(URL)

        assert not result.is_success
        assert result.error is not None
        assert result.error.error_class == error_class
        assert result.error.status_code == status

    def test_connection_error(self) -> None:
        """Test connection failures become CONNECTION_ERROR results."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        result = _fetcher(handler).fetch(URL)

        assert result.status_code == 0
        assert result.error is not None
        assert result.error.error_class == FetchErrorClass.CONNECTION_ERROR

    def test_timeout(self) -> None:
        """Test timeouts become NETWORK_TIMEOUT results."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        result = _fetcher(handler).fetch(URL)

        assert result.error is not None
        assert result.error.error_class == FetchErrorClass.NETWORK_TIMEOUT
        assert FetchMetrics.get_instance().http_failures_total == {
            "NETWORK_TIMEOUT": 1
        }

    def test_redirect_status_is_unknown(self) -> None:
        """Test statuses outside the known ranges are UNKNOWN."""
        result = _fetcher(lambda request: httpx.Response(304)).fetch(URL)

        assert result.error is not None
        assert result.error.error_class == FetchErrorClass.UNKNOWN
        assert result.error.message == "Unexpected status (304)"


class TestFetchConfig:
    """Tests for fetch configuration."""

    def test_rejects_credential_headers(self) -> None:
        """Test credentials cannot be stored as static headers."""
        with pytest.raises(ValueError, match="FOREM_API_KEY"):
            FetchConfig(headers={"API-Key": "secret"})

    def test_timeout_bounds(self) -> None:
        """Test the timeout is bounded."""
        with pytest.raises(ValueError):
            FetchConfig(timeout_seconds=0.5)


class TestFetchResult:
    """Tests for FetchResult helpers."""

    def test_decode_json_invalid(self) -> None:
        """Test invalid JSON raises ValueError."""
        result = FetchResult(status_code=200, final_url=URL, body_bytes=b"<html>")

        with pytest.raises(ValueError):
            result.decode_json()

    def test_body_size(self) -> None:
        """Test body_size counts bytes."""
        result = FetchResult(status_code=200, final_url=URL, body_bytes=b"[1, 2]")

        assert result.body_size == 6


class TestClassifyStatus:
    """Tests for classify_status."""

    @pytest.mark.parametrize("status", [200, 201, 299])
    def test_success_range(self, status: int) -> None:
        """Test 2xx statuses are not errors."""
        assert classify_status(status) is None

    def test_rate_limit_message(self) -> None:
        """Test 429 is reported separately from other client errors."""
        error = classify_status(429)

        assert error is not None
        assert error.error_class == FetchErrorClass.RATE_LIMITED
        assert error.message == "Rate limited (429)"
