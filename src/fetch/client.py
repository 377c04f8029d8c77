"""Single-attempt HTTP GET client returning typed results."""

import time
from urllib.parse import urlparse

import httpx
import structlog

from src.fetch.config import FetchConfig
from src.fetch.constants import (
    HTTP_STATUS_BAD_REQUEST,
    HTTP_STATUS_OK_MAX,
    HTTP_STATUS_OK_MIN,
    HTTP_STATUS_SERVER_ERROR_MAX,
    HTTP_STATUS_SERVER_ERROR_MIN,
    HTTP_STATUS_TOO_MANY_REQUESTS,
)
from src.fetch.metrics import FetchMetrics
from src.fetch.models import FetchError, FetchErrorClass, FetchResult
from src.fetch.redact import redact_headers, redact_url_credentials


logger = structlog.get_logger()


def classify_status(status_code: int) -> FetchError | None:
    """Map a response status to a FetchError, or None for 2xx."""
    if HTTP_STATUS_OK_MIN <= status_code < HTTP_STATUS_OK_MAX:
        return None

    if status_code == HTTP_STATUS_TOO_MANY_REQUESTS:
        error_class, message = FetchErrorClass.RATE_LIMITED, "Rate limited"
    elif HTTP_STATUS_BAD_REQUEST <= status_code < HTTP_STATUS_SERVER_ERROR_MIN:
        error_class, message = FetchErrorClass.HTTP_4XX, "Client error"
    elif HTTP_STATUS_SERVER_ERROR_MIN <= status_code < HTTP_STATUS_SERVER_ERROR_MAX:
        error_class, message = FetchErrorClass.HTTP_5XX, "Server error"
    else:
        error_class, message = FetchErrorClass.UNKNOWN, "Unexpected status"

    return FetchError(
        error_class=error_class,
        message=f"{message} ({status_code})",
        status_code=status_code,
    )


class HttpFetcher:
    """HTTP GET client that never raises for transport or status failures.

    Every outcome is returned as a FetchResult; failures carry a classified
    FetchError. Exactly one request is made per call.
    """

    def __init__(
        self,
        config: FetchConfig | None = None,
        run_id: str = "",
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the HTTP fetcher.

        Args:
            config: Fetch configuration.
            run_id: Unique run identifier for logging.
            transport: Optional httpx transport (tests use httpx.MockTransport).
        """
        self._config = config or FetchConfig()
        self._transport = transport
        self._metrics = FetchMetrics.get_instance()
        self._log = logger.bind(component="fetch", run_id=run_id)

    def fetch(
        self,
        url: str,
        params: dict[str, str | int] | None = None,
        extra_headers: dict[str, str] | None = None,
    ) -> FetchResult:
        """GET a URL once.

        Args:
            url: The URL to fetch.
            params: Query parameters.
            extra_headers: Additional headers to include.

        Returns:
            FetchResult with status, body, and error information.
        """
        headers = {
            "User-Agent": self._config.user_agent,
            "Accept": "application/json",
            **self._config.headers,
            **(extra_headers or {}),
        }
        log = self._log.bind(
            url=redact_url_credentials(url),
            domain=urlparse(url).netloc,
            params=params or {},
            headers=redact_headers(headers),
        )

        start_ns = time.perf_counter_ns()
        try:
            with httpx.Client(
                timeout=self._config.timeout_seconds,
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                response = client.get(url, params=params, headers=headers)
        except httpx.TimeoutException as e:
            result = self._failure(
                url, FetchErrorClass.NETWORK_TIMEOUT, f"Request timed out: {e}"
            )
        except httpx.ConnectError as e:
            result = self._failure(
                url, FetchErrorClass.CONNECTION_ERROR, f"Connection failed: {e}"
            )
        except httpx.HTTPError as e:
            log.warning("fetch_transport_error", error=str(e))
            result = self._failure(url, FetchErrorClass.UNKNOWN, f"Unexpected error: {e}")
        else:
            self._metrics.record_request(response.status_code, len(response.content))
            result = FetchResult(
                status_code=response.status_code,
                final_url=str(response.url),
                headers=dict(response.headers),
                body_bytes=response.content,
                error=classify_status(response.status_code),
            )

        duration_ms = (time.perf_counter_ns() - start_ns) / 1_000_000
        self._metrics.record_duration(duration_ms)
        if result.error is not None:
            self._metrics.record_failure(result.error.error_class)

        log.debug(
            "fetch_complete",
            status_code=result.status_code,
            bytes=result.body_size,
            duration_ms=round(duration_ms, 2),
            error_class=result.error.error_class.value if result.error else None,
        )
        return result

    @staticmethod
    def _failure(url: str, error_class: FetchErrorClass, message: str) -> FetchResult:
        return FetchResult(
            status_code=0,
            final_url=url,
            error=FetchError(error_class=error_class, message=message),
        )
