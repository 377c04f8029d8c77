"""HTTP fetch layer returning typed results instead of raising."""

from src.fetch.client import HttpFetcher, classify_status
from src.fetch.config import FetchConfig
from src.fetch.metrics import FetchMetrics
from src.fetch.models import FetchError, FetchErrorClass, FetchResult
from src.fetch.redact import redact_headers, redact_url_credentials


__all__ = [
    "FetchConfig",
    "FetchError",
    "FetchErrorClass",
    "FetchMetrics",
    "FetchResult",
    "HttpFetcher",
    "classify_status",
    "redact_headers",
    "redact_url_credentials",
]
