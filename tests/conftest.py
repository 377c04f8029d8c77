"""Shared fixtures."""

from collections.abc import Iterator

import pytest
import structlog

from src.collectors.metrics import CollectorMetrics
from src.fetch.metrics import FetchMetrics
from src.ranker.metrics import RankerMetrics
from src.store.metrics import StoreMetrics


@pytest.fixture(autouse=True)
def reset_singletons() -> Iterator[None]:
    """Give every test fresh metrics and default logging."""
    for metrics in (CollectorMetrics, FetchMetrics, RankerMetrics, StoreMetrics):
        metrics.reset()
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


@pytest.fixture
def anyio_backend() -> str:
    """Run anyio-marked tests on asyncio, the backend the project targets."""
    return "asyncio"
