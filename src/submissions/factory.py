"""Wiring of the submission service from application settings."""

import time
from collections.abc import Callable

import httpx

from src.collectors.forem import ForemArticleClient
from src.fetch.client import HttpFetcher
from src.fetch.config import FetchConfig
from src.ranker.cache import open_file_cache
from src.settings.app import AppSettings
from src.store.store import TagStore
from src.submissions.service import SubmissionService


def build_service(
    settings: AppSettings,
    run_id: str = "",
    transport: httpx.BaseTransport | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> SubmissionService:
    """Create a SubmissionService backed by the configured directories.

    Args:
        settings: Application settings.
        run_id: Run identifier for logging.
        transport: Optional httpx transport, for tests.
        sleep: Sleep function shared by page and tag delays.

    Returns:
        Ready-to-use SubmissionService.
    """
    fetcher = HttpFetcher(
        config=FetchConfig(
            user_agent=settings.user_agent,
            timeout_seconds=settings.timeout_seconds,
        ),
        run_id=run_id,
        transport=transport,
    )
    client = ForemArticleClient(
        fetcher,
        base_url=settings.api_base_url,
        page_delay_seconds=settings.page_delay_seconds,
        api_key=settings.forem_api_key,
        sleep=sleep,
        run_id=run_id,
    )
    store = TagStore(settings.data_dir, settings.backup_dir, run_id=run_id)
    return SubmissionService(
        client,
        store,
        cache=open_file_cache(settings.cache_dir),
        per_page=settings.per_page,
        tag_delay_seconds=settings.tag_delay_seconds,
        sleep=sleep,
        run_id=run_id,
    )
