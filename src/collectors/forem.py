"""Paginated client for the Forem articles endpoint.

Pages are requested strictly one after another with a fixed pause between
them, until the endpoint answers with an empty page.
"""

import time
from collections.abc import Callable
from typing import Any

import structlog
from pydantic import ValidationError

from src.collectors.constants import (
    COMPONENT_COLLECTOR,
    DEFAULT_PAGE_DELAY_SECONDS,
    DEFAULT_PER_PAGE,
    FOREM_API_ARTICLES_PATH,
    FOREM_API_BASE_URL,
)
from src.collectors.errors import ParseError, UpstreamError
from src.collectors.metrics import CollectorMetrics
from src.collectors.models import Article
from src.fetch.client import HttpFetcher


logger = structlog.get_logger()


class ForemArticleClient:
    """Fetches every article carrying a tag from a Forem instance.

    API documentation: https://developers.forem.com/api/v1#tag/articles
    """

    def __init__(
        self,
        http_client: HttpFetcher,
        base_url: str = FOREM_API_BASE_URL,
        page_delay_seconds: float = DEFAULT_PAGE_DELAY_SECONDS,
        api_key: str | None = None,
        sleep: Callable[[float], None] = time.sleep,
        run_id: str = "",
    ) -> None:
        """Initialize the client.

        Args:
            http_client: HTTP fetcher used for every page request.
            base_url: API root, without a trailing slash.
            page_delay_seconds: Pause after each non-empty page.
            api_key: Optional Forem API key, sent as the ``api-key`` header.
            sleep: Sleep function, injectable for tests.
            run_id: Run identifier for logging.
        """
        self._http = http_client
        self._base_url = base_url.rstrip("/")
        self._page_delay_seconds = page_delay_seconds
        self._api_key = api_key
        self._sleep = sleep
        self._metrics = CollectorMetrics.get_instance()
        self._log = logger.bind(component=COMPONENT_COLLECTOR, run_id=run_id)

    def fetch_page(
        self, tag: str, page: int = 1, per_page: int = DEFAULT_PER_PAGE
    ) -> list[Article]:
        """Fetch one page of articles for a tag.

        Args:
            tag: Tag to filter by.
            page: 1-based page number.
            per_page: Page size.

        Returns:
            Articles on the page, in API order.

        Raises:
            UpstreamError: If the endpoint answered with a failure.
            ParseError: If the body is not a JSON array of articles.
        """
        url = f"{self._base_url}{FOREM_API_ARTICLES_PATH}"
        headers = {"api-key": self._api_key} if self._api_key else None
        result = self._http.fetch(
            url,
            params={"tag": tag, "page": page, "per_page": per_page},
            extra_headers=headers,
        )

        if result.error is not None:
            self._metrics.record_failure(tag)
            self._log.warning(
                "page_fetch_failed",
                tag=tag,
                page=page,
                status_code=result.status_code,
                error_class=result.error.error_class.value,
            )
            raise UpstreamError(tag=tag, page=page, fetch_error=result.error)

        try:
            payload = result.decode_json()
        except ValueError as e:
            msg = f"Response for tag '{tag}' page {page} is not valid JSON: {e}"
            raise ParseError(msg, source_id=tag, page=page) from e

        articles = self._parse_page(tag, page, payload)
        self._metrics.record_page(tag, len(articles))
        self._log.info("page_fetched", tag=tag, page=page, articles=len(articles))
        return articles

    def fetch_all(self, tag: str, per_page: int = DEFAULT_PER_PAGE) -> list[Article]:
        """Fetch every page for a tag and merge them.

        Articles keep the API's page order. An id seen on an earlier page is
        skipped when it shows up again, which happens when new posts shift
        the pages while we walk them.

        Args:
            tag: Tag to filter by.
            per_page: Page size.

        Returns:
            All articles for the tag, unique by id.

        Raises:
            UpstreamError: If any page fails. Nothing fetched so far is kept.
            ParseError: If any page body is malformed.
        """
        merged: list[Article] = []
        seen_ids: set[int] = set()
        duplicates = 0
        page = 1

        while True:
            articles = self.fetch_page(tag, page, per_page)
            if not articles:
                break

            for article in articles:
                if article.id in seen_ids:
                    duplicates += 1
                    continue
                seen_ids.add(article.id)
                merged.append(article)

            page += 1
            self._sleep(self._page_delay_seconds)

        self._log.info(
            "tag_fetch_complete",
            tag=tag,
            pages=page - 1,
            articles=len(merged),
            duplicates_skipped=duplicates,
        )
        return merged

    def _parse_page(self, tag: str, page: int, payload: Any) -> list[Article]:
        if not isinstance(payload, list):
            msg = f"Expected a JSON array of articles for tag '{tag}' page {page}"
            raise ParseError(msg, source_id=tag, page=page)

        try:
            return [Article.model_validate(item) for item in payload]
        except ValidationError as e:
            msg = f"Malformed article on page {page} for tag '{tag}': {e}"
            raise ParseError(msg, source_id=tag, page=page) from e
