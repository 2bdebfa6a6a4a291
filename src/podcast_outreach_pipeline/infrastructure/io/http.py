"""HTTP transports for feeds and the ListenNotes search API.

Usage example:
    import requests

    from podcast_outreach_pipeline.infrastructure.io.http import (
        ListenNotesSearchClient,
        RequestsFeedClient,
        RetryingFeedClient,
    )

    session = requests.Session()
    feeds = RetryingFeedClient(RequestsFeedClient(session=session))
    search = ListenNotesSearchClient(session=session, api_key="...")
    candidates = search.search(["hyrox", "masters"], published_after_days=60)
    feed_xml = feeds.fetch(candidates[0].feed_url)
"""

from __future__ import annotations

import threading
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from typing import override
from urllib.parse import urljoin

import requests

from ...domain.models import Candidate
from ...exceptions import FeedFetchError, PipelineCancelledError, PodcastSearchError
from ...observability import get_logger
from ...protocols import FeedClient, PodcastSearchClient
from ..resilience import RetryPolicy, wait_for_retry
from .validation import IncomingDataError, ListenNotesPodcastInput, parse_listennotes_results

logger = get_logger("podcast_outreach_pipeline.infrastructure.http")

USER_AGENT = "Nudge-Podcast-Bot/1.0"
DEFAULT_LISTENNOTES_BASE_URL = "https://listen-api.listennotes.com/api/v2/"
LISTENNOTES_ID_PREFIX = "listennotes:"
LISTENNOTES_PAGE_SIZE = 50
DEFAULT_REACH = 0.5


def parse_retry_after(headers: Mapping[str, str] | None) -> int | None:
    """Parse Retry-After header into seconds, if available."""
    if not headers:
        return None
    value = headers.get("Retry-After")
    if not value:
        return None
    value = value.strip()
    if value.isdigit():
        return int(value)
    try:
        dt = parsedate_to_datetime(value)
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=UTC)
        delta = (dt - datetime.now(UTC)).total_seconds()
        return max(0, int(delta))
    except (AttributeError, OverflowError, TypeError, ValueError):
        return None


def _response_details(response: requests.Response) -> str:
    """Return a compact status/body summary for error reporting."""
    try:
        body = response.text
    except (UnicodeDecodeError, ValueError, requests.RequestException):
        body = "<unreadable>"
    body = " ".join(body.split())
    if len(body) > 200:
        body = body[:200] + "..."
    return f"status={response.status_code}, body={body}"


class RequestsFeedClient(FeedClient):
    """Fetches raw feed text over HTTP."""

    def __init__(self, *, session: requests.Session, timeout_seconds: float = 10.0) -> None:
        self.session = session
        self.timeout_seconds = timeout_seconds

    @override
    def fetch(self, feed_url: str, *, cancel_event: threading.Event | None = None) -> str:
        if cancel_event is not None and cancel_event.is_set():
            raise PipelineCancelledError()
        try:
            response = self.session.get(
                feed_url,
                headers={"User-Agent": USER_AGENT},
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as exc:
            raise FeedFetchError(feed_url, reason=type(exc).__name__) from exc

        if not 200 <= response.status_code < 300:
            raise FeedFetchError(feed_url, status_code=response.status_code)
        return response.text


class RetryingFeedClient(FeedClient):
    """Retries any failed feed fetch once after a fixed, cancellable delay."""

    def __init__(self, inner: FeedClient, *, retry_delay_seconds: float = 0.3) -> None:
        self.inner = inner
        self.retry_delay_seconds = retry_delay_seconds

    @override
    def fetch(self, feed_url: str, *, cancel_event: threading.Event | None = None) -> str:
        try:
            return self.inner.fetch(feed_url, cancel_event=cancel_event)
        except PipelineCancelledError:
            raise
        except Exception as exc:
            if cancel_event is not None and cancel_event.is_set():
                raise PipelineCancelledError() from exc
            logger.debug("Retrying feed %s after failure: %s", feed_url, exc)

        if not wait_for_retry(self.retry_delay_seconds, cancel_event):
            raise PipelineCancelledError()
        return self.inner.fetch(feed_url, cancel_event=cancel_event)


def normalize_reach(listen_score: float | None) -> float:
    """Map a 0-100 listen score onto the 0.0-1.0 reach seed."""
    if listen_score is None:
        return DEFAULT_REACH
    return max(0.0, min(1.0, listen_score / 100.0))


def map_search_results(results: Sequence[ListenNotesPodcastInput]) -> list[Candidate]:
    """Convert validated search entries into candidates.

    Entries without an id or feed URL are skipped; repeated ids keep the
    first occurrence.
    """
    candidates: list[Candidate] = []
    seen: set[str] = set()
    for entry in results:
        raw_id = (entry.get("id") or "").strip()
        feed_url = (entry.get("rss") or "").strip()
        if not raw_id or not feed_url or raw_id in seen:
            continue
        seen.add(raw_id)
        candidates.append(
            Candidate(
                id=f"{LISTENNOTES_ID_PREFIX}{raw_id}",
                name=entry.get("title_original") or "",
                feed_url=feed_url,
                description=entry.get("description_original") or "",
                estimated_reach=normalize_reach(entry.get("listen_score")),
                language=entry.get("language"),
            )
        )
    return candidates


class ListenNotesSearchClient(PodcastSearchClient):
    """Podcast search backed by the ListenNotes v2 API.

    Retries once on 429, 5xx, timeouts and connection errors. Any other
    failure raises PodcastSearchError.
    """

    def __init__(
        self,
        *,
        session: requests.Session,
        api_key: str,
        base_url: str = DEFAULT_LISTENNOTES_BASE_URL,
        timeout_seconds: float = 10.0,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self.session = session
        self.api_key = api_key
        self.base_url = base_url if base_url.endswith("/") else f"{base_url}/"
        self.timeout_seconds = timeout_seconds
        self.retry_policy = retry_policy or RetryPolicy(backoff_seconds=0.2)

    def _request_params(self, keywords: Sequence[str]) -> dict[str, str]:
        query = " ".join(k.strip() for k in keywords if k and k.strip())
        return {"type": "podcast", "len": str(LISTENNOTES_PAGE_SIZE), "q": query}

    def _headers(self) -> dict[str, str]:
        headers = {"User-Agent": USER_AGENT}
        if self.api_key.strip():
            headers["X-ListenAPI-Key"] = self.api_key
        return headers

    @override
    def search(self, keywords: Sequence[str], published_after_days: int) -> list[Candidate]:
        _ = published_after_days
        url = urljoin(self.base_url, "search")
        params = self._request_params(keywords)
        attempt = 0
        while True:
            try:
                response = self.session.get(
                    url,
                    params=params,
                    headers=self._headers(),
                    timeout=self.timeout_seconds,
                )
            except self.retry_policy.retry_exceptions as exc:
                if attempt < self.retry_policy.max_retries:
                    wait_for_retry(self.retry_policy.compute_backoff(attempt))
                    attempt += 1
                    continue
                raise PodcastSearchError(type(exc).__name__) from exc
            except requests.RequestException as exc:
                raise PodcastSearchError(type(exc).__name__) from exc

            if self.retry_policy.is_retryable_status(response.status_code):
                if attempt < self.retry_policy.max_retries:
                    retry_after = None
                    if response.status_code == 429:
                        retry_after = parse_retry_after(getattr(response, "headers", None))
                    wait_for_retry(self.retry_policy.compute_backoff(attempt, retry_after))
                    attempt += 1
                    continue

            if not 200 <= response.status_code < 300:
                logger.warning("Podcast search rejected: %s", _response_details(response))
                raise PodcastSearchError(
                    f"HTTP {response.status_code}", status_code=response.status_code
                )

            try:
                results = parse_listennotes_results(response.text)
            except IncomingDataError as exc:
                raise PodcastSearchError("invalid JSON response") from exc

            candidates = map_search_results(results)
            logger.info("Podcast search returned %s candidates", len(candidates))
            return candidates
