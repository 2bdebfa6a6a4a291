"""Protocol definitions for dependency injection.

These protocols define the collaborators the ranking pipeline depends on,
enabling isolated unit testing with fake implementations.
"""

from __future__ import annotations

import threading
from collections.abc import Sequence
from datetime import datetime
from typing import Protocol, runtime_checkable

from .domain.models import Candidate, FeedParseResult


@runtime_checkable
class Clock(Protocol):
    """Source of the current time."""

    def now(self) -> datetime:
        """Return the current time as an aware UTC datetime."""
        ...


@runtime_checkable
class PodcastSearchClient(Protocol):
    """Abstract podcast search capability."""

    def search(self, keywords: Sequence[str], published_after_days: int) -> list[Candidate]:
        """Return candidate shows for the keywords.

        Args:
            keywords: Topical keywords; may be empty.
            published_after_days: Recency window requested by the caller.

        Returns:
            Candidates (possibly empty).

        Raises:
            PodcastSearchError: On transport failure only.
        """
        ...


@runtime_checkable
class FeedClient(Protocol):
    """Abstract feed transport."""

    def fetch(self, feed_url: str, *, cancel_event: threading.Event | None = None) -> str:
        """Return the raw feed text.

        Raises:
            FeedFetchError: On network or HTTP errors.
        """
        ...


@runtime_checkable
class FeedParser(Protocol):
    """Abstract feed parser."""

    def parse(self, feed_xml: str) -> FeedParseResult:
        """Parse raw feed markup into a payload plus issues."""
        ...


@runtime_checkable
class ProgressReporter(Protocol):
    """CLI-owned progress reporting interface."""

    def start(self, label: str, total: int | None) -> None:
        """Start a progress session."""
        ...

    def advance(self, count: int) -> None:
        """Advance progress by count."""
        ...

    def finish(self) -> None:
        """Finish a progress session."""
        ...
