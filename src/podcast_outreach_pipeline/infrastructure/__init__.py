"""Concrete infrastructure implementations and shared helpers."""

from .clock import SystemClock
from .io.http import ListenNotesSearchClient, RequestsFeedClient, RetryingFeedClient
from .io.rss import RssFeedParser
from .mock_sources import SEEDED_FEEDS, InMemoryFeedClient, MockPodcastSearchClient
from .resilience import RetryPolicy

__all__ = [
    "SEEDED_FEEDS",
    "InMemoryFeedClient",
    "ListenNotesSearchClient",
    "MockPodcastSearchClient",
    "RequestsFeedClient",
    "RetryPolicy",
    "RetryingFeedClient",
    "RssFeedParser",
    "SystemClock",
]
