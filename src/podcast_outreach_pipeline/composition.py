"""Composition root for wiring CLI dependencies."""

from __future__ import annotations

import requests

from .cli import CliDependencies, create_app
from .cli_progress import CliProgressReporter
from .config import PipelineConfig
from .infrastructure import (
    SEEDED_FEEDS,
    InMemoryFeedClient,
    ListenNotesSearchClient,
    MockPodcastSearchClient,
    RequestsFeedClient,
    RetryingFeedClient,
    RssFeedParser,
    SystemClock,
)
from .protocols import FeedClient, PodcastSearchClient


def build_cli_dependencies(*, config: PipelineConfig, use_mock: bool) -> CliDependencies:
    """Build concrete dependencies for a ranking run.

    Args:
        config: Pipeline configuration (used for API and transport wiring).
        use_mock: Whether to use the seeded offline search and feed sources.
    """
    search_client: PodcastSearchClient
    inner_feed_client: FeedClient
    if use_mock:
        search_client = MockPodcastSearchClient()
        inner_feed_client = InMemoryFeedClient(SEEDED_FEEDS)
    else:
        session = requests.Session()
        search_client = ListenNotesSearchClient(
            session=session,
            api_key=config.podcast_api_key,
            base_url=config.podcast_api_base_url,
            timeout_seconds=config.http_timeout_seconds,
        )
        inner_feed_client = RequestsFeedClient(
            session=session,
            timeout_seconds=config.http_timeout_seconds,
        )
    return CliDependencies(
        search_client=search_client,
        feed_client=RetryingFeedClient(
            inner_feed_client,
            retry_delay_seconds=config.feed_retry_delay_seconds,
        ),
        parser=RssFeedParser(),
        clock=SystemClock(),
        progress=CliProgressReporter(),
    )


app = create_app(build_cli_dependencies)
