"""Tests for the seeded offline sources."""

from __future__ import annotations

import pytest

from podcast_outreach_pipeline.exceptions import FeedFetchError
from podcast_outreach_pipeline.infrastructure.io.rss import INVALID_PUB_DATE, RssFeedParser
from podcast_outreach_pipeline.infrastructure.mock_sources import (
    SEEDED_CANDIDATES,
    SEEDED_FEEDS,
    InMemoryFeedClient,
    MockPodcastSearchClient,
)


class TestMockPodcastSearchClient:
    def test_no_keywords_returns_every_seeded_show(self) -> None:
        assert MockPodcastSearchClient().search([], 60) == list(SEEDED_CANDIDATES)

    def test_blank_keywords_count_as_none(self) -> None:
        assert len(MockPodcastSearchClient().search(["", "  "], 60)) == 3

    def test_filters_on_name_and_description(self) -> None:
        names = [c.name for c in MockPodcastSearchClient().search([" SaaS "], 60)]

        assert names == ["B2B Growth Stories"]

    def test_any_keyword_matches(self) -> None:
        ids = [c.id for c in MockPodcastSearchClient().search(["founders", "newsletters"], 60)]

        assert ids == ["show-ai-founders", "show-creator-playbook"]

    def test_unmatched_keyword_returns_nothing(self) -> None:
        assert MockPodcastSearchClient().search(["hyrox"], 60) == []


class TestInMemoryFeedClient:
    def test_lookup_is_case_insensitive(self) -> None:
        client = InMemoryFeedClient(SEEDED_FEEDS)

        assert client.fetch("MEMORY://AI-FOUNDERS") == SEEDED_FEEDS["memory://ai-founders"]

    def test_unknown_url_raises(self) -> None:
        with pytest.raises(FeedFetchError):
            InMemoryFeedClient(SEEDED_FEEDS).fetch("memory://missing")


class TestSeededFeeds:
    def test_every_seeded_candidate_has_a_parseable_feed(self) -> None:
        parser = RssFeedParser()
        for candidate in SEEDED_CANDIDATES:
            result = parser.parse(SEEDED_FEEDS[candidate.feed_url])
            assert result.success, candidate.feed_url
            assert len(result.payload.episodes) == 3

    def test_owner_email_wins_over_obfuscated_description(self) -> None:
        payload = RssFeedParser().parse(SEEDED_FEEDS["memory://ai-founders"]).payload

        assert payload.contact_email == "team@aifoundersweekly.fm"

    def test_obfuscated_channel_description_is_decoded(self) -> None:
        payload = RssFeedParser().parse(SEEDED_FEEDS["memory://creator-playbook"]).payload

        assert payload.contact_email == "hello@creatorplaybook.io"

    def test_invalid_date_is_reported(self) -> None:
        result = RssFeedParser().parse(SEEDED_FEEDS["memory://b2b-growth"])

        assert [issue.code for issue in result.issues] == [INVALID_PUB_DATE]
