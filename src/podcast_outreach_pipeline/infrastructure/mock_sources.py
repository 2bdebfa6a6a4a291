"""Offline search and feed sources used for mock runs.

Usage example:
    from podcast_outreach_pipeline.infrastructure.mock_sources import (
        SEEDED_FEEDS,
        InMemoryFeedClient,
        MockPodcastSearchClient,
    )

    search = MockPodcastSearchClient()
    feeds = InMemoryFeedClient(SEEDED_FEEDS)
    for candidate in search.search(["growth"], published_after_days=60):
        print(feeds.fetch(candidate.feed_url)[:40])
"""

from __future__ import annotations

import threading
from collections.abc import Mapping, Sequence
from typing import override

from ..domain.models import Candidate
from ..exceptions import FeedFetchError
from ..protocols import FeedClient, PodcastSearchClient

SEEDED_CANDIDATES: tuple[Candidate, ...] = (
    Candidate(
        id="show-ai-founders",
        name="AI Founders Weekly",
        feed_url="memory://ai-founders",
        description="Interviews with startup founders building AI products.",
        estimated_reach=0.76,
        language="en",
    ),
    Candidate(
        id="show-b2b-growth",
        name="B2B Growth Stories",
        feed_url="memory://b2b-growth",
        description="Practical growth playbooks for SaaS and B2B marketing teams.",
        estimated_reach=0.63,
        language="en",
    ),
    Candidate(
        id="show-creator-playbook",
        name="Creator Monetization Playbook",
        feed_url="memory://creator-playbook",
        description="How creators build audiences, monetize newsletters, and scale podcasts.",
        estimated_reach=0.58,
        language="en",
    ),
)

SEEDED_FEEDS: dict[str, str] = {
    "memory://ai-founders": """\
<rss version="2.0" xmlns:itunes="http://www.itunes.com/dtds/podcast-1.0.dtd">
  <channel>
    <title>AI Founders Weekly</title>
    <language>en-us</language>
    <itunes:owner>
      <itunes:name>AI Founders Team</itunes:name>
      <itunes:email>team@aifoundersweekly.fm</itunes:email>
    </itunes:owner>
    <description>Reach us at partnerships [at] aifoundersweekly.fm for collaborations.</description>
    <item>
      <title>How AI copilots change onboarding</title>
      <description>Discussing SaaS onboarding and startup growth loops.</description>
      <pubDate>Fri, 20 Feb 2026 10:00:00 GMT</pubDate>
    </item>
    <item>
      <title>Building moats with workflow AI</title>
      <description>Founder interview on defensibility in B2B AI.</description>
      <pubDate>Fri, 13 Feb 2026 10:00:00 GMT</pubDate>
    </item>
    <item>
      <title>Lessons from failed launches</title>
      <description>Email us via contact(at)aifoundersweekly.fm.</description>
      <pubDate>Fri, 06 Feb 2026 10:00:00 GMT</pubDate>
    </item>
  </channel>
</rss>
""",
    "memory://b2b-growth": """\
<rss version="2.0" xmlns:itunes="http://www.itunes.com/dtds/podcast-1.0.dtd">
  <channel>
    <title>B2B Growth Stories</title>
    <language>en</language>
    <itunes:email>editor@b2bgrowthstories.com</itunes:email>
    <description>Stories from B2B marketers scaling revenue.</description>
    <item>
      <title>Category design for technical products</title>
      <description>Positioning and narrative with examples.</description>
      <pubDate>Wed, 18 Feb 2026 08:00:00 -0500</pubDate>
    </item>
    <item>
      <title>Sales and marketing handoff</title>
      <description>How revenue teams coordinate better.</description>
      <pubDate>Wed, 04 Feb 2026 08:00:00 -0500</pubDate>
    </item>
    <item>
      <title>Demand capture vs demand creation</title>
      <description>Budgeting across channels and cycles.</description>
      <pubDate>Invalid Date Example</pubDate>
    </item>
  </channel>
</rss>
""",
    "memory://creator-playbook": """\
<rss version="2.0" xmlns:itunes="http://www.itunes.com/dtds/podcast-1.0.dtd">
  <channel>
    <title>Creator Monetization Playbook</title>
    <language>en</language>
    <description>Business systems for creator-led brands. Partnerships at hello (at) creatorplaybook.io.</description>
    <item>
      <title>Newsletter funnels that convert</title>
      <description>From content to product with practical examples.</description>
      <pubDate>Mon, 12 Jan 2026 15:00:00 GMT</pubDate>
    </item>
    <item>
      <title>Sponsorship pricing fundamentals</title>
      <description>How audience quality affects ad rates.</description>
      <pubDate>Mon, 22 Dec 2025 15:00:00 GMT</pubDate>
    </item>
    <item>
      <title>Membership retention playbook</title>
      <description>Retention tactics and community loops.</description>
      <pubDate>Mon, 01 Dec 2025 15:00:00 GMT</pubDate>
    </item>
  </channel>
</rss>
""",
}


class MockPodcastSearchClient(PodcastSearchClient):
    """Keyword filter over a fixed set of seeded shows."""

    def __init__(self, candidates: Sequence[Candidate] = SEEDED_CANDIDATES) -> None:
        self._candidates = tuple(candidates)

    @override
    def search(self, keywords: Sequence[str], published_after_days: int) -> list[Candidate]:
        _ = published_after_days
        normalized = sorted({k.strip().lower() for k in keywords if k and k.strip()})
        if not normalized:
            return list(self._candidates)
        return [
            candidate
            for candidate in self._candidates
            if any(
                keyword in f"{candidate.name} {candidate.description}".lower()
                for keyword in normalized
            )
        ]


class InMemoryFeedClient(FeedClient):
    """Serves feed markup from a URL-keyed mapping (case-insensitive)."""

    def __init__(self, feeds: Mapping[str, str]) -> None:
        self._feeds = {url.lower(): xml for url, xml in feeds.items()}

    @override
    def fetch(self, feed_url: str, *, cancel_event: threading.Event | None = None) -> str:
        _ = cancel_event
        xml = self._feeds.get(feed_url.lower())
        if xml is None:
            raise FeedFetchError(feed_url, reason="no in-memory feed registered")
        return xml
