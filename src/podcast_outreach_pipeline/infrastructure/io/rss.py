"""RSS feed parsing into normalized feed payloads.

Usage example:
    from podcast_outreach_pipeline.infrastructure.io.rss import RssFeedParser

    result = RssFeedParser().parse(feed_xml)
    if result.success:
        print(result.payload.contact_email, len(result.payload.episodes))
    for issue in result.issues:
        print(issue.code, issue.message)
"""

from __future__ import annotations

import re

# Bandit: parsing handled via defusedxml safe APIs
import xml.etree.ElementTree as ET  # nosec B405
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from typing import override

from defusedxml.ElementTree import fromstring as safe_fromstring

from ...domain.models import Episode, FeedParseResult, FeedPayload, ParseIssue
from ...protocols import FeedParser

ITUNES_NS = "http://www.itunes.com/dtds/podcast-1.0.dtd"
MAX_EPISODES = 3

EMPTY_FEED = "empty_feed"
INVALID_FEED = "invalid_feed"
PARSE_EXCEPTION = "parse_exception"
INVALID_PUB_DATE = "invalid_pub_date"

_EMAIL_RE = re.compile(r"\b[A-Z0-9._%+\-]+@[A-Z0-9.\-]+\.[A-Z]{2,}\b", re.IGNORECASE)
_BRACKET_AT_RE = re.compile(r"\[at\]", re.IGNORECASE)
_PAREN_AT_RE = re.compile(r"\(at\)", re.IGNORECASE)
_AT_WORD_RE = re.compile(r"\bat\b", re.IGNORECASE)
_AROUND_AT_RE = re.compile(r"\s*@\s*")


def _text(element: ET.Element | None) -> str | None:
    if element is None:
        return None
    return "".join(element.itertext())


def _first_non_blank(*values: str | None) -> str | None:
    for value in values:
        if value is not None and value.strip():
            return value.strip()
    return None


def normalize_obfuscated_email(text: str) -> str:
    """Rewrite common "name at domain" obfuscations into a bare @."""
    if not text.strip():
        return ""
    output = _BRACKET_AT_RE.sub("@", text)
    output = _PAREN_AT_RE.sub("@", output)
    output = _AT_WORD_RE.sub("@", output)
    return _AROUND_AT_RE.sub("@", output)


def extract_contact_email(channel: ET.Element) -> str | None:
    """Find a contact address: channel email, owner email, then free-text scan."""
    declared = _first_non_blank(
        _text(channel.find(f"{{{ITUNES_NS}}}email")),
        _text(channel.find(f"{{{ITUNES_NS}}}owner/{{{ITUNES_NS}}}email")),
    )
    if declared is not None:
        return declared

    texts = [_text(node) or "" for node in channel.findall("description")]
    texts.extend(_text(node) or "" for node in channel.findall("item/description"))
    match = _EMAIL_RE.search(normalize_obfuscated_email(" ".join(texts)))
    return match.group(0) if match else None


def parse_published_date(raw: str) -> datetime | None:
    """Parse RFC 2822 or ISO 8601 timestamps into aware UTC datetimes.

    Returns None for text that is not a date or falls outside the datetime range.
    """
    parsed: datetime | None
    try:
        parsed = parsedate_to_datetime(raw)
    except (TypeError, ValueError, IndexError, OverflowError):
        parsed = None
    if parsed is None:
        try:
            parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    try:
        return parsed.astimezone(UTC)
    except OverflowError:
        return None


def parse_episodes(channel: ET.Element, issues: list[ParseIssue]) -> tuple[Episode, ...]:
    """Extract items, newest first (undated after dated, feed order last)."""
    episodes: list[tuple[int, Episode]] = []
    for index, item in enumerate(channel.findall("item")):
        title = (_text(item.find("title")) or "").strip()
        description = (_text(item.find("description")) or "").strip()
        raw_date = _first_non_blank(_text(item.find("pubDate")))

        published_at: datetime | None = None
        if raw_date is not None:
            published_at = parse_published_date(raw_date)
            if published_at is None:
                issues.append(
                    ParseIssue(
                        INVALID_PUB_DATE,
                        f"Unable to parse pubDate '{raw_date}' for episode '{title}'.",
                    )
                )
        episodes.append((index, Episode(title, description, published_at, raw_date)))

    def sort_key(entry: tuple[int, Episode]) -> tuple[int, float, int]:
        index, episode = entry
        if episode.published_at is None:
            return (1, 0.0, index)
        return (0, -episode.published_at.timestamp(), index)

    ordered = sorted(episodes, key=sort_key)
    return tuple(episode for _, episode in ordered[:MAX_EPISODES])


class RssFeedParser(FeedParser):
    """Parses RSS 2.0 feeds with iTunes extensions.

    Only empty input, a document that cannot be read and a missing channel fail
    the parse; everything else is reported as an issue next to a best-effort
    payload.
    """

    @override
    def parse(self, feed_xml: str) -> FeedParseResult:
        if not feed_xml or not feed_xml.strip():
            return FeedParseResult.fail(ParseIssue(EMPTY_FEED, "RSS feed XML is empty."))

        try:
            return self._parse_document(feed_xml)
        except Exception as exc:
            return FeedParseResult.fail(ParseIssue(PARSE_EXCEPTION, str(exc) or type(exc).__name__))

    def _parse_document(self, feed_xml: str) -> FeedParseResult:
        root = safe_fromstring(feed_xml)
        channel = root.find("channel") if root is not None else None
        if channel is None:
            return FeedParseResult.fail(
                ParseIssue(INVALID_FEED, "RSS channel node was not found.")
            )

        issues: list[ParseIssue] = []
        payload = FeedPayload(
            contact_email=extract_contact_email(channel),
            language=_first_non_blank(_text(channel.find("language"))),
            episodes=parse_episodes(channel, issues),
        )
        return FeedParseResult.ok(payload, tuple(issues))
