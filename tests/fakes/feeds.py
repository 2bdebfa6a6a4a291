"""Feed client fakes for tests."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import override

from podcast_outreach_pipeline.protocols import FeedClient
from tests.support.errors import FakeFeedMissingError


def _empty_responses() -> dict[str, str | Exception | list[str | Exception]]:
    return {}


def _empty_calls() -> list[str]:
    return []


@dataclass
class ScriptedFeedClient(FeedClient):
    """Returns scripted feed text or raises scripted errors per URL.

    A list value is consumed one entry per call; the last entry repeats.
    """

    responses: dict[str, str | Exception | list[str | Exception]] = field(
        default_factory=_empty_responses
    )
    calls: list[str] = field(default_factory=_empty_calls)
    _lock: threading.Lock = field(default_factory=threading.Lock)

    @override
    def fetch(self, feed_url: str, *, cancel_event: threading.Event | None = None) -> str:
        with self._lock:
            self.calls.append(feed_url)
            if feed_url not in self.responses:
                raise FakeFeedMissingError(feed_url)
            scripted = self.responses[feed_url]
            if isinstance(scripted, list):
                response = scripted.pop(0) if len(scripted) > 1 else scripted[0]
            else:
                response = scripted
        if isinstance(response, Exception):
            raise response
        return response
