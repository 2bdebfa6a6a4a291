"""Pytest fixtures shared across the suite.

All tests are network-isolated - socket connections are blocked by default.
"""

from __future__ import annotations

import socket
from datetime import UTC, datetime

import pytest

from tests.fakes import FixedClock
from tests.support.errors import NetworkIsolationError

_RANKING_ENV_VARS = (
    "NUDGE_PODCAST_API_KEY",
    "NUDGE_PODCAST_API_BASEURL",
    "NUDGE_PODCAST_PUBLISHED_AFTER_DAYS",
    "NUDGE_USE_MOCK",
    "NUDGE_HTTP_TIMEOUT_SECONDS",
    "NUDGE_FEED_RETRY_DELAY_SECONDS",
    "NUDGE_RECENT_TITLE_COUNT",
)


def _blocked_socket_connect(self: socket.socket, *args: object, **kwargs: object) -> None:
    """Raise an error if any test tries to make a real network connection."""
    raise NetworkIsolationError(str(args))


@pytest.fixture(autouse=True)
def block_network_access(monkeypatch: pytest.MonkeyPatch) -> None:
    """Block all network access in tests.

    Tests that need HTTP should use the fakes in tests/fakes or a
    MagicMock(spec=requests.Session).
    """
    monkeypatch.setattr(socket.socket, "connect", _blocked_socket_connect)


@pytest.fixture(autouse=True)
def clean_ranking_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Start every test without NUDGE_* variables from the developer shell."""
    for name in _RANKING_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def now() -> datetime:
    return datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def clock(now: datetime) -> FixedClock:
    return FixedClock(now)
