"""Exports for test fakes."""

from .clock import FixedClock
from .feeds import ScriptedFeedClient
from .progress import FakeProgressReporter
from .search import StaticSearchClient

__all__ = [
    "FakeProgressReporter",
    "FixedClock",
    "ScriptedFeedClient",
    "StaticSearchClient",
]
