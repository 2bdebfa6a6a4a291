"""Custom exceptions for the podcast outreach pipeline.

Per-candidate transport and parse failures are raised inside a worker and
converted into run warnings by the fetch orchestrator; cancellation and
configuration errors propagate to the caller.
"""

from __future__ import annotations


class PipelineError(Exception):
    """Base exception for all pipeline errors."""

    pass


class FeedFetchError(PipelineError):
    """Raised when a feed cannot be retrieved.

    Carries the HTTP status code when the server answered with one.
    """

    def __init__(self, feed_url: str, status_code: int | None = None, reason: str = "") -> None:
        self.feed_url = feed_url
        self.status_code = status_code
        detail = f"HTTP {status_code}" if status_code is not None else reason or "request failed"
        super().__init__(f"Feed fetch failed for {feed_url}: {detail}")


class FeedParseError(PipelineError):
    """Raised when a fetched feed yields a structured parse failure."""

    def __init__(self, code: str, message: str) -> None:
        self.code = code
        super().__init__(f"{code}: {message}")


class PodcastSearchError(PipelineError):
    """Raised when the podcast search API cannot be reached or answers badly."""

    def __init__(self, reason: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(f"Podcast search failed: {reason}")


class PipelineCancelledError(PipelineError):
    """Raised when a ranking run is cancelled through its cancel event."""

    def __init__(self) -> None:
        super().__init__("Ranking run was cancelled.")


class ConfigFileNotFoundError(PipelineError):
    """Raised when a requested config file does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Config file not found: {path}")


class ConfigFileParseError(PipelineError):
    """Raised when a config file is not valid TOML."""

    def __init__(self, path: str, detail: str) -> None:
        super().__init__(f"Config file {path} is not valid TOML: {detail}")


class ConfigFileValidationError(PipelineError):
    """Raised when a config file fails schema validation."""

    def __init__(self, path: str, detail: str) -> None:
        super().__init__(f"Config file {path} is invalid: {detail}")
