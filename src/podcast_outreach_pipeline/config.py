"""Centralised, injectable configuration for the podcast outreach pipeline."""

from __future__ import annotations

import math
import os
from dataclasses import dataclass, replace
from typing import Self

from dotenv import load_dotenv

from .config_file import RankingConfigFile, is_absolute_url
from .infrastructure.io.http import DEFAULT_LISTENNOTES_BASE_URL

MISSING_API_KEY_WARNING = (
    "NUDGE_PODCAST_API_KEY is missing; falling back to mock podcast search client."
)


class NonNegativeIntegerEnvVarError(ValueError):
    """Raised when an environment variable must be a non-negative integer."""

    def __init__(self, env_name: str) -> None:
        super().__init__(f"{env_name} must be a non-negative integer.")


class PositiveIntegerEnvVarError(ValueError):
    """Raised when an environment variable must be a positive integer."""

    def __init__(self, env_name: str) -> None:
        super().__init__(f"{env_name} must be a positive integer.")


class PositiveNumberEnvVarError(ValueError):
    """Raised when an environment variable must be a positive number."""

    def __init__(self, env_name: str) -> None:
        super().__init__(f"{env_name} must be a positive number.")


class BooleanEnvVarError(ValueError):
    """Raised when an environment variable must be a supported boolean."""

    def __init__(self, env_name: str) -> None:
        super().__init__(f"{env_name} must be a boolean value (true/false, 1/0, yes/no, on/off).")


class AbsoluteUrlEnvVarError(ValueError):
    """Raised when an environment variable must be an absolute URL."""

    def __init__(self, env_name: str) -> None:
        super().__init__(f"{env_name} must be a valid absolute URL.")


@dataclass(frozen=True)
class PipelineConfig:
    """Immutable configuration object for a ranking run.

    Load from environment with `PipelineConfig.from_env()` or construct directly for testing.
    """

    # Search API
    podcast_api_key: str = ""
    podcast_api_base_url: str = DEFAULT_LISTENNOTES_BASE_URL
    use_mock: bool | None = None  # None: not set explicitly

    # Ranking
    published_after_days: int = 60
    top: int = 10
    recent_title_count: int = 3

    # Transport
    http_timeout_seconds: float = 10.0
    feed_retry_delay_seconds: float = 0.3

    @classmethod
    def from_env(cls, dotenv_path: str | None = None) -> Self:
        """Load configuration from environment variables.

        Args:
            dotenv_path: Optional path to .env file. If None, uses default .env discovery.

        Returns:
            PipelineConfig instance populated from environment.
        """
        load_dotenv(dotenv_path)

        return cls(
            podcast_api_key=os.getenv("NUDGE_PODCAST_API_KEY", "").strip(),
            podcast_api_base_url=_parse_absolute_url(
                os.getenv("NUDGE_PODCAST_API_BASEURL", ""),
                env_name="NUDGE_PODCAST_API_BASEURL",
                default=DEFAULT_LISTENNOTES_BASE_URL,
            ),
            use_mock=_parse_optional_bool(
                os.getenv("NUDGE_USE_MOCK", ""),
                env_name="NUDGE_USE_MOCK",
            ),
            published_after_days=_parse_non_negative_int(
                os.getenv("NUDGE_PODCAST_PUBLISHED_AFTER_DAYS", ""),
                env_name="NUDGE_PODCAST_PUBLISHED_AFTER_DAYS",
                default=60,
            ),
            recent_title_count=_parse_positive_int(
                os.getenv("NUDGE_RECENT_TITLE_COUNT", ""),
                env_name="NUDGE_RECENT_TITLE_COUNT",
                default=3,
            ),
            http_timeout_seconds=_parse_positive_float(
                os.getenv("NUDGE_HTTP_TIMEOUT_SECONDS", ""),
                env_name="NUDGE_HTTP_TIMEOUT_SECONDS",
                default=10.0,
            ),
            feed_retry_delay_seconds=_parse_positive_float(
                os.getenv("NUDGE_FEED_RETRY_DELAY_SECONDS", ""),
                env_name="NUDGE_FEED_RETRY_DELAY_SECONDS",
                default=0.3,
            ),
        )

    def with_overrides(
        self,
        *,
        published_after_days: int | None = None,
        top: int | None = None,
        use_mock: bool | None = None,
    ) -> Self:
        """Return a new config with specified overrides (for CLI options).

        An explicit NUDGE_USE_MOCK value is kept over the CLI flag.
        """
        return replace(
            self,
            published_after_days=self.published_after_days
            if published_after_days is None
            else published_after_days,
            top=self.top if top is None else top,
            use_mock=self.use_mock if self.use_mock is not None or use_mock is None else use_mock,
        )

    def with_file_overrides(self, file_config: RankingConfigFile) -> Self:
        """Return a new config with config-file values overriding env/default values."""
        return replace(
            self,
            published_after_days=self.published_after_days
            if file_config.published_after_days is None
            else file_config.published_after_days,
            top=self.top if file_config.top is None else file_config.top,
            use_mock=self.use_mock if file_config.use_mock is None else file_config.use_mock,
            podcast_api_base_url=self.podcast_api_base_url
            if file_config.api_base_url is None
            else file_config.api_base_url,
            recent_title_count=self.recent_title_count
            if file_config.recent_title_count is None
            else file_config.recent_title_count,
        )


@dataclass(frozen=True)
class SearchMode:
    """Resolved search backend for a run."""

    use_mock: bool
    warning: str | None = None


def resolve_search_mode(config: PipelineConfig) -> SearchMode:
    """Choose mock or live search.

    An explicit mock flag wins; otherwise a missing API key falls back to the
    mock client with a warning.
    """
    if config.use_mock:
        return SearchMode(use_mock=True)
    if not config.podcast_api_key.strip():
        return SearchMode(use_mock=True, warning=MISSING_API_KEY_WARNING)
    return SearchMode(use_mock=False)


def _parse_absolute_url(value: str, *, env_name: str, default: str) -> str:
    text = value.strip()
    if not text:
        return default
    if not is_absolute_url(text):
        raise AbsoluteUrlEnvVarError(env_name)
    return text


def _parse_non_negative_int(value: str, *, env_name: str, default: int) -> int:
    """Parse a non-negative integer from an environment variable."""
    text = value.strip()
    if not text:
        return default
    try:
        parsed = int(text)
    except ValueError as exc:
        raise NonNegativeIntegerEnvVarError(env_name) from exc
    if parsed < 0:
        raise NonNegativeIntegerEnvVarError(env_name)
    return parsed


def _parse_positive_int(value: str, *, env_name: str, default: int) -> int:
    text = value.strip()
    if not text:
        return default
    try:
        parsed = int(text)
    except ValueError as exc:
        raise PositiveIntegerEnvVarError(env_name) from exc
    if parsed < 1:
        raise PositiveIntegerEnvVarError(env_name)
    return parsed


def _parse_positive_float(value: str, *, env_name: str, default: float) -> float:
    text = value.strip()
    if not text:
        return default
    try:
        parsed = float(text)
    except ValueError as exc:
        raise PositiveNumberEnvVarError(env_name) from exc
    if not math.isfinite(parsed) or parsed <= 0:
        raise PositiveNumberEnvVarError(env_name)
    return parsed


def _parse_optional_bool(value: str, *, env_name: str) -> bool | None:
    """Parse an optional boolean from an environment variable."""
    text = value.strip().lower()
    if not text:
        return None
    if text in {"1", "true", "yes", "y", "on"}:
        return True
    if text in {"0", "false", "no", "n", "off"}:
        return False
    raise BooleanEnvVarError(env_name)
