"""Tests for CLI wiring, output channels and overrides."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, override

import pytest
import typer
from typer.testing import CliRunner

from podcast_outreach_pipeline import cli
from podcast_outreach_pipeline.cli import CliDependencies, parse_keywords
from podcast_outreach_pipeline.config import (
    MISSING_API_KEY_WARNING,
    PipelineConfig,
    PositiveIntegerEnvVarError,
)
from podcast_outreach_pipeline.domain.models import Candidate
from podcast_outreach_pipeline.exceptions import FeedFetchError, PipelineCancelledError
from podcast_outreach_pipeline.infrastructure.io.rss import RssFeedParser
from podcast_outreach_pipeline.observability import set_log_level
from podcast_outreach_pipeline.protocols import PodcastSearchClient
from tests.fakes import FixedClock, ScriptedFeedClient, StaticSearchClient
from tests.support.feeds import build_feed, build_item, make_candidate

runner = CliRunner()


class CancellingSearchClient(PodcastSearchClient):
    """Search client that behaves as if Ctrl+C arrived mid-run."""

    @override
    def search(self, keywords: Sequence[str], published_after_days: int) -> list[Candidate]:
        raise PipelineCancelledError()


@dataclass
class RecordingBuilder:
    """Dependencies builder that records how the CLI called it."""

    search_client: PodcastSearchClient
    feed_client: ScriptedFeedClient
    clock: FixedClock
    calls: list[tuple[PipelineConfig, bool]] = field(default_factory=list)

    def __call__(self, *, config: PipelineConfig, use_mock: bool) -> CliDependencies:
        self.calls.append((config, use_mock))
        return CliDependencies(
            search_client=self.search_client,
            feed_client=self.feed_client,
            parser=RssFeedParser(),
            clock=self.clock,
        )


def _patch_config(monkeypatch: pytest.MonkeyPatch, config: PipelineConfig) -> None:
    def fake_from_env(cls: type[PipelineConfig], dotenv_path: str | None = None) -> PipelineConfig:
        _ = (cls, dotenv_path)
        return config

    monkeypatch.setattr(cli.PipelineConfig, "from_env", classmethod(fake_from_env))


def _feed(now: datetime) -> str:
    return build_feed(
        [build_item(f"Episode {n}", now - timedelta(days=1 + 7 * n)) for n in range(3)],
        email="host@show.fm",
    )


def _builder(
    clock: FixedClock, *candidates: Candidate, broken: Sequence[Candidate] = ()
) -> RecordingBuilder:
    responses: dict[str, Any] = {c.feed_url: _feed(clock.instant) for c in candidates}
    for candidate in broken:
        responses[candidate.feed_url] = FeedFetchError(candidate.feed_url, status_code=404)
    return RecordingBuilder(
        search_client=StaticSearchClient([*candidates, *broken]),
        feed_client=ScriptedFeedClient(responses=responses),
        clock=clock,
    )


def _parse_json(stdout: str) -> dict[str, Any]:
    return json.loads(stdout[stdout.index("{") :])


@pytest.fixture(autouse=True)
def restore_log_level() -> Iterator[None]:
    yield
    set_log_level(logging.INFO)


@pytest.fixture
def shows() -> tuple[Candidate, Candidate]:
    return (
        make_candidate("hyrox", "Hyrox Masters Radio"),
        make_candidate("plain", "Plain Show"),
    )


def _app(builder: RecordingBuilder) -> typer.Typer:
    return cli.create_app(builder)


def test_cli_version_option_prints_package_version(
    monkeypatch: pytest.MonkeyPatch, clock: FixedClock
) -> None:
    _patch_config(monkeypatch, PipelineConfig())
    monkeypatch.setattr(cli, "__version__", "9.9.9")

    result = runner.invoke(_app(_builder(clock)), ["--version"])

    assert result.exit_code == 0
    assert "podcast-outreach 9.9.9" in result.output


def test_rank_prints_warning_count_and_table(
    monkeypatch: pytest.MonkeyPatch, clock: FixedClock, shows: tuple[Candidate, Candidate]
) -> None:
    _patch_config(monkeypatch, PipelineConfig(use_mock=True))
    builder = _builder(clock, *shows)

    result = runner.invoke(_app(builder), ["rank", "--keywords", "hyrox"])

    assert result.exit_code == 0, result.output
    assert "Warnings: 0" in result.output
    assert "Hyrox Masters Radio" in result.output
    assert "Plain Show" in result.output
    assert result.output.index("Hyrox Masters Radio") < result.output.index("Plain Show")
    assert builder.calls[0][1] is True


def test_rank_reports_skipped_feeds_as_warnings(
    monkeypatch: pytest.MonkeyPatch, clock: FixedClock, shows: tuple[Candidate, Candidate]
) -> None:
    _patch_config(monkeypatch, PipelineConfig(use_mock=True))
    broken = make_candidate("gone", "Gone Show")
    builder = _builder(clock, *shows, broken=[broken])

    result = runner.invoke(_app(builder), ["rank"])

    assert result.exit_code == 0, result.output
    assert "Warning: Skipped 'Gone Show' feed after retry (HTTP 404)." in result.output
    assert "Warnings: 1" in result.output


def test_rank_without_api_key_falls_back_to_mock(
    monkeypatch: pytest.MonkeyPatch, clock: FixedClock, shows: tuple[Candidate, Candidate]
) -> None:
    _patch_config(monkeypatch, PipelineConfig(podcast_api_key=""))
    builder = _builder(clock, *shows)

    result = runner.invoke(_app(builder), ["rank"])

    assert result.exit_code == 0, result.output
    assert f"Warning: {MISSING_API_KEY_WARNING}" in result.output
    assert builder.calls[0][1] is True


def test_rank_with_api_key_uses_live_search(
    monkeypatch: pytest.MonkeyPatch, clock: FixedClock, shows: tuple[Candidate, Candidate]
) -> None:
    _patch_config(monkeypatch, PipelineConfig(podcast_api_key="secret"))
    builder = _builder(clock, *shows)

    result = runner.invoke(_app(builder), ["rank"])

    assert result.exit_code == 0, result.output
    assert MISSING_API_KEY_WARNING not in result.output
    assert builder.calls[0][1] is False


def test_rank_json_output_envelope(
    monkeypatch: pytest.MonkeyPatch, clock: FixedClock, shows: tuple[Candidate, Candidate]
) -> None:
    _patch_config(monkeypatch, PipelineConfig(use_mock=True))
    builder = _builder(clock, *shows)

    result = runner.invoke(
        _app(builder),
        ["rank", "--json", "-k", "hyrox, masters athlete,", "-d", "30", "-n", "1"],
    )

    assert result.exit_code == 0, result.output
    assert "Warnings:" not in result.output
    envelope = _parse_json(result.stdout)
    assert envelope["schema_version"] == "1.0"
    assert envelope["generated_at_utc"] == clock.instant.isoformat()
    assert envelope["arguments"] == {
        "keywords": ["hyrox", "masters athlete"],
        "published_after_days": 30,
        "top": 1,
        "json_output": True,
        "pretty_json": False,
        "use_mock": True,
    }
    assert envelope["total"] == 1
    assert envelope["results"][0]["show_id"] == "hyrox"
    assert envelope["warnings"] == []


def test_rank_pretty_json_is_indented(
    monkeypatch: pytest.MonkeyPatch, clock: FixedClock, shows: tuple[Candidate, Candidate]
) -> None:
    _patch_config(monkeypatch, PipelineConfig(use_mock=True))

    result = runner.invoke(_app(_builder(clock, *shows)), ["rank", "--json", "--pretty"])

    assert result.exit_code == 0, result.output
    assert '\n  "schema_version": "1.0"' in result.stdout
    assert _parse_json(result.stdout)["total"] == 2


def test_rank_top_limits_table_rows(
    monkeypatch: pytest.MonkeyPatch, clock: FixedClock, shows: tuple[Candidate, Candidate]
) -> None:
    _patch_config(monkeypatch, PipelineConfig(use_mock=True))

    result = runner.invoke(_app(_builder(clock, *shows)), ["rank", "--top", "1"])

    assert result.exit_code == 0, result.output
    assert "Hyrox Masters Radio" in result.output
    assert "Plain Show" not in result.output


def test_rank_verbose_prints_diagnostics(
    monkeypatch: pytest.MonkeyPatch, clock: FixedClock, shows: tuple[Candidate, Candidate]
) -> None:
    _patch_config(monkeypatch, PipelineConfig(use_mock=True))

    result = runner.invoke(_app(_builder(clock, *shows)), ["rank", "--verbose"])

    assert result.exit_code == 0, result.output
    assert "Debug: Raw API shows before local filtering: 2" in result.output


def test_rank_with_no_results_prints_empty_message(
    monkeypatch: pytest.MonkeyPatch, clock: FixedClock
) -> None:
    _patch_config(monkeypatch, PipelineConfig(use_mock=True))

    result = runner.invoke(_app(_builder(clock)), ["rank"])

    assert result.exit_code == 0, result.output
    assert "No ranked targets found." in result.output


def test_rank_applies_config_file_before_cli_flags(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    clock: FixedClock,
    shows: tuple[Candidate, Candidate],
) -> None:
    _patch_config(monkeypatch, PipelineConfig(use_mock=True))
    config_path = tmp_path / "ranking.toml"
    config_path.write_text(
        "schema_version = 1\n\n[ranking]\ntop = 1\npublished_after_days = 45\n",
        encoding="utf-8",
    )
    builder = _builder(clock, *shows)

    result = runner.invoke(
        _app(builder), ["rank", "--config", str(config_path), "--published-after-days", "20"]
    )

    assert result.exit_code == 0, result.output
    assert "Plain Show" not in result.output
    config, _ = builder.calls[0]
    assert config.top == 1
    assert config.published_after_days == 20


def test_rank_rejects_invalid_config_file(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, clock: FixedClock
) -> None:
    _patch_config(monkeypatch, PipelineConfig(use_mock=True))
    config_path = tmp_path / "ranking.toml"
    config_path.write_text("schema_version = 1\n\n[ranking]\ntop = 0\n", encoding="utf-8")

    result = runner.invoke(_app(_builder(clock)), ["rank", "-c", str(config_path)])

    assert result.exit_code == 1
    assert "Configuration error:" in result.output


def test_invalid_environment_is_a_configuration_error(
    monkeypatch: pytest.MonkeyPatch, clock: FixedClock
) -> None:
    def failing_from_env(
        cls: type[PipelineConfig], dotenv_path: str | None = None
    ) -> PipelineConfig:
        _ = (cls, dotenv_path)
        raise PositiveIntegerEnvVarError("NUDGE_RECENT_TITLE_COUNT")

    monkeypatch.setattr(cli.PipelineConfig, "from_env", classmethod(failing_from_env))

    result = runner.invoke(_app(_builder(clock)), ["rank"])

    assert result.exit_code == 1
    assert "Configuration error: NUDGE_RECENT_TITLE_COUNT" in result.output


def test_rank_rejects_non_positive_top(monkeypatch: pytest.MonkeyPatch, clock: FixedClock) -> None:
    _patch_config(monkeypatch, PipelineConfig(use_mock=True))

    result = runner.invoke(_app(_builder(clock)), ["rank", "--top", "0"])

    assert result.exit_code == 2


def test_cancelled_run_exits_130(monkeypatch: pytest.MonkeyPatch, clock: FixedClock) -> None:
    _patch_config(monkeypatch, PipelineConfig(use_mock=True))
    builder = RecordingBuilder(
        search_client=CancellingSearchClient(),
        feed_client=ScriptedFeedClient(),
        clock=clock,
    )

    result = runner.invoke(_app(builder), ["rank"])

    assert result.exit_code == 130
    assert "Cancelled." in result.output


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (None, []),
        ("", []),
        ("hyrox", ["hyrox"]),
        (" hyrox , masters athlete ,, ", ["hyrox", "masters athlete"]),
    ],
)
def test_parse_keywords(raw: str | None, expected: list[str]) -> None:
    assert parse_keywords(raw) == expected
