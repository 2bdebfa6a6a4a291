"""CLI for the podcast outreach pipeline.

Commands:
- rank: Search for shows, fetch their feeds and print ranked outreach targets
"""

from __future__ import annotations

import logging
import signal
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Protocol

import typer
from rich.console import Console

from . import __version__
from .application.ranking import RankingPipeline, select_top
from .config import PipelineConfig, resolve_search_mode
from .config_file import load_ranking_config_file
from .exceptions import PipelineCancelledError, PipelineError
from .observability import set_log_level
from .protocols import Clock, FeedClient, FeedParser, PodcastSearchClient, ProgressReporter
from .rendering import build_json_envelope, dumps_envelope, render_results

_TABLE_WIDTH = 160


class DependenciesBuilder(Protocol):
    """Protocol for constructing CLI dependencies."""

    def __call__(self, *, config: PipelineConfig, use_mock: bool) -> CliDependencies:
        """Build dependencies for a ranking run."""
        ...


@dataclass(frozen=True)
class CliDependencies:
    """Concrete dependencies required by the CLI."""

    search_client: PodcastSearchClient
    feed_client: FeedClient
    parser: FeedParser
    clock: Clock
    progress: ProgressReporter | None = None


@dataclass(frozen=True)
class CliContext:
    """Runtime CLI context for a single command invocation."""

    config: PipelineConfig
    deps_builder: DependenciesBuilder

    def build_dependencies(self, *, config: PipelineConfig, use_mock: bool) -> CliDependencies:
        """Return dependencies using the configured builder."""
        return self.deps_builder(config=config, use_mock=use_mock)


class CliContextNotInitialisedError(typer.BadParameter):
    """Raised when CLI context is missing."""

    def __init__(self) -> None:
        super().__init__("CLI context is not initialised. Use the podcast-outreach entry point.")


def parse_keywords(raw: str | None) -> list[str]:
    """Split a comma-separated keyword list, dropping blanks."""
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


def _get_context(ctx: typer.Context) -> CliContext:
    if not isinstance(ctx.obj, CliContext):
        raise CliContextNotInitialisedError()
    return ctx.obj


def _fail(message: str) -> typer.Exit:
    typer.echo(f"Configuration error: {message}", err=True)
    return typer.Exit(code=1)


def _stdout_console() -> Console:
    console = Console()
    if not console.is_terminal:
        console.width = _TABLE_WIDTH
    return console


@contextmanager
def _cancel_on_interrupt(cancel_event: threading.Event) -> Iterator[None]:
    """Turn Ctrl+C into a cooperative cancel for the duration of a run."""
    if threading.current_thread() is not threading.main_thread():
        yield
        return
    previous = signal.signal(signal.SIGINT, lambda *_: cancel_event.set())
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"podcast-outreach {__version__}")
        raise typer.Exit()


def create_app(deps_builder: DependenciesBuilder) -> typer.Typer:
    """Create a Typer app wired with the provided dependencies builder."""
    app = typer.Typer(
        add_completion=False,
        help="Podcast outreach pipeline: search → fetch feeds → score → rank",
    )

    @app.callback()
    def main(
        ctx: typer.Context,
        version: Annotated[
            bool,
            typer.Option(
                "--version",
                callback=_version_callback,
                is_eager=True,
                help="Show the version and exit",
            ),
        ] = False,
    ) -> None:
        """Initialise CLI context."""
        _ = version
        try:
            config = PipelineConfig.from_env()
        except ValueError as exc:
            raise _fail(str(exc)) from exc
        ctx.obj = CliContext(config=config, deps_builder=deps_builder)

    @app.command()
    def rank(
        ctx: typer.Context,
        keywords: Annotated[
            str | None,
            typer.Option(
                "--keywords",
                "-k",
                help='Comma-separated topical keywords (e.g. "hyrox,masters athlete")',
            ),
        ] = None,
        published_after_days: Annotated[
            int | None,
            typer.Option(
                "--published-after-days",
                "-d",
                min=0,
                help="Recency window in days (default: NUDGE_PODCAST_PUBLISHED_AFTER_DAYS or 60)",
            ),
        ] = None,
        top: Annotated[
            int | None,
            typer.Option("--top", "-n", min=1, help="Number of ranked rows to show (default: 10)"),
        ] = None,
        json_output: Annotated[
            bool,
            typer.Option("--json", help="Print a JSON envelope instead of the table"),
        ] = False,
        pretty: Annotated[
            bool,
            typer.Option("--pretty", help="Indent JSON output"),
        ] = False,
        use_mock: Annotated[
            bool | None,
            typer.Option(
                "--use-mock/--no-use-mock",
                help="Use the seeded offline search client (NUDGE_USE_MOCK takes precedence)",
            ),
        ] = None,
        verbose: Annotated[
            bool,
            typer.Option("--verbose", "-v", help="Print diagnostics and debug logs"),
        ] = False,
        config_path: Annotated[
            Path | None,
            typer.Option("--config", "-c", help="Path to a TOML config file"),
        ] = None,
    ) -> None:
        """Rank podcasts as outreach targets for the given keywords."""
        state = _get_context(ctx)
        config = state.config
        if config_path is not None:
            try:
                config = config.with_file_overrides(load_ranking_config_file(config_path))
            except PipelineError as exc:
                raise _fail(str(exc)) from exc
        config = config.with_overrides(
            published_after_days=published_after_days,
            top=top,
            use_mock=use_mock,
        )
        if verbose:
            set_log_level(logging.DEBUG)

        mode = resolve_search_mode(config)
        if mode.warning is not None:
            typer.echo(f"Warning: {mode.warning}", err=True)

        deps = state.build_dependencies(config=config, use_mock=mode.use_mock)
        pipeline = RankingPipeline(
            search_client=deps.search_client,
            feed_client=deps.feed_client,
            parser=deps.parser,
            clock=deps.clock,
            progress=deps.progress,
            recent_title_count=config.recent_title_count,
        )
        keyword_list = parse_keywords(keywords)
        cancel_event = threading.Event()
        try:
            with _cancel_on_interrupt(cancel_event):
                run = pipeline.run(
                    keyword_list,
                    config.published_after_days,
                    include_diagnostics=verbose,
                    cancel_event=cancel_event,
                )
        except PipelineCancelledError as exc:
            typer.echo("Cancelled.", err=True)
            raise typer.Exit(code=130) from exc

        for line in run.diagnostics:
            typer.echo(f"Debug: {line}", err=True)
        for warning in run.warnings:
            typer.echo(f"Warning: {warning}", err=True)

        selected = select_top(run.results, config.top)
        if json_output:
            envelope = build_json_envelope(
                generated_at=deps.clock.now(),
                arguments={
                    "keywords": keyword_list,
                    "published_after_days": config.published_after_days,
                    "top": config.top,
                    "json_output": json_output,
                    "pretty_json": pretty,
                    "use_mock": mode.use_mock,
                },
                results=selected,
                warnings=run.warnings,
            )
            typer.echo(dumps_envelope(envelope, pretty=pretty))
            return

        typer.echo(f"Warnings: {len(run.warnings)}")
        render_results(selected, _stdout_console())

    _ = (main, rank)

    return app
