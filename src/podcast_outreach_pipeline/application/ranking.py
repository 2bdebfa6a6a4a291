"""Ranking pipeline: search, enrich, score, order.

Usage example:
    from podcast_outreach_pipeline.application.ranking import RankingPipeline, select_top
    from podcast_outreach_pipeline.infrastructure import (
        SEEDED_FEEDS,
        InMemoryFeedClient,
        MockPodcastSearchClient,
        RssFeedParser,
        SystemClock,
    )

    pipeline = RankingPipeline(
        search_client=MockPodcastSearchClient(),
        feed_client=InMemoryFeedClient(SEEDED_FEEDS),
        parser=RssFeedParser(),
        clock=SystemClock(),
    )
    run = pipeline.run(["growth"], 60, include_diagnostics=True)
    for target in select_top(run.results, 10):
        print(target.show_name, round(target.score, 3))
"""

from __future__ import annotations

import threading
from collections.abc import Sequence
from datetime import timedelta

from ..domain.models import Candidate, RankedTarget, RankingRunResult
from ..domain.scoring import ScoringEngine
from ..exceptions import PodcastSearchError
from ..observability import get_logger
from ..protocols import Clock, FeedClient, FeedParser, PodcastSearchClient, ProgressReporter
from .fetch_orchestrator import DEFAULT_RECENT_TITLE_COUNT, collect_ranked_targets

logger = get_logger("podcast_outreach_pipeline.application.ranking")

FALLBACK_DIAGNOSTIC = (
    "No ranked results after local recency filtering; retrying without recency filter."
)


def raw_count_diagnostic(count: int) -> str:
    return f"Raw API shows before local filtering: {count}"


def ranking_sort_key(target: RankedTarget) -> tuple[float, float, int, float, str, str]:
    """Sort key: score, niche fit and newest episode descending; name then id ascending."""
    newest = target.newest_episode_published_at
    return (
        -target.score,
        -target.niche_fit,
        0 if newest is not None else 1,
        -newest.timestamp() if newest is not None else 0.0,
        target.show_name.lower(),
        target.show_id,
    )


def order_targets(targets: Sequence[RankedTarget]) -> tuple[RankedTarget, ...]:
    return tuple(sorted(targets, key=ranking_sort_key))


def normalize_warnings(warnings: Sequence[str]) -> tuple[str, ...]:
    """Drop exact duplicates and sort case-insensitively."""
    return tuple(sorted(set(warnings), key=lambda warning: (warning.lower(), warning)))


def select_top(results: Sequence[RankedTarget], top: int) -> list[RankedTarget]:
    """Return the first `top` rows of an already ordered result."""
    if top <= 0:
        raise ValueError("top must be a positive integer")
    return list(results[:top])


class RankingPipeline:
    """Runs one stateless ranking invocation over injected collaborators."""

    def __init__(
        self,
        *,
        search_client: PodcastSearchClient,
        feed_client: FeedClient,
        parser: FeedParser,
        clock: Clock,
        scorer: ScoringEngine | None = None,
        progress: ProgressReporter | None = None,
        recent_title_count: int = DEFAULT_RECENT_TITLE_COUNT,
    ) -> None:
        self.search_client = search_client
        self.feed_client = feed_client
        self.parser = parser
        self.clock = clock
        self.scorer = scorer or ScoringEngine(clock)
        self.progress = progress
        self.recent_title_count = recent_title_count

    def _search(self, keywords: Sequence[str], published_after_days: int) -> list[Candidate]:
        try:
            return self.search_client.search(keywords, published_after_days)
        except PodcastSearchError as exc:
            logger.warning("%s; continuing with no candidates", exc)
            return []

    def run(
        self,
        keywords: Sequence[str],
        published_after_days: int,
        *,
        include_diagnostics: bool = False,
        cancel_event: threading.Event | None = None,
    ) -> RankingRunResult:
        """Rank candidate shows for the keywords.

        Args:
            keywords: Topical keywords; may be empty.
            published_after_days: Recency window for the first pass.
            include_diagnostics: Collect human-readable diagnostic lines.
            cancel_event: Set to abandon the run.

        Returns:
            RankingRunResult with ordered targets and sorted warnings.

        Raises:
            PipelineCancelledError: If the run was cancelled.
        """
        if published_after_days < 0:
            raise ValueError("published_after_days must be non-negative")

        warnings: list[str] = []
        diagnostics: list[str] = []
        candidates = self._search(keywords, published_after_days)
        logger.info("Search returned %s candidate shows", len(candidates))
        if include_diagnostics:
            diagnostics.append(raw_count_diagnostic(len(candidates)))

        cutoff = self.clock.now() - timedelta(days=published_after_days)
        ranked, pass_warnings = collect_ranked_targets(
            candidates,
            keywords,
            cutoff,
            apply_recency_filter=True,
            feed_client=self.feed_client,
            parser=self.parser,
            scorer=self.scorer,
            cancel_event=cancel_event,
            progress=self.progress,
            recent_title_count=self.recent_title_count,
        )
        warnings.extend(pass_warnings)

        if not ranked:
            logger.warning(FALLBACK_DIAGNOSTIC)
            if include_diagnostics:
                diagnostics.append(FALLBACK_DIAGNOSTIC)
            ranked, pass_warnings = collect_ranked_targets(
                candidates,
                keywords,
                cutoff,
                apply_recency_filter=False,
                feed_client=self.feed_client,
                parser=self.parser,
                scorer=self.scorer,
                cancel_event=cancel_event,
                progress=self.progress,
                recent_title_count=self.recent_title_count,
            )
            warnings.extend(pass_warnings)

        return RankingRunResult(
            results=order_targets(ranked),
            warnings=normalize_warnings(warnings),
            diagnostics=tuple(diagnostics),
        )
