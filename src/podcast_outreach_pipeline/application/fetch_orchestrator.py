"""Concurrent fetch, parse and score over a batch of search candidates.

Per-candidate failures never abort the batch: they become warning strings.
Workers hand their outcomes to a queue that a single consumer folds into the
result once every worker has finished.

Usage example:
    from datetime import UTC, datetime, timedelta

    from podcast_outreach_pipeline.application.fetch_orchestrator import collect_ranked_targets
    from podcast_outreach_pipeline.domain.scoring import ScoringEngine
    from podcast_outreach_pipeline.infrastructure import (
        SEEDED_FEEDS,
        InMemoryFeedClient,
        MockPodcastSearchClient,
        RssFeedParser,
        SystemClock,
    )

    clock = SystemClock()
    targets, warnings = collect_ranked_targets(
        MockPodcastSearchClient().search([], 60),
        [],
        clock.now() - timedelta(days=60),
        apply_recency_filter=True,
        feed_client=InMemoryFeedClient(SEEDED_FEEDS),
        parser=RssFeedParser(),
        scorer=ScoringEngine(clock),
    )
"""

from __future__ import annotations

import queue
import threading
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from datetime import datetime

from ..domain.language import detect_allowed_language
from ..domain.models import Candidate, Episode, FeedPayload, RankedTarget, ShowProfile
from ..domain.outreach import apply_contact_penalty, classify_outreach_priority
from ..domain.scoring import ScoringEngine
from ..exceptions import FeedFetchError, FeedParseError, PipelineCancelledError
from ..observability import get_logger
from ..protocols import FeedClient, FeedParser, ProgressReporter

logger = get_logger("podcast_outreach_pipeline.application.fetch_orchestrator")

MAX_CONCURRENT_FEEDS = 5
MISSING_CONTACT_SAMPLE_SIZE = 3
DEFAULT_RECENT_TITLE_COUNT = 3


@dataclass(frozen=True)
class CandidateOutcome:
    """What one worker produced for one candidate.

    Exactly one of `target` and `failure_reason` is set for scored and failed
    candidates; both are None when the candidate was filtered out.
    """

    candidate: Candidate
    target: RankedTarget | None = None
    failure_reason: str | None = None

    @property
    def missing_contact(self) -> bool:
        return self.target is not None and not (
            self.target.contact_email and self.target.contact_email.strip()
        )


def describe_failure(error: Exception) -> str:
    """Short, user-facing reason for a skipped feed."""
    if isinstance(error, FeedFetchError):
        if error.status_code is not None:
            return f"HTTP {error.status_code}"
        return "HTTP request failed"
    if isinstance(error, FeedParseError):
        return f"feed parse failed: {error.code}"
    return "feed fetch failed"


def skipped_feed_warning(name: str, reason: str) -> str:
    return f"Skipped '{name}' feed after retry ({reason})."


def missing_contact_warning(names: Sequence[str]) -> str | None:
    """Summarise shows that received the missing-contact penalty.

    Names are de-duplicated and sorted case-insensitively; the first three are
    quoted and the rest counted.
    """
    unique: dict[str, str] = {}
    for name in sorted(names, key=lambda value: (value.lower(), value)):
        unique.setdefault(name.lower(), name)
    if not unique:
        return None

    shown = list(unique.values())[:MISSING_CONTACT_SAMPLE_SIZE]
    remainder = len(unique) - len(shown)
    sample = ", ".join(f"'{name}'" for name in shown)
    suffix = f" (+{remainder} more)." if remainder > 0 else "."
    return f"Missing contact email penalty applied to {len(unique)} show(s): {sample}{suffix}"


def select_eligible_episodes(
    episodes: Sequence[Episode],
    cutoff: datetime,
    *,
    apply_recency_filter: bool,
) -> tuple[Episode, ...]:
    """Keep episodes published on or after the cutoff.

    A feed with nothing inside the window keeps its full list so that
    staleness is penalised by scoring rather than filtered out.
    """
    if not apply_recency_filter:
        return tuple(episodes)
    recent = tuple(
        e for e in episodes if e.published_at is not None and e.published_at >= cutoff
    )
    return recent or tuple(episodes)


def build_ranked_target(
    candidate: Candidate,
    payload: FeedPayload,
    episodes: tuple[Episode, ...],
    detected_language: str,
    keywords: Sequence[str],
    scorer: ScoringEngine,
    recent_title_count: int = DEFAULT_RECENT_TITLE_COUNT,
) -> RankedTarget:
    show = ShowProfile(
        id=candidate.id,
        name=candidate.name,
        feed_url=candidate.feed_url,
        description=candidate.description,
        estimated_reach=candidate.estimated_reach,
        contact_email=payload.contact_email,
        episodes=episodes,
    )
    intent = scorer.score(show, keywords)
    score = apply_contact_penalty(intent.score, has_contact=show.has_contact)
    priority = classify_outreach_priority(
        score=score,
        activity_score=intent.activity_score,
        frequency=intent.frequency,
        niche_fit=intent.niche_fit,
        has_contact=show.has_contact,
    )
    return RankedTarget(
        show_id=show.id,
        show_name=show.name,
        detected_language=detected_language,
        feed_url=show.feed_url,
        contact_email=show.contact_email,
        reach=intent.reach,
        frequency=intent.frequency,
        niche_fit=intent.niche_fit,
        activity_score=intent.activity_score,
        niche_fit_breakdown=intent.niche_fit_breakdown,
        outreach_priority=priority,
        score=score,
        newest_episode_published_at=intent.newest_episode_published_at,
        recent_episode_titles=tuple(e.title for e in episodes[:recent_title_count]),
    )


def _evaluate_candidate(
    candidate: Candidate,
    keywords: Sequence[str],
    cutoff: datetime,
    *,
    apply_recency_filter: bool,
    feed_client: FeedClient,
    parser: FeedParser,
    scorer: ScoringEngine,
    cancel_event: threading.Event | None,
    recent_title_count: int,
) -> CandidateOutcome:
    feed_xml = feed_client.fetch(candidate.feed_url, cancel_event=cancel_event)
    result = parser.parse(feed_xml)
    if result.payload is None:
        issue = result.issues[0]
        raise FeedParseError(issue.code, issue.message)

    payload = result.payload
    for issue in result.issues:
        logger.debug("Feed issue for %s: %s %s", candidate.name, issue.code, issue.message)

    language = detect_allowed_language(candidate.language, candidate.name, candidate.description)
    if language is None:
        logger.debug("Dropping %s: language not accepted", candidate.name)
        return CandidateOutcome(candidate=candidate)

    episodes = select_eligible_episodes(
        payload.episodes, cutoff, apply_recency_filter=apply_recency_filter
    )
    if not episodes:
        logger.debug("Dropping %s: no episodes", candidate.name)
        return CandidateOutcome(candidate=candidate)

    target = build_ranked_target(
        candidate,
        payload,
        episodes,
        language,
        keywords,
        scorer,
        recent_title_count=recent_title_count,
    )
    return CandidateOutcome(candidate=candidate, target=target)


def process_candidate(
    candidate: Candidate,
    keywords: Sequence[str],
    cutoff: datetime,
    *,
    apply_recency_filter: bool,
    feed_client: FeedClient,
    parser: FeedParser,
    scorer: ScoringEngine,
    cancel_event: threading.Event | None = None,
    recent_title_count: int = DEFAULT_RECENT_TITLE_COUNT,
) -> CandidateOutcome:
    """Fetch, parse, filter and score one candidate.

    Any failure other than cancellation is returned as a failure reason so one
    bad feed never aborts the batch.

    Raises:
        PipelineCancelledError: If the cancel event is set.
    """
    if cancel_event is not None and cancel_event.is_set():
        raise PipelineCancelledError()

    try:
        return _evaluate_candidate(
            candidate,
            keywords,
            cutoff,
            apply_recency_filter=apply_recency_filter,
            feed_client=feed_client,
            parser=parser,
            scorer=scorer,
            cancel_event=cancel_event,
            recent_title_count=recent_title_count,
        )
    except PipelineCancelledError:
        raise
    except Exception as exc:
        if cancel_event is not None and cancel_event.is_set():
            raise PipelineCancelledError() from exc
        logger.warning("Skipping feed for %s: %s", candidate.name, exc)
        return CandidateOutcome(candidate=candidate, failure_reason=describe_failure(exc))


def collect_ranked_targets(
    candidates: Sequence[Candidate],
    keywords: Sequence[str],
    cutoff: datetime,
    *,
    apply_recency_filter: bool,
    feed_client: FeedClient,
    parser: FeedParser,
    scorer: ScoringEngine,
    cancel_event: threading.Event | None = None,
    progress: ProgressReporter | None = None,
    recent_title_count: int = DEFAULT_RECENT_TITLE_COUNT,
) -> tuple[list[RankedTarget], list[str]]:
    """Process every candidate with at most five in flight.

    Args:
        candidates: Search results to enrich.
        keywords: Query keywords, passed through to scoring.
        cutoff: Oldest publish time kept by the recency filter.
        apply_recency_filter: False for the fallback pass.
        feed_client: Feed transport (already wrapped for retry).
        parser: Feed parser.
        scorer: Scoring engine.
        cancel_event: Set to abandon the batch.
        progress: Advanced once per finished candidate.
        recent_title_count: Episode titles kept per target.

    Returns:
        Unordered ranked targets and the warnings produced by this pass.

    Raises:
        PipelineCancelledError: If the cancel event was set during the batch.
    """
    outcomes: queue.Queue[CandidateOutcome] = queue.Queue()

    def worker(candidate: Candidate) -> None:
        outcomes.put(
            process_candidate(
                candidate,
                keywords,
                cutoff,
                apply_recency_filter=apply_recency_filter,
                feed_client=feed_client,
                parser=parser,
                scorer=scorer,
                cancel_event=cancel_event,
                recent_title_count=recent_title_count,
            )
        )

    if progress is not None:
        progress.start("Fetching feeds", total=len(candidates))
    cancelled = False
    try:
        with ThreadPoolExecutor(max_workers=MAX_CONCURRENT_FEEDS) as executor:
            futures = [executor.submit(worker, candidate) for candidate in candidates]
            for future in as_completed(futures):
                try:
                    future.result()
                except PipelineCancelledError:
                    cancelled = True
                if progress is not None:
                    progress.advance(1)
    finally:
        if progress is not None:
            progress.finish()

    if cancelled or (cancel_event is not None and cancel_event.is_set()):
        raise PipelineCancelledError()

    targets: list[RankedTarget] = []
    warnings: list[str] = []
    missing_contact: list[str] = []
    while not outcomes.empty():
        outcome = outcomes.get_nowait()
        if outcome.failure_reason is not None:
            warnings.append(skipped_feed_warning(outcome.candidate.name, outcome.failure_reason))
        if outcome.target is not None:
            targets.append(outcome.target)
            if outcome.missing_contact:
                missing_contact.append(outcome.candidate.name)

    summary = missing_contact_warning(missing_contact)
    if summary is not None:
        warnings.append(summary)

    logger.info(
        "Scored %s of %s candidates (recency filter %s)",
        len(targets),
        len(candidates),
        "on" if apply_recency_filter else "off",
    )
    return targets, warnings
