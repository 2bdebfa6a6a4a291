"""Domain scoring rules for podcast outreach intent.

The engine is a pure function of a show profile and the injected clock. It
knows nothing about contact channels; the missing-contact penalty lives in
`domain.outreach` and is applied by the ranking pipeline.

Usage example:
    from datetime import UTC, datetime

    from podcast_outreach_pipeline.domain.models import Episode, ShowProfile
    from podcast_outreach_pipeline.domain.scoring import ScoringEngine
    from podcast_outreach_pipeline.infrastructure.clock import SystemClock

    show = ShowProfile(
        id="show-1",
        name="Masters Athlete Radio",
        estimated_reach=0.6,
        episodes=(
            Episode("Hyrox training block", published_at=datetime(2026, 2, 20, tzinfo=UTC)),
        ),
    )
    intent = ScoringEngine(SystemClock()).score(show, ["hyrox"])
    assert 0.0 <= intent.score <= 1.0
"""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Sequence
from datetime import datetime
from itertools import pairwise
from typing import TYPE_CHECKING

from .models import Episode, IntentScore, NicheFitBreakdown, NicheFitTokenHit, ShowProfile

if TYPE_CHECKING:
    from ..protocols import Clock

REACH_WEIGHT = 0.35
FREQUENCY_WEIGHT = 0.25
NICHE_FIT_WEIGHT = 0.40

HIGH_INTENT_WEIGHT = 3.0
BASELINE_INTENT_WEIGHT = 1.0
PENALTY_INTENT_WEIGHT = -2.0

# Newest-episode age (days) → activity multiplier
ACTIVITY_BANDS: tuple[tuple[float, float], ...] = (
    (30.0, 1.0),
    (90.0, 0.7),
    (180.0, 0.4),
)
ACTIVITY_STALE = 0.15

SEEDED_REACH_SHARE = 0.8
ACTIVITY_QUALITY_SHARE = 0.2
EPISODE_WINDOW_SATURATION = 3
RECENT_EPISODE_DAYS = 30.0

FREQUENCY_EPISODE_WINDOW = 3
RECENCY_HORIZON_DAYS = 60.0
CADENCE_BEST_GAP_DAYS = 7.0
CADENCE_WORST_GAP_DAYS = 45.0

RECENT_EPISODE_TITLE_WINDOW = 5

HIGH_INTENT_TOKENS: tuple[str, ...] = (
    "athlete",
    "masters",
    "hyrox",
    "crossfit",
    "performance",
    "strength",
    "vo2",
    "pr",
    "training",
    "competition",
    "ranking",
)
BASELINE_TOKENS: tuple[str, ...] = ("longevity", "fitness", "aging", "healthspan")
PENALTY_TOKENS: tuple[str, ...] = ("revenue", "marketing", "entrepreneur", "coaching")
BUSINESS_CONTEXT_TOKENS = frozenset(
    {
        "revenue",
        "marketing",
        "entrepreneur",
        "coaching",
        "business",
        "sales",
        "monetize",
        "clients",
    }
)
# Applied only when business context is present.
BUSINESS_CONTEXT_PENALTY_TOKENS: tuple[str, ...] = ("wellness",)

_WORD_TOKEN_RE = re.compile(r"[a-z0-9]+")


def clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def _age_days(now: datetime, then: datetime) -> float:
    return (now - then).total_seconds() / 86400.0


def newest_published_at(episodes: Sequence[Episode]) -> datetime | None:
    dated = [e.published_at for e in episodes if e.published_at is not None]
    return max(dated) if dated else None


def score_reach(show: ShowProfile, now: datetime) -> float:
    """Blend the seeded reach with a feed-quality signal."""
    seeded = clamp01(show.estimated_reach)
    episodes = show.episodes
    if not episodes:
        return seeded

    dated = [e.published_at for e in episodes if e.published_at is not None]
    dated_ratio = len(dated) / len(episodes)
    window_score = clamp01(len(episodes) / EPISODE_WINDOW_SATURATION)
    has_recent = 1.0 if any(_age_days(now, d) <= RECENT_EPISODE_DAYS for d in dated) else 0.0
    activity_quality = clamp01(window_score * 0.5 + dated_ratio * 0.3 + has_recent * 0.2)

    return clamp01(seeded * SEEDED_REACH_SHARE + activity_quality * ACTIVITY_QUALITY_SHARE)


def cadence_from_average_gap(average_gap_days: float) -> float:
    if average_gap_days <= CADENCE_BEST_GAP_DAYS:
        return 1.0
    if average_gap_days >= CADENCE_WORST_GAP_DAYS:
        return 0.0
    return 1.0 - (average_gap_days - CADENCE_BEST_GAP_DAYS) / (
        CADENCE_WORST_GAP_DAYS - CADENCE_BEST_GAP_DAYS
    )


def score_frequency(episodes: Sequence[Episode], now: datetime) -> float:
    """Score publishing recency and cadence from the newest dated episodes."""
    dated = sorted(
        (e.published_at for e in episodes if e.published_at is not None),
        reverse=True,
    )[:FREQUENCY_EPISODE_WINDOW]
    if not dated:
        return 0.0

    recency = clamp01(1.0 - _age_days(now, dated[0]) / RECENCY_HORIZON_DAYS)
    if len(dated) == 1:
        return recency

    gaps = [_age_days(newer, older) for newer, older in pairwise(dated)]
    gaps = [gap for gap in gaps if gap >= 0]
    cadence = cadence_from_average_gap(sum(gaps) / len(gaps)) if gaps else 0.0
    return clamp01(recency * 0.6 + cadence * 0.4)


def score_activity(newest: datetime | None, now: datetime) -> float:
    """Step-decay multiplier from the newest episode's age."""
    if newest is None:
        return ACTIVITY_STALE
    age = _age_days(now, newest)
    for max_age, score in ACTIVITY_BANDS:
        if age <= max_age:
            return score
    return ACTIVITY_STALE


def _recent_titles(episodes: Sequence[Episode]) -> list[str]:
    # Newest first, undated last, then title.
    ordered = sorted(
        episodes,
        key=lambda e: (
            -e.published_at.timestamp() if e.published_at is not None else float("inf"),
            e.title.lower(),
        ),
    )
    return [e.title for e in ordered[:RECENT_EPISODE_TITLE_WINDOW]]


def build_token_bag(show: ShowProfile) -> Counter[str]:
    """Case-insensitive token counts over show text and recent titles."""
    corpus = " ".join([show.name, show.description or "", " ".join(_recent_titles(show.episodes))])
    if not corpus.strip():
        return Counter()
    return Counter(_WORD_TOKEN_RE.findall(corpus.lower()))


def _token_hits(
    tokens: Sequence[str], weight: float, bag: Counter[str]
) -> list[NicheFitTokenHit]:
    hits: list[NicheFitTokenHit] = []
    for token in tokens:
        count = bag.get(token, 0)
        if count <= 0:
            continue
        hits.append(
            NicheFitTokenHit(token=token, hits=count, weight=weight, contribution=count * weight)
        )
    return hits


def score_niche_fit(show: ShowProfile) -> NicheFitBreakdown:
    """Weighted token relevance, normalized into 0.0-1.0."""
    bag = build_token_bag(show)
    if not bag:
        return NicheFitBreakdown()

    business_context = any(token in bag for token in BUSINESS_CONTEXT_TOKENS)
    hits = [
        *_token_hits(HIGH_INTENT_TOKENS, HIGH_INTENT_WEIGHT, bag),
        *_token_hits(BASELINE_TOKENS, BASELINE_INTENT_WEIGHT, bag),
        *_token_hits(PENALTY_TOKENS, PENALTY_INTENT_WEIGHT, bag),
    ]
    if business_context:
        hits.extend(_token_hits(BUSINESS_CONTEXT_PENALTY_TOKENS, PENALTY_INTENT_WEIGHT, bag))

    positive = sum(hit.contribution for hit in hits if hit.contribution > 0)
    penalty = sum(-hit.contribution for hit in hits if hit.contribution < 0)
    normalized = 0.0 if positive <= 0 else clamp01(positive / (positive + penalty + 1.0))

    return NicheFitBreakdown(
        token_hits=tuple(hits),
        weighted_score=sum(hit.contribution for hit in hits),
        normalized_score=normalized,
        positive_contribution=positive,
        penalty_magnitude=penalty,
        total_matched_tokens=sum(hit.hits for hit in hits),
        business_context_detected=business_context,
    )


class ScoringEngine:
    """Computes reach, frequency, niche fit and activity for a show."""

    def __init__(self, clock: Clock) -> None:
        self._clock = clock

    def score(self, show: ShowProfile, keywords: Sequence[str] = ()) -> IntentScore:
        """Score a show profile.

        Args:
            show: Profile with the episodes eligible for scoring.
            keywords: Query keywords. Niche fit measures topical intent rather
                than query overlap, so they do not change the result.

        Returns:
            IntentScore with all sub-scores and the combined score.
        """
        _ = keywords
        now = self._clock.now()
        reach = score_reach(show, now)
        frequency = score_frequency(show.episodes, now)
        niche = score_niche_fit(show)
        newest = newest_published_at(show.episodes)
        activity = score_activity(newest, now)
        base = (
            reach * REACH_WEIGHT
            + frequency * FREQUENCY_WEIGHT
            + niche.normalized_score * NICHE_FIT_WEIGHT
        )

        return IntentScore(
            show_id=show.id,
            show_name=show.name,
            reach=reach,
            frequency=frequency,
            niche_fit=niche.normalized_score,
            activity_score=activity,
            score=clamp01(base * activity),
            niche_fit_breakdown=niche,
            newest_episode_published_at=newest,
        )
