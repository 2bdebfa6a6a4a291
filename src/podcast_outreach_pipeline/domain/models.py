"""Immutable value objects shared across the ranking pipeline.

Every object is built once per run from inputs or computed sub-results and
never mutated afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class Candidate:
    """One search-result show before feed enrichment."""

    id: str
    name: str
    feed_url: str
    description: str = ""
    estimated_reach: float = 0.0
    language: str | None = None


@dataclass(frozen=True)
class Episode:
    """A single feed item."""

    title: str
    description: str = ""
    published_at: datetime | None = None  # aware, UTC
    raw_published_date: str | None = None


@dataclass(frozen=True)
class ParseIssue:
    """Structured, non-exceptional feed parsing problem."""

    code: str
    message: str


@dataclass(frozen=True)
class FeedPayload:
    """Normalized contents of one feed."""

    contact_email: str | None = None
    language: str | None = None
    episodes: tuple[Episode, ...] = ()


@dataclass(frozen=True)
class FeedParseResult:
    """Best-effort parse output plus collected issues."""

    payload: FeedPayload | None
    issues: tuple[ParseIssue, ...] = ()

    @property
    def success(self) -> bool:
        return self.payload is not None

    @classmethod
    def ok(cls, payload: FeedPayload, issues: tuple[ParseIssue, ...] = ()) -> FeedParseResult:
        return cls(payload=payload, issues=issues)

    @classmethod
    def fail(cls, issue: ParseIssue) -> FeedParseResult:
        return cls(payload=None, issues=(issue,))


@dataclass(frozen=True)
class ShowProfile:
    """The unit consumed by the scoring engine."""

    id: str
    name: str
    feed_url: str = ""
    description: str = ""
    estimated_reach: float = 0.0
    contact_email: str | None = None
    episodes: tuple[Episode, ...] = ()

    @property
    def has_contact(self) -> bool:
        return bool(self.contact_email and self.contact_email.strip())


@dataclass(frozen=True)
class NicheFitTokenHit:
    """Explainability record for one matched token."""

    token: str
    hits: int
    weight: float
    contribution: float


@dataclass(frozen=True)
class NicheFitBreakdown:
    """Token-weighted niche-fit calculation, kept for explainability."""

    token_hits: tuple[NicheFitTokenHit, ...] = ()
    weighted_score: float = 0.0
    normalized_score: float = 0.0  # 0.0-1.0
    positive_contribution: float = 0.0
    penalty_magnitude: float = 0.0
    total_matched_tokens: int = 0
    business_context_detected: bool = False


@dataclass(frozen=True)
class IntentScore:
    """Scoring engine output for one show."""

    show_id: str
    show_name: str
    reach: float
    frequency: float
    niche_fit: float
    activity_score: float
    score: float
    niche_fit_breakdown: NicheFitBreakdown
    newest_episode_published_at: datetime | None = None


@dataclass(frozen=True)
class RankedTarget:
    """Final output row handed to rendering and outreach tracking."""

    show_id: str
    show_name: str
    detected_language: str
    feed_url: str = ""
    contact_email: str | None = None
    reach: float = 0.0
    frequency: float = 0.0
    niche_fit: float = 0.0
    activity_score: float = 0.0
    niche_fit_breakdown: NicheFitBreakdown | None = None
    outreach_priority: str = "Low"
    score: float = 0.0
    newest_episode_published_at: datetime | None = None
    recent_episode_titles: tuple[str, ...] = ()


@dataclass(frozen=True)
class RankingRunResult:
    """Ordered targets plus de-duplicated warnings for one run."""

    results: tuple[RankedTarget, ...]
    warnings: tuple[str, ...]
    diagnostics: tuple[str, ...] = field(default_factory=tuple)
