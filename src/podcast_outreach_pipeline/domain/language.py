"""Cheap language gate for candidate shows.

A declared language tag is authoritative: a recognised tag outside the
allow-list rejects the show without consulting the text. Without a tag the
show's name and description are classified by diacritics, then by counting
signal words for each accepted language.

Usage example:
    from podcast_outreach_pipeline.domain.language import detect_allowed_language

    detect_allowed_language("en-US", "Any", "")  # "en"
    detect_allowed_language(None, "Magyar podcast", "Egy beszélgetés")  # "hu"
    detect_allowed_language("de", "The show", "")  # None
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum


class LanguageClassification(Enum):
    UNKNOWN = "unknown"
    ENGLISH = "english"
    HUNGARIAN = "hungarian"
    OTHER = "other"


ACCEPTED_LANGUAGE_CODES: dict[LanguageClassification, str] = {
    LanguageClassification.ENGLISH: "en",
    LanguageClassification.HUNGARIAN: "hu",
}

ENGLISH_SIGNAL_WORDS = frozenset(
    {"about", "and", "episode", "from", "health", "interview", "science", "the", "this", "with"}
)
HUNGARIAN_SIGNAL_WORDS = frozenset(
    {"beszelgetes", "egy", "es", "hogy", "interju", "magyar", "mert", "nem", "vagy", "van"}
)
HUNGARIAN_DIACRITICS = frozenset("áéíóöőúüű")

# Whitespace plus the fixed punctuation set used to split show text.
TOKEN_SEPARATORS = " \t\r\n,.;:!?()[]{}\"'/\\|-_+=*&#@%^$<>~`"
_TOKEN_SPLIT_RE = re.compile("[" + re.escape(TOKEN_SEPARATORS) + "]+")

MIN_SIGNAL_HITS = 2


@dataclass(frozen=True)
class TagRule:
    """Maps a normalized language tag onto a classification."""

    classification: LanguageClassification
    code_prefix: str
    name: str

    def matches(self, normalized_tag: str) -> bool:
        return normalized_tag.startswith(self.code_prefix) or self.name in normalized_tag


@dataclass(frozen=True)
class SignalCounts:
    english: int
    hungarian: int


@dataclass(frozen=True)
class HeuristicRule:
    """One ordered step of the signal-word decision."""

    classification: LanguageClassification
    accepts: Callable[[SignalCounts], bool]


TAG_RULES: tuple[TagRule, ...] = (
    TagRule(LanguageClassification.ENGLISH, "en", "english"),
    TagRule(LanguageClassification.HUNGARIAN, "hu", "hungarian"),
)

# Hungarian needs a strict margin; English only needs to not lose.
HEURISTIC_RULES: tuple[HeuristicRule, ...] = (
    HeuristicRule(
        LanguageClassification.HUNGARIAN,
        lambda counts: counts.hungarian >= MIN_SIGNAL_HITS
        and counts.hungarian >= counts.english + 1,
    ),
    HeuristicRule(
        LanguageClassification.ENGLISH,
        lambda counts: counts.english >= MIN_SIGNAL_HITS and counts.english >= counts.hungarian,
    ),
)


def normalize_language_tag(raw: str) -> str:
    """Lowercase a tag and use hyphens as the region separator."""
    return raw.strip().lower().replace("_", "-")


def classify_language_tag(raw: str | None) -> LanguageClassification | None:
    """Classify a declared tag, or return None when no tag is present."""
    if raw is None or not raw.strip():
        return None
    normalized = normalize_language_tag(raw)
    for rule in TAG_RULES:
        if rule.matches(normalized):
            return rule.classification
    return LanguageClassification.OTHER


def tokenize(text: str) -> list[str]:
    return [token for token in _TOKEN_SPLIT_RE.split(text) if token]


def count_signal_words(text: str) -> SignalCounts:
    english = 0
    hungarian = 0
    for token in tokenize(text):
        if token in ENGLISH_SIGNAL_WORDS:
            english += 1
        if token in HUNGARIAN_SIGNAL_WORDS:
            hungarian += 1
    return SignalCounts(english=english, hungarian=hungarian)


def infer_language_from_text(name: str, description: str) -> LanguageClassification:
    """Infer a language from free text; UNKNOWN when no rule is satisfied."""
    normalized = f"{name} {description}".lower()
    if any(char in HUNGARIAN_DIACRITICS for char in normalized):
        return LanguageClassification.HUNGARIAN

    counts = count_signal_words(normalized)
    for rule in HEURISTIC_RULES:
        if rule.accepts(counts):
            return rule.classification
    return LanguageClassification.UNKNOWN


def detect_allowed_language(
    declared: str | None,
    name: str,
    description: str,
) -> str | None:
    """Return the accepted language code for a show, or None to reject it."""
    classification = classify_language_tag(declared)
    if classification is None:
        classification = infer_language_from_text(name, description)
    return ACCEPTED_LANGUAGE_CODES.get(classification)
