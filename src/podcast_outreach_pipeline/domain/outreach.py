"""Outreach policy applied on top of the intent score.

These thresholds are fixed policy constants rather than runtime settings.
"""

from __future__ import annotations

MISSING_CONTACT_PENALTY = 0.03

HIGH_PRIORITY = "High"
MEDIUM_PRIORITY = "Medium"
LOW_PRIORITY = "Low"

HIGH_MIN_SCORE = 0.55
HIGH_MIN_ACTIVITY = 0.7
HIGH_MIN_FREQUENCY = 0.55
HIGH_MIN_NICHE_FIT = 0.55

MEDIUM_MIN_SCORE = 0.30
MEDIUM_MIN_ACTIVITY = 0.4
MEDIUM_MIN_NICHE_FIT = 0.45


def apply_contact_penalty(score: float, *, has_contact: bool) -> float:
    """Subtract the missing-contact penalty, never going below zero."""
    if has_contact:
        return score
    return max(0.0, score - MISSING_CONTACT_PENALTY)


def classify_outreach_priority(
    *,
    score: float,
    activity_score: float,
    frequency: float,
    niche_fit: float,
    has_contact: bool,
) -> str:
    """Map sub-scores onto a coarse High/Medium/Low label."""
    is_high_signal = (
        score >= HIGH_MIN_SCORE
        and activity_score >= HIGH_MIN_ACTIVITY
        and frequency >= HIGH_MIN_FREQUENCY
        and niche_fit >= HIGH_MIN_NICHE_FIT
    )
    if is_high_signal and has_contact:
        return HIGH_PRIORITY

    is_medium_signal = (
        score >= MEDIUM_MIN_SCORE
        and activity_score >= MEDIUM_MIN_ACTIVITY
        and niche_fit >= MEDIUM_MIN_NICHE_FIT
    )
    if is_medium_signal:
        return MEDIUM_PRIORITY

    return LOW_PRIORITY
