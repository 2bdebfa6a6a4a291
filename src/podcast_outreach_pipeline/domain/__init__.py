"""Domain modules for the ranking pipeline."""

from .language import detect_allowed_language
from .outreach import apply_contact_penalty, classify_outreach_priority
from .scoring import ScoringEngine

__all__ = [
    "ScoringEngine",
    "apply_contact_penalty",
    "classify_outreach_priority",
    "detect_allowed_language",
]
