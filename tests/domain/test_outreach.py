"""Tests for the outreach policy constants."""

from __future__ import annotations

import pytest

from podcast_outreach_pipeline.domain.outreach import (
    HIGH_PRIORITY,
    LOW_PRIORITY,
    MEDIUM_PRIORITY,
    apply_contact_penalty,
    classify_outreach_priority,
)


class TestContactPenalty:
    def test_contact_keeps_score(self) -> None:
        assert apply_contact_penalty(0.5, has_contact=True) == 0.5

    def test_missing_contact_subtracts_penalty(self) -> None:
        assert apply_contact_penalty(0.5, has_contact=False) == pytest.approx(0.47)

    def test_penalty_floors_at_zero(self) -> None:
        assert apply_contact_penalty(0.01, has_contact=False) == 0.0


class TestPriority:
    def _classify(self, **overrides: float | bool) -> str:
        values: dict[str, float | bool] = {
            "score": 0.6,
            "activity_score": 1.0,
            "frequency": 0.6,
            "niche_fit": 0.6,
            "has_contact": True,
        }
        values.update(overrides)
        return classify_outreach_priority(
            score=float(values["score"]),
            activity_score=float(values["activity_score"]),
            frequency=float(values["frequency"]),
            niche_fit=float(values["niche_fit"]),
            has_contact=bool(values["has_contact"]),
        )

    def test_high(self) -> None:
        assert self._classify() == HIGH_PRIORITY

    def test_high_signal_without_contact_is_medium(self) -> None:
        assert self._classify(has_contact=False) == MEDIUM_PRIORITY

    def test_low_frequency_drops_to_medium(self) -> None:
        assert self._classify(frequency=0.2) == MEDIUM_PRIORITY

    def test_medium_thresholds(self) -> None:
        assert self._classify(score=0.30, activity_score=0.4, niche_fit=0.45) == MEDIUM_PRIORITY

    @pytest.mark.parametrize(
        "override",
        [{"score": 0.29}, {"activity_score": 0.15}, {"niche_fit": 0.44}],
    )
    def test_low(self, override: dict[str, float]) -> None:
        assert self._classify(**override) == LOW_PRIORITY
