"""Tests for confidence scoring."""

import random

import pytest

from rent_scout.config import get_confidence_params
from rent_scout.models import ConfidenceParams, ValuationMethod
from rent_scout.valuation.confidence import compute_confidence


@pytest.fixture
def params() -> ConfidenceParams:
    return get_confidence_params({})


class TestConfidence:
    def test_small_sample_penalty(self, params: ConfidenceParams, make_record) -> None:
        score, notes = compute_confidence(ValuationMethod.EXACT_MATCH, 3, make_record(), frozenset(), params)
        assert score == 85
        assert notes[0] == "baseline 95 exact_match"

    @pytest.mark.parametrize("count, expected", [(5, 75), (9, 75), (10, 76), (15, 78), (20, 80), (200, 80)])
    def test_sample_size_tiers(self, params: ConfidenceParams, make_record, count: int, expected: int) -> None:
        score, _ = compute_confidence(ValuationMethod.BEDROOM_SPECIFIC, count, make_record(), frozenset(), params)
        assert score == expected

    def test_completeness_bonuses(self, params: ConfidenceParams, make_record) -> None:
        score, notes = compute_confidence(
            ValuationMethod.AREA_RATE_FALLBACK, 20, make_record(area_sqft=700), frozenset({"gym"}), params
        )
        assert score == 75
        assert "+5 known_area" in notes
        assert "+5 has_amenities" in notes

    def test_clamped_to_100(self, params: ConfidenceParams, make_record) -> None:
        score, _ = compute_confidence(
            ValuationMethod.EXACT_MATCH, 25, make_record(area_sqft=700), frozenset({"gym"}), params
        )
        assert score == 100

    def test_clamped_to_zero(self, make_record) -> None:
        harsh = get_confidence_params({"confidence": {"small_sample_penalty": 500}})
        score, _ = compute_confidence(ValuationMethod.AREA_RATE_FALLBACK, 1, make_record(), frozenset(), harsh)
        assert score == 0

    @pytest.mark.parametrize("seed", range(20))
    def test_always_integer_in_range(self, seed: int, make_record) -> None:
        rng = random.Random(seed)
        params = get_confidence_params({
            "confidence": {
                "small_sample_penalty": rng.randint(0, 150),
                "known_area_bonus": rng.randint(0, 50),
                "amenities_bonus": rng.randint(0, 50),
            }
        })
        for _ in range(50):
            method = rng.choice(list(ValuationMethod))
            subject = make_record(area_sqft=rng.choice([0, 450, 1200]))
            amenities = frozenset(rng.sample(["gym", "doorman", "elevator"], rng.randint(0, 3)))
            score, _ = compute_confidence(method, rng.randint(0, 60), subject, amenities, params)
            assert isinstance(score, int)
            assert 0 <= score <= 100
