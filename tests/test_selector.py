"""Tests for comparable selection."""

import pytest

from rent_scout.config import get_selection_params
from rent_scout.models import ValuationMethod
from rent_scout.valuation.amenities import AmenityExtractor
from rent_scout.valuation.selector import ComparableSelector


@pytest.fixture
def selector() -> ComparableSelector:
    return ComparableSelector(get_selection_params({}), AmenityExtractor().extract_record)


@pytest.fixture
def doorman_selector() -> ComparableSelector:
    """Selector whose exact matches must agree on the doorman group."""
    params = get_selection_params(
        {"selection": {"key_amenities": {"doorman": ["doorman", "full_time_doorman"]}}}
    )
    return ComparableSelector(params, AmenityExtractor().extract_record)


class TestDataQualityFilter:
    def test_rejects_bad_comparables(self, selector: ComparableSelector, make_record) -> None:
        assert not selector.passes_quality_filter(make_record(rent=0))
        assert not selector.passes_quality_filter(make_record(rent=50001))
        assert not selector.passes_quality_filter(make_record(bedrooms=None))
        assert not selector.passes_quality_filter(make_record(bathrooms=None))
        assert not selector.passes_quality_filter(make_record(days_on_market=121))

    def test_accepts_boundaries(self, selector: ComparableSelector, make_record) -> None:
        assert selector.passes_quality_filter(make_record(rent=50000, days_on_market=120))
        assert selector.passes_quality_filter(make_record(bedrooms=0, bathrooms=0))


class TestWaterfall:
    def test_exact_match_with_three(self, selector: ComparableSelector, make_record) -> None:
        subject = make_record(rent=2500, bedrooms=2, bathrooms=1)
        comps = [make_record(rent=r, bedrooms=2, bathrooms=1) for r in (3000, 3200, 3400)]
        selection = selector.select(subject, comps)
        assert selection.method is ValuationMethod.EXACT_MATCH
        assert selection.comp_count == 3

    def test_exact_match_ignores_amenities_by_default(self, selector: ComparableSelector, make_record) -> None:
        subject = make_record(rent=2500, bedrooms=2, bathrooms=1, amenities={"doorman"})
        comps = [make_record(rent=r, bedrooms=2, bathrooms=1) for r in (3000, 3200, 3400)]
        selection = selector.select(subject, comps)
        assert selection.method is ValuationMethod.EXACT_MATCH
        assert selection.comp_count == 3

    def test_exact_match_requires_configured_key_amenities(
        self, doorman_selector: ComparableSelector, make_record
    ) -> None:
        subject = make_record(amenities={"doorman"})
        comps = [make_record(rent=3000 + i) for i in range(8)]
        selection = doorman_selector.select(subject, comps)
        assert selection.candidate_counts[ValuationMethod.EXACT_MATCH] == 0
        assert selection.method is ValuationMethod.BED_BATH_SPECIFIC

    def test_full_time_doorman_satisfies_doorman_group(
        self, doorman_selector: ComparableSelector, make_record
    ) -> None:
        subject = make_record(amenities={"doorman"})
        comps = [make_record(description="24 hour doorman building") for _ in range(3)]
        assert doorman_selector.select(subject, comps).method is ValuationMethod.EXACT_MATCH

    def test_bedroom_specific_when_baths_differ(self, selector: ComparableSelector, make_record) -> None:
        subject = make_record(bedrooms=2, bathrooms=1)
        comps = [make_record(bedrooms=2, bathrooms=2) for _ in range(12)]
        selection = selector.select(subject, comps)
        assert selection.method is ValuationMethod.BEDROOM_SPECIFIC
        assert selection.candidate_counts[ValuationMethod.BED_BATH_SPECIFIC] == 0

    def test_area_rate_fallback(self, selector: ComparableSelector, make_record) -> None:
        subject = make_record(bedrooms=1)
        comps = [make_record(bedrooms=3, bathrooms=2, area_sqft=1100) for _ in range(20)]
        comps.append(make_record(bedrooms=3, bathrooms=2))  # unknown area
        selection = selector.select(subject, comps)
        assert selection.method is ValuationMethod.AREA_RATE_FALLBACK
        assert selection.comp_count == 20

    def test_insufficient_comparables(self, selector: ComparableSelector, make_record) -> None:
        subject = make_record(bedrooms=2)
        comps = [make_record(bedrooms=2), make_record(bedrooms=2), make_record(rent=0, bedrooms=2)]
        selection = selector.select(subject, comps)
        assert not selection.success
        assert selection.quality_count == 2
        assert "exact_match 2/3" in selection.reason
        assert "area_rate_fallback 0/20" in selection.reason

    def test_missing_subject_baths_treated_as_one(self, selector: ComparableSelector, make_record) -> None:
        subject = make_record(bathrooms=None)
        comps = [make_record(bathrooms=1.5) for _ in range(3)]
        assert selector.select(subject, comps).method is ValuationMethod.EXACT_MATCH

    def test_missing_subject_beds_treated_as_studio(self, selector: ComparableSelector, make_record) -> None:
        subject = make_record(bedrooms=None)
        comps = [make_record(bedrooms=0) for _ in range(3)]
        assert selector.select(subject, comps).method is ValuationMethod.EXACT_MATCH

    def test_custom_minimums(self, make_record) -> None:
        params = get_selection_params({"selection": {"min_samples": {"exact_match": 5}}})
        selector = ComparableSelector(params, AmenityExtractor().extract_record)
        comps = [make_record() for _ in range(4)]
        assert selector.select(make_record(), comps).success is False
