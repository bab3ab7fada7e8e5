"""Tests for record normalization and serialization."""

import pytest

from rent_scout.models import (
    AdjustmentCategory,
    AdjustmentEntry,
    AmenityRule,
    LocationClass,
    PropertyRecord,
    RuleKind,
    UndervaluationVerdict,
    ValuationMethod,
    normalize_amenity,
)


class TestPropertyRecordFromDict:
    def test_camel_case_aliases(self) -> None:
        record = PropertyRecord.from_dict({
            "listingId": "abc",
            "monthlyRent": "$3,200/mo",
            "bedrooms": 2,
            "bathrooms": "1.5",
            "areaSqFt": "850",
            "amenities": ["Doorman", "Elevator"],
            "daysOnMarket": 4,
            "boroughOrNeighborhood": "Astoria",
            "noFee": True,
        })
        assert record.id == "abc"
        assert record.monthly_rent == 3200
        assert record.bedrooms == 2
        assert record.bathrooms == 1.5
        assert record.area_sqft == 850
        assert record.amenities == frozenset({"Doorman", "Elevator"})
        assert record.days_on_market == 4
        assert record.borough == "Astoria"
        assert record.no_fee

    def test_missing_fields_default(self) -> None:
        record = PropertyRecord.from_dict({"price": 2500})
        assert record.monthly_rent == 2500
        assert record.bedrooms is None
        assert record.bathrooms is None
        assert record.area_sqft == 0
        assert record.amenities == frozenset()
        assert record.description == ""
        assert not record.has_known_area

    def test_negative_and_garbage_numbers_are_missing(self) -> None:
        record = PropertyRecord.from_dict({"rent": "-100", "sqft": "n/a", "beds": "-1", "description": None})
        assert record.monthly_rent == 0
        assert record.area_sqft == 0
        assert record.bedrooms is None
        assert record.description == ""

    def test_comma_separated_amenities(self) -> None:
        record = PropertyRecord.from_dict({"rent": 3000, "amenities": "gym, pool, "})
        assert record.amenities == frozenset({"gym", "pool"})

    def test_record_is_immutable(self) -> None:
        record = PropertyRecord(monthly_rent=3000, bedrooms=1, bathrooms=1.0)
        with pytest.raises(AttributeError):
            record.area_sqft = 500  # type: ignore[misc]


def test_normalize_amenity() -> None:
    assert normalize_amenity("Washer/Dryer In-Unit") == "washer_dryer_in_unit"
    assert normalize_amenity("  Roof Deck ") == "roof_deck"


class TestAmenityRule:
    def test_fixed(self) -> None:
        assert AmenityRule(LocationClass.OTHER_METRO, RuleKind.FIXED, 150).resolve(0) == 150

    def test_percentage(self) -> None:
        rule = AmenityRule(LocationClass.PRIMARY_METRO, RuleKind.PERCENTAGE, 5)
        assert rule.resolve(4000) == 200
        assert rule.resolve(0) is None


def test_method_from_string() -> None:
    assert ValuationMethod.from_string("Bed-Bath_Specific") is ValuationMethod.BED_BATH_SPECIFIC
    assert ValuationMethod.from_string("EXACT_MATCH") is ValuationMethod.EXACT_MATCH
    with pytest.raises(ValueError):
        ValuationMethod.from_string("guess")


def test_verdict_to_dict() -> None:
    subject = PropertyRecord(monthly_rent=2500, bedrooms=1, bathrooms=1.0, id="x1")
    verdict = UndervaluationVerdict(
        is_undervalued=True,
        discount_percent=28.6,
        estimated_market_rent=3500,
        actual_rent=2500,
        potential_monthly_savings=1000,
        confidence=96,
        method=ValuationMethod.EXACT_MATCH,
        comparables_used=10,
        adjustments=[AdjustmentEntry(AdjustmentCategory.AMENITIES, 100.0, "gym")],
        rationale="ok",
        subject=subject,
    )
    data = verdict.to_dict()
    assert data["listing_id"] == "x1"
    assert data["method"] == "exact_match"
    assert data["adjustments"] == [{"category": "amenities", "amount": 100.0, "detail": "gym"}]
    assert data["subject"]["amenities"] == []
