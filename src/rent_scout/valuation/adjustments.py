"""Additive adjustment layers applied on top of the base value.

Layers: amenity differential vs comparables, size vs comparable average,
condition keywords, micro-location keywords. A layer whose amount is
exactly zero is left out of the breakdown.
"""

from __future__ import annotations

from typing import Iterable

from loguru import logger

from ..models import (
    AdjustmentCategory,
    AdjustmentEntry,
    AdjustmentParams,
    KeywordRule,
    LocationClass,
    PropertyRecord,
    ValuationMethod,
)
from .amenities import AmenityExtractor
from .estimator import round_half_up
from .keywords import match_rules
from .pricing import AmenityPricingTable
from .selector import subject_bedrooms


def bedroom_category(bedrooms: int) -> str:
    """Bucket used for per-square-foot area rates."""
    if bedrooms <= 0:
        return "studio"
    if bedrooms == 1:
        return "one_bed"
    if bedrooms == 2:
        return "two_bed"
    return "three_plus"


def _money(amount: float) -> float:
    return round_half_up(amount, 2)


class AdjustmentEngine:
    """Computes the four adjustment layers for a subject."""

    def __init__(
        self,
        params: AdjustmentParams,
        pricing: AmenityPricingTable,
        extractor: AmenityExtractor,
    ) -> None:
        self.params = params
        self.pricing = pricing
        self.extractor = extractor

    def apply(
        self,
        subject: PropertyRecord,
        comparables: list[PropertyRecord],
        method: ValuationMethod,
        location: LocationClass,
        median_rent: float,
    ) -> list[AdjustmentEntry]:
        """Run every layer and return the non-zero entries in fixed order."""
        entries = [
            self.amenity_adjustment(subject, comparables, location, median_rent),
            self.area_adjustment(subject, comparables, method),
            self.quality_adjustment(subject),
            self.micro_location_adjustment(subject),
        ]
        applied = [e for e in entries if e is not None]
        logger.debug(
            "Adjustments: {}",
            ", ".join(f"{e.category.value} {e.amount:+.0f}" for e in applied) or "none",
        )
        return applied

    def amenity_adjustment(
        self,
        subject: PropertyRecord,
        comparables: list[PropertyRecord],
        location: LocationClass,
        median_rent: float,
    ) -> AdjustmentEntry | None:
        """Subject amenity value minus the average comparable amenity value.

        Percentage rules price the subject off *median_rent* and each
        comparable off its own rent.
        """
        subject_amenities = self.extractor.extract_record(subject)
        subject_values = self.pricing.breakdown(subject_amenities, location, median_rent)
        subject_value = sum(subject_values.values())

        comp_values = [
            self.pricing.amenity_value(self.extractor.extract_record(c), location, c.monthly_rent)
            for c in comparables
        ]
        comp_average = sum(comp_values) / len(comp_values) if comp_values else 0.0

        amount = _money(subject_value - comp_average)
        if amount == 0:
            return None
        priced = ", ".join(subject_values) or "none"
        return AdjustmentEntry(
            category=AdjustmentCategory.AMENITIES,
            amount=amount,
            detail=(
                f"Subject amenities worth ${subject_value:,.0f} ({priced}) vs "
                f"comparable average ${comp_average:,.0f}"
            ),
        )

    def area_adjustment(
        self,
        subject: PropertyRecord,
        comparables: list[PropertyRecord],
        method: ValuationMethod,
    ) -> AdjustmentEntry | None:
        """Per-sq-ft correction vs the comparable average size.

        Units below average use the steeper ``under`` rate. Skipped for the
        area-rate method, which already prices size.
        """
        if method is ValuationMethod.AREA_RATE_FALLBACK or not subject.has_known_area:
            return None
        areas = [c.area_sqft for c in comparables if c.area_sqft > 0]
        if not areas:
            return None
        average = sum(areas) / len(areas)
        diff = subject.area_sqft - average
        if diff == 0:
            return None

        category = bedroom_category(subject_bedrooms(subject))
        rates = self.params.area_rates.get(category)
        if rates is None:
            return None
        rate = rates.over if diff > 0 else rates.under
        amount = _money(diff * rate)
        if amount == 0:
            return None
        direction = "above" if diff > 0 else "below"
        return AdjustmentEntry(
            category=AdjustmentCategory.AREA,
            amount=amount,
            detail=(
                f"{abs(diff):,.0f} sq ft {direction} comparable average of {average:,.0f} "
                f"at ${rate:g}/sq ft ({category})"
            ),
        )

    def quality_adjustment(self, subject: PropertyRecord) -> AdjustmentEntry | None:
        return self._keyword_layer(
            AdjustmentCategory.QUALITY, subject.description, self.params.quality_rules
        )

    def micro_location_adjustment(self, subject: PropertyRecord) -> AdjustmentEntry | None:
        return self._keyword_layer(
            AdjustmentCategory.MICRO_LOCATION, subject.description, self.params.micro_location_rules
        )

    def _keyword_layer(
        self,
        category: AdjustmentCategory,
        description: str,
        rules: Iterable[KeywordRule],
    ) -> AdjustmentEntry | None:
        matched = match_rules(description, rules)
        amount = _money(sum(rule.amount for rule in matched))
        if amount == 0:
            return None
        detail = ", ".join(f"{rule.name} {rule.amount:+,.0f}" for rule in matched)
        return AdjustmentEntry(category=category, amount=amount, detail=detail)
