"""Comparable selection: data-quality filter and the method waterfall."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable

from loguru import logger

from ..models import PropertyRecord, SelectionParams, ValuationMethod

# Subject bathrooms default when the listing omits them.
DEFAULT_SUBJECT_BATHROOMS = 1.0


@dataclass
class ComparableSelection:
    """Outcome of the waterfall: the chosen method and its comparable set."""

    method: ValuationMethod | None
    comparables: list[PropertyRecord]
    candidate_counts: dict[ValuationMethod, int] = field(default_factory=dict)
    quality_count: int = 0
    reason: str = ""

    @property
    def success(self) -> bool:
        return self.method is not None

    @property
    def comp_count(self) -> int:
        return len(self.comparables)


def subject_bedrooms(subject: PropertyRecord) -> int:
    return subject.bedrooms if subject.bedrooms is not None else 0


def subject_bathrooms(subject: PropertyRecord) -> float:
    return subject.bathrooms if subject.bathrooms is not None else DEFAULT_SUBJECT_BATHROOMS


class ComparableSelector:
    """
    Chooses the most specific valuation method with enough comparables.
    Waterfall: exact match -> bed/bath -> bedroom only -> rent per sq ft.
    """

    def __init__(
        self,
        params: SelectionParams,
        amenities_of: Callable[[PropertyRecord], frozenset[str]],
    ) -> None:
        self.params = params
        self._amenities_of = amenities_of

    def passes_quality_filter(self, comp: PropertyRecord) -> bool:
        """Rent in (0, max_rent], bed/bath present, not stale."""
        if not (0 < comp.monthly_rent <= self.params.max_rent):
            return False
        if comp.bedrooms is None or comp.bathrooms is None:
            return False
        return comp.days_on_market <= self.params.max_days_on_market

    def key_amenity_profile(self, record: PropertyRecord) -> frozenset[str]:
        """Names of the key amenity groups a record satisfies."""
        amenities = self._amenities_of(record)
        return frozenset(
            group
            for group, members in self.params.key_amenities.items()
            if any(m in amenities for m in members)
        )

    def candidates_for(
        self,
        method: ValuationMethod,
        subject: PropertyRecord,
        pool: list[PropertyRecord],
    ) -> list[PropertyRecord]:
        """Comparables from a quality-filtered *pool* eligible for *method*."""
        beds = subject_bedrooms(subject)
        baths = subject_bathrooms(subject)

        if method is ValuationMethod.AREA_RATE_FALLBACK:
            return [c for c in pool if c.area_sqft > 0 and c.monthly_rent > 0]

        same_beds = [c for c in pool if c.bedrooms == beds]
        if method is ValuationMethod.BEDROOM_SPECIFIC:
            return same_beds
        if method is ValuationMethod.BED_BATH_SPECIFIC:
            tolerance = self.params.bed_bath_tolerance
            return [c for c in same_beds if abs(c.bathrooms - baths) <= tolerance]

        tolerance = self.params.exact_bath_tolerance
        profile = self.key_amenity_profile(subject)
        return [
            c
            for c in same_beds
            if abs(c.bathrooms - baths) <= tolerance and self.key_amenity_profile(c) == profile
        ]

    def select(
        self,
        subject: PropertyRecord,
        comparables: Iterable[PropertyRecord],
    ) -> ComparableSelection:
        """Run the waterfall; the first method meeting its minimum wins."""
        pool = [c for c in comparables if self.passes_quality_filter(c)]
        counts: dict[ValuationMethod, int] = {}

        for method in ValuationMethod:
            candidates = self.candidates_for(method, subject, pool)
            counts[method] = len(candidates)
            minimum = self.params.min_samples[method]
            if len(candidates) >= minimum:
                logger.debug(
                    "Selected {} with {} comparables (min {})", method.value, len(candidates), minimum
                )
                return ComparableSelection(
                    method=method,
                    comparables=candidates,
                    candidate_counts=counts,
                    quality_count=len(pool),
                )

        shortfall = ", ".join(
            f"{m.value} {counts[m]}/{self.params.min_samples[m]}" for m in ValuationMethod
        )
        reason = (
            f"Insufficient comparables: {shortfall} "
            f"({len(pool)} passed the data-quality filter)"
        )
        logger.debug(reason)
        return ComparableSelection(
            method=None,
            comparables=[],
            candidate_counts=counts,
            quality_count=len(pool),
            reason=reason,
        )
