"""Base market-rent estimation from the selected comparable set."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from loguru import logger

from ..models import EstimationParams, PropertyRecord, ValuationMethod
from .selector import subject_bathrooms, subject_bedrooms


def median(values: Iterable[float]) -> float:
    """Median of *values*; average of the two middle values for even counts, 0 if empty."""
    ordered = sorted(values)
    n = len(ordered)
    if n == 0:
        return 0.0
    mid = n // 2
    if n % 2 == 1:
        return float(ordered[mid])
    return (ordered[mid - 1] + ordered[mid]) / 2


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round with halves away from zero (2.5 -> 3, 33.35 -> 33.4)."""
    quantum = Decimal(1).scaleb(-ndigits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def estimate_area(bedrooms: int, params: EstimationParams) -> float:
    """Typical unit size for a bedroom count; the largest bucket covers bigger units."""
    table = params.estimated_area_by_bedrooms
    if not table:
        return 0.0
    if bedrooms in table:
        return table[bedrooms]
    largest = max(table)
    return table[largest] if bedrooms > largest else table[min(table)]


@dataclass(frozen=True)
class BaseEstimate:
    """Pre-adjustment rent and how it was derived."""

    value: float
    method: ValuationMethod
    detail: str
    median_rent: float
    subject_area: float = 0.0
    area_was_estimated: bool = False


class BaseValueEstimator:
    """Method-specific central tendency over the comparable set."""

    def __init__(self, params: EstimationParams) -> None:
        self.params = params

    def estimate(
        self,
        method: ValuationMethod,
        subject: PropertyRecord,
        comparables: list[PropertyRecord],
    ) -> BaseEstimate:
        median_rent = median(c.monthly_rent for c in comparables)

        if method is ValuationMethod.AREA_RATE_FALLBACK:
            estimate = self._area_rate(subject, comparables, median_rent)
        elif method is ValuationMethod.BEDROOM_SPECIFIC:
            estimate = self._bedroom_with_bath_delta(subject, comparables, median_rent)
        else:
            estimate = BaseEstimate(
                value=median_rent,
                method=method,
                detail=f"Median rent of {len(comparables)} comparables: ${median_rent:,.0f}",
                median_rent=median_rent,
                subject_area=subject.area_sqft,
            )

        logger.debug("Base value {:.0f} via {}", estimate.value, method.value)
        return estimate

    def _bedroom_with_bath_delta(
        self,
        subject: PropertyRecord,
        comparables: list[PropertyRecord],
        median_rent: float,
    ) -> BaseEstimate:
        median_baths = median(c.bathrooms or 0 for c in comparables)
        delta = subject_bathrooms(subject) - median_baths
        bath_adjustment = 0.0
        if self.params.bath_step > 0:
            bath_adjustment = delta / self.params.bath_step * self.params.value_per_bath_step
        detail = f"Median rent ${median_rent:,.0f}"
        if bath_adjustment:
            detail += f" {bath_adjustment:+,.0f} for {delta:+g} bath vs median {median_baths:g}"
        return BaseEstimate(
            value=median_rent + bath_adjustment,
            method=ValuationMethod.BEDROOM_SPECIFIC,
            detail=detail,
            median_rent=median_rent,
            subject_area=subject.area_sqft,
        )

    def _area_rate(
        self,
        subject: PropertyRecord,
        comparables: list[PropertyRecord],
        median_rent: float,
    ) -> BaseEstimate:
        rates = [c.monthly_rent / c.area_sqft for c in comparables if c.area_sqft > 0]
        rate = median(rates)
        # Derived locally; the subject record stays untouched.
        area = subject.area_sqft
        estimated = False
        if area <= 0:
            area = estimate_area(subject_bedrooms(subject), self.params)
            estimated = True
        value = rate * area
        source = "estimated" if estimated else "listed"
        return BaseEstimate(
            value=value,
            method=ValuationMethod.AREA_RATE_FALLBACK,
            detail=f"Median ${rate:,.2f}/sq ft x {area:,.0f} sq ft ({source})",
            median_rent=median_rent,
            subject_area=area,
            area_was_estimated=estimated,
        )
