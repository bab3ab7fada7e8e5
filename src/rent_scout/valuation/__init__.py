"""Valuation components: pricing, extraction, selection, estimation, adjustment, scoring."""

from .adjustments import AdjustmentEngine, bedroom_category
from .amenities import AmenityExtractor
from .confidence import compute_confidence
from .estimator import BaseEstimate, BaseValueEstimator, estimate_area, median, round_half_up
from .keywords import match_rules, normalize_text
from .pricing import AmenityPricingTable
from .scoring import (
    DescriptionAnalysis,
    analyze_description,
    classify_market_position,
    compute_deal_score,
    grade_for,
)
from .selector import ComparableSelection, ComparableSelector

__all__ = [
    "AdjustmentEngine",
    "AmenityExtractor",
    "AmenityPricingTable",
    "BaseEstimate",
    "BaseValueEstimator",
    "ComparableSelection",
    "ComparableSelector",
    "DescriptionAnalysis",
    "analyze_description",
    "bedroom_category",
    "classify_market_position",
    "compute_confidence",
    "compute_deal_score",
    "estimate_area",
    "grade_for",
    "match_rules",
    "median",
    "normalize_text",
    "round_half_up",
]
