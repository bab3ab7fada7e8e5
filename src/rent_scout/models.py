"""Data models for rental listings, valuation parameters and verdicts."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping


class LocationClass(Enum):
    """Pricing region for amenity rules."""

    PRIMARY_METRO = "primary_metro"
    OTHER_METRO = "other_metro"


class RuleKind(Enum):
    """How an amenity rule resolves to dollars."""

    FIXED = "fixed"
    PERCENTAGE = "percentage"


class ValuationMethod(Enum):
    """Comparable-selection methods, most specific first."""

    EXACT_MATCH = "exact_match"
    BED_BATH_SPECIFIC = "bed_bath_specific"
    BEDROOM_SPECIFIC = "bedroom_specific"
    AREA_RATE_FALLBACK = "area_rate_fallback"

    @classmethod
    def from_string(cls, value: str) -> "ValuationMethod":
        """Convert string to ValuationMethod, case-insensitive."""
        normalised = value.lower().strip().replace("-", "_")
        for member in cls:
            if member.value == normalised or member.name.lower() == normalised:
                return member
        raise ValueError(f"Unknown valuation method: {value!r}")


class AdjustmentCategory(Enum):
    AMENITIES = "amenities"
    AREA = "area"
    QUALITY = "quality"
    MICRO_LOCATION = "micro_location"


def _to_float(value: Any) -> float | None:
    """Parse numbers from various formats: 3200, '3200', '$3,200/mo'."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    s = str(value).strip()
    if s.startswith("-"):
        return None
    s = re.sub(r"[^\d.]", "", s)
    try:
        return float(s) if s else None
    except ValueError:
        return None


def _first(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


def normalize_amenity(value: str) -> str:
    """Lowercase and collapse separators: 'Washer/Dryer In-Unit' -> 'washer_dryer_in_unit'."""
    return "_".join(re.split(r"[\s\-_/]+", str(value).strip().lower())).strip("_")


@dataclass(frozen=True)
class PropertyRecord:
    """Normalized rental listing (subject or comparable).

    ``bedrooms`` / ``bathrooms`` of ``None`` mean the source did not supply
    them; ``area_sqft`` of 0 means unknown.
    """

    monthly_rent: float
    bedrooms: int | None
    bathrooms: float | None
    area_sqft: float = 0.0
    amenities: frozenset[str] = field(default_factory=frozenset)
    description: str = ""
    days_on_market: int = 0
    borough: str = ""
    id: str = ""
    address: str = ""
    no_fee: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.amenities, frozenset):
            object.__setattr__(self, "amenities", frozenset(self.amenities or ()))
        if self.description is None:
            object.__setattr__(self, "description", "")

    @property
    def has_known_area(self) -> bool:
        return self.area_sqft > 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PropertyRecord":
        """Build a record from a raw listing dict (camelCase or snake_case keys).

        Missing or unparseable numbers never raise: rent and area default to 0,
        days on market to 0, bedrooms/bathrooms stay ``None``.
        """
        rent = _to_float(_first(data, "monthly_rent", "monthlyRent", "rent", "price"))
        beds = _to_float(_first(data, "bedrooms", "beds"))
        baths = _to_float(_first(data, "bathrooms", "baths"))
        area = _to_float(_first(data, "area_sqft", "areaSqFt", "sqft", "size_sqft"))
        dom = _to_float(_first(data, "days_on_market", "daysOnMarket"))

        raw_amenities = data.get("amenities") or []
        if isinstance(raw_amenities, str):
            raw_amenities = [a.strip() for a in raw_amenities.split(",") if a.strip()]

        borough = _first(data, "borough", "boroughOrNeighborhood", "neighborhood", "area") or ""
        return cls(
            monthly_rent=rent if rent and rent > 0 else 0.0,
            bedrooms=int(beds) if beds is not None and beds >= 0 else None,
            bathrooms=baths if baths is not None and baths >= 0 else None,
            area_sqft=area if area and area > 0 else 0.0,
            amenities=frozenset(str(a) for a in raw_amenities),
            description=str(data.get("description") or ""),
            days_on_market=int(dom) if dom and dom > 0 else 0,
            borough=str(borough),
            id=str(_first(data, "id", "listing_id", "listingId") or ""),
            address=str(data.get("address") or ""),
            no_fee=bool(_first(data, "no_fee", "noFee") or False),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "address": self.address,
            "borough": self.borough,
            "monthly_rent": self.monthly_rent,
            "bedrooms": self.bedrooms,
            "bathrooms": self.bathrooms,
            "area_sqft": self.area_sqft,
            "amenities": sorted(self.amenities),
            "description": self.description,
            "days_on_market": self.days_on_market,
            "no_fee": self.no_fee,
        }


@dataclass(frozen=True)
class AmenityRule:
    """Location-specific pricing rule for one amenity."""

    location_class: LocationClass
    kind: RuleKind
    magnitude: float  # dollars for FIXED, percent of rent for PERCENTAGE

    def resolve(self, base_rent: float) -> float | None:
        """Dollar value of this rule, or ``None`` when a percentage has no base."""
        if self.kind is RuleKind.FIXED:
            return self.magnitude
        if not base_rent:
            return None
        return base_rent * self.magnitude / 100


@dataclass(frozen=True)
class KeywordRule:
    """Named trigger-phrase rule consumed by ``valuation.keywords.match_rules``.

    ``unless`` phrases veto the rule; ``supersedes`` names less specific rules
    that are dropped when this one matches.
    """

    name: str
    phrases: tuple[str, ...]
    amount: float = 0.0
    unless: tuple[str, ...] = ()
    supersedes: tuple[str, ...] = ()


@dataclass(frozen=True)
class SelectionParams:
    """Comparable-selection parameters."""

    min_samples: Mapping[ValuationMethod, int]
    exact_bath_tolerance: float
    bed_bath_tolerance: float
    key_amenities: Mapping[str, tuple[str, ...]]  # group -> amenity ids that satisfy it
    max_rent: float
    max_days_on_market: int


@dataclass(frozen=True)
class EstimationParams:
    """Base value estimation parameters."""

    bath_step: float
    value_per_bath_step: float
    estimated_area_by_bedrooms: Mapping[int, float]


@dataclass(frozen=True)
class AreaRate:
    """Per-square-foot rates above (over) and below (under) the comparable average."""

    over: float
    under: float


@dataclass(frozen=True)
class AdjustmentParams:
    """Adjustment-layer parameters."""

    area_rates: Mapping[str, AreaRate]
    quality_rules: tuple[KeywordRule, ...]
    micro_location_rules: tuple[KeywordRule, ...]


@dataclass(frozen=True)
class ConfidenceParams:
    """Confidence scoring weights."""

    method_base: Mapping[ValuationMethod, int]
    sample_size_tiers: tuple[tuple[int, int], ...]  # (min comparables, bonus), highest first
    small_sample_below: int
    small_sample_penalty: int
    known_area_bonus: int
    amenities_bonus: int


@dataclass(frozen=True)
class DecisionPolicy:
    """Undervaluation threshold and confidence gates."""

    threshold: float
    confidence_gates: Mapping[ValuationMethod, int]
    threshold_by_method: Mapping[ValuationMethod, float] = field(
        default_factory=lambda: MappingProxyType({})
    )
    moderate_threshold: float = 5.0
    overvalued_threshold: float = -5.0

    def threshold_for(self, method: ValuationMethod, override: float | None = None) -> float:
        if override is not None:
            return override
        return self.threshold_by_method.get(method, self.threshold)


@dataclass(frozen=True)
class ScoringParams:
    """Deal score weights."""

    premium_neighborhoods: tuple[str, ...]
    distress_phrases: tuple[str, ...]
    renovation_phrases: tuple[str, ...]
    urgency_phrases: tuple[str, ...]


@dataclass(frozen=True)
class AdjustmentEntry:
    """One additive correction on top of the base value."""

    category: AdjustmentCategory
    amount: float
    detail: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category.value,
            "amount": self.amount,
            "detail": self.detail,
        }


@dataclass
class ValuationResult:
    """Market-rent estimate for a subject property."""

    success: bool
    estimated_market_rent: int = 0
    base_market_rent: float = 0.0
    total_adjustments: float = 0.0
    adjustments: list[AdjustmentEntry] = field(default_factory=list)
    method: ValuationMethod | None = None
    confidence: int = 0
    comparables_used: int = 0
    rationale: str = ""
    confidence_notes: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "estimated_market_rent": self.estimated_market_rent,
            "base_market_rent": self.base_market_rent,
            "total_adjustments": self.total_adjustments,
            "adjustments": [a.to_dict() for a in self.adjustments],
            "method": self.method.value if self.method else None,
            "confidence": self.confidence,
            "comparables_used": self.comparables_used,
            "rationale": self.rationale,
            "confidence_notes": self.confidence_notes,
        }


@dataclass
class UndervaluationVerdict:
    """Final decision for a subject property."""

    is_undervalued: bool
    discount_percent: float
    estimated_market_rent: int
    actual_rent: float
    potential_monthly_savings: int
    confidence: int
    method: ValuationMethod | None
    comparables_used: int
    adjustments: list[AdjustmentEntry]
    rationale: str
    # Supplementary scoring (additive fields)
    annual_savings: int = 0
    market_position: str = "unknown"
    deal_score: int = 0
    grade: str = "D"
    distress_signals: list[str] = field(default_factory=list)
    undervaluation_category: str = "market_discount"
    subject: PropertyRecord | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "listing_id": self.subject.id if self.subject else "",
            "subject": self.subject.to_dict() if self.subject else None,
            "is_undervalued": self.is_undervalued,
            "discount_percent": self.discount_percent,
            "estimated_market_rent": self.estimated_market_rent,
            "actual_rent": self.actual_rent,
            "potential_monthly_savings": self.potential_monthly_savings,
            "annual_savings": self.annual_savings,
            "confidence": self.confidence,
            "method": self.method.value if self.method else None,
            "comparables_used": self.comparables_used,
            "adjustments": [a.to_dict() for a in self.adjustments],
            "rationale": self.rationale,
            "market_position": self.market_position,
            "deal_score": self.deal_score,
            "grade": self.grade,
            "distress_signals": self.distress_signals,
            "undervaluation_category": self.undervaluation_category,
        }
