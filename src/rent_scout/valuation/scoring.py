"""Deal scoring, letter grade, market position and distress signals."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..models import DecisionPolicy, PropertyRecord, ScoringParams
from .keywords import normalize_text

DEFAULT_PREMIUM_NEIGHBORHOODS: tuple[str, ...] = (
    "west village",
    "soho",
    "tribeca",
    "dumbo",
    "williamsburg",
    "long island city",
)

DEFAULT_DISTRESS_PHRASES: tuple[str, ...] = (
    "motivated", "must rent", "as-is", "as is", "needs work",
    "fixer-upper", "fixer upper", "handyman special", "tlc", "needs updating",
    "price reduced", "reduced price", "bring offers", "make offer", "obo",
    "priced to rent", "quick move", "immediate occupancy", "needs renovation",
    "original condition",
)

DEFAULT_RENOVATION_PHRASES: tuple[str, ...] = ("needs work", "fixer", "tlc", "updating", "needs renovation")

DEFAULT_URGENCY_PHRASES: tuple[str, ...] = ("must rent", "motivated", "quick move", "asap", "immediate occupancy")

_GRADES: tuple[tuple[int, str], ...] = (
    (85, "A+"),
    (75, "A"),
    (65, "B+"),
    (55, "B"),
    (45, "C+"),
    (35, "C"),
)


@dataclass
class DescriptionAnalysis:
    """Distress phrases found in a listing description."""

    distress_signals: list[str] = field(default_factory=list)
    needs_renovation: bool = False
    is_urgent: bool = False

    @property
    def category(self) -> str:
        if self.needs_renovation:
            return "needs_renovation"
        if self.is_urgent:
            return "seller_urgency"
        if self.distress_signals:
            return "distress_listing"
        return "market_discount"


def analyze_description(description: str | None, params: ScoringParams) -> DescriptionAnalysis:
    text = normalize_text(description)
    return DescriptionAnalysis(
        distress_signals=[p for p in params.distress_phrases if p in text],
        needs_renovation=any(p in text for p in params.renovation_phrases),
        is_urgent=any(p in text for p in params.urgency_phrases),
    )


def classify_market_position(discount_percent: float, threshold: float, policy: DecisionPolicy) -> str:
    if discount_percent >= threshold:
        return "undervalued"
    if discount_percent >= policy.moderate_threshold:
        return "moderately_undervalued"
    if discount_percent >= policy.overvalued_threshold:
        return "market_rate"
    return "overvalued"


def grade_for(score: int) -> str:
    for minimum, grade in _GRADES:
        if score >= minimum:
            return grade
    return "D"


def compute_deal_score(
    subject: PropertyRecord,
    amenities: frozenset[str],
    discount_percent: float,
    confidence: int,
    params: ScoringParams,
) -> int:
    """Opportunity score 0-100 (discount, freshness, unit quality, building, fee)."""
    score = min(max(discount_percent, 0) * 2.5, 50)

    dom = subject.days_on_market
    if dom <= 3:
        score += 15
    elif dom <= 14:
        score += 10
    elif dom <= 30:
        score += 5

    if len(subject.description) > 100:
        score += 3
    if (subject.bedrooms or 0) >= 2:
        score += 5
    if (subject.bathrooms or 0) >= 2:
        score += 3
    if subject.area_sqft >= 800:
        score += 8
    if len(amenities) >= 5:
        score += 5

    if amenities & {"doorman", "full_time_doorman"}:
        score += 8
    if "elevator" in amenities:
        score += 5
    if amenities & {"laundry_in_unit", "laundry_in_building"}:
        score += 3
    if "gym" in amenities:
        score += 4
    if "pets_allowed" in amenities:
        score += 2
    if subject.no_fee:
        score += 10

    label = normalize_text(subject.borough.replace("-", " "))
    if label and any(n in label for n in params.premium_neighborhoods):
        score += 10

    if confidence >= 90:
        score += 5
    elif confidence < 70:
        score -= 5

    return int(min(100, max(0, round(score))))
