"""Configuration loader."""

from __future__ import annotations

import os
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml

from .models import (
    AdjustmentParams,
    AreaRate,
    ConfidenceParams,
    DecisionPolicy,
    EstimationParams,
    ScoringParams,
    SelectionParams,
    ValuationMethod,
)
from .valuation.keywords import normalize_text, rules_from_config
from .valuation.pricing import DEFAULT_AMENITY_PRICING, AmenityPricingTable
from .valuation.scoring import (
    DEFAULT_DISTRESS_PHRASES,
    DEFAULT_PREMIUM_NEIGHBORHOODS,
    DEFAULT_RENOVATION_PHRASES,
    DEFAULT_URGENCY_PHRASES,
)

_DEFAULT_MIN_SAMPLES = {
    ValuationMethod.EXACT_MATCH: 3,
    ValuationMethod.BED_BATH_SPECIFIC: 8,
    ValuationMethod.BEDROOM_SPECIFIC: 12,
    ValuationMethod.AREA_RATE_FALLBACK: 20,
}

_DEFAULT_METHOD_BASE = {
    ValuationMethod.EXACT_MATCH: 95,
    ValuationMethod.BED_BATH_SPECIFIC: 85,
    ValuationMethod.BEDROOM_SPECIFIC: 75,
    ValuationMethod.AREA_RATE_FALLBACK: 60,
}

_DEFAULT_CONFIDENCE_GATES = {
    ValuationMethod.EXACT_MATCH: 70,
    ValuationMethod.BED_BATH_SPECIFIC: 70,
    ValuationMethod.BEDROOM_SPECIFIC: 60,
    ValuationMethod.AREA_RATE_FALLBACK: 50,
}

# Empty: exact match is the bed/bath criterion unless key groups are configured.
_DEFAULT_KEY_AMENITIES: dict[str, tuple[str, ...]] = {}

_DEFAULT_AREA_BY_BEDROOMS = {0: 450.0, 1: 650.0, 2: 900.0, 3: 1200.0, 4: 1500.0}

_DEFAULT_AREA_RATES = {
    "studio": {"over": 2.0, "under": 3.0},
    "one_bed": {"over": 1.5, "under": 2.5},
    "two_bed": {"over": 1.25, "under": 2.0},
    "three_plus": {"over": 1.0, "under": 1.5},
}

_DEFAULT_QUALITY_RULES: list[dict[str, Any]] = [
    {"name": "renovated", "phrases": ["newly renovated", "gut renovated", "fully renovated", "renovated"], "amount": 150},
    {"name": "luxury", "phrases": ["luxury", "high-end", "high end"], "amount": 200},
    {"name": "hardwood_floors", "phrases": ["hardwood"], "amount": 75},
    {"name": "needs_work", "phrases": ["needs work", "needs updating", "tlc"], "amount": -200},
    {"name": "as_is", "phrases": ["as-is", "as is condition", "sold as is", "rented as is"], "amount": -150},
    {"name": "fixer", "phrases": ["fixer", "handyman special"], "amount": -250},
]

_DEFAULT_MICRO_LOCATION_RULES: list[dict[str, Any]] = [
    {"name": "quiet_street", "phrases": ["quiet", "tree-lined", "tree lined"], "amount": 100},
    {"name": "busy_street", "phrases": ["busy street", "busy avenue", "noisy", "heavy traffic"], "amount": -100},
    {
        "name": "ground_floor",
        "phrases": ["ground floor", "ground-floor", "street level"],
        "unless": ["garden"],
        "amount": -75,
    },
]

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config.yaml"


def load_config(config_path: Path | str | None = None) -> dict[str, Any]:
    """Load config from YAML file (``RENT_SCOUT_CONFIG`` overrides the default path)."""
    env_path = os.environ.get("RENT_SCOUT_CONFIG")
    path = Path(config_path or env_path or DEFAULT_CONFIG_PATH)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _method_map(raw: Any, defaults: dict[ValuationMethod, Any], cast: type) -> MappingProxyType:
    """Merge a {method name: value} config section over defaults."""
    merged = dict(defaults)
    if isinstance(raw, dict):
        for key, value in raw.items():
            merged[ValuationMethod.from_string(str(key))] = cast(value)
    return MappingProxyType(merged)


def get_amenity_pricing_table(config: dict[str, Any]) -> AmenityPricingTable:
    """Build the amenity pricing table (config rules replace the default table)."""
    pricing = config.get("amenity_pricing", {}) or {}
    rules = pricing.get("rules")
    if not rules:
        rules = {
            name: {"kind": kind, "primary_metro": primary, "other_metro": other}
            for name, (kind, primary, other) in DEFAULT_AMENITY_PRICING.items()
        }
    return AmenityPricingTable.from_dict(rules, pricing.get("primary_metro_fragments"))


def get_selection_params(config: dict[str, Any]) -> SelectionParams:
    """Extract comparable-selection params from config."""
    sel = config.get("selection", {}) or {}
    key_cfg = sel.get("key_amenities")
    if isinstance(key_cfg, dict):
        key_amenities = {str(k): tuple(str(m) for m in (v or [k])) for k, v in key_cfg.items()}
    elif isinstance(key_cfg, list):
        key_amenities = {str(k): (str(k),) for k in key_cfg}
    else:
        key_amenities = dict(_DEFAULT_KEY_AMENITIES)
    return SelectionParams(
        min_samples=_method_map(sel.get("min_samples"), _DEFAULT_MIN_SAMPLES, int),
        exact_bath_tolerance=float(sel.get("exact_bath_tolerance", 0.5)),
        bed_bath_tolerance=float(sel.get("bed_bath_tolerance", 0.5)),
        key_amenities=MappingProxyType(key_amenities),
        max_rent=float(sel.get("max_rent", 50000)),
        max_days_on_market=int(sel.get("max_days_on_market", 120)),
    )


def get_estimation_params(config: dict[str, Any]) -> EstimationParams:
    """Extract base-value estimation params from config."""
    est = config.get("estimation", {}) or {}
    areas = est.get("estimated_area_by_bedrooms") or _DEFAULT_AREA_BY_BEDROOMS
    return EstimationParams(
        bath_step=float(est.get("bath_step", 0.5)),
        value_per_bath_step=float(est.get("value_per_bath_step", 200)),
        estimated_area_by_bedrooms=MappingProxyType({int(k): float(v) for k, v in areas.items()}),
    )


def get_adjustment_params(config: dict[str, Any]) -> AdjustmentParams:
    """Extract adjustment-layer params from config."""
    adj = config.get("adjustments", {}) or {}
    rates_cfg = adj.get("area_rates") or _DEFAULT_AREA_RATES
    area_rates = {
        str(category): AreaRate(over=float(r.get("over", 0)), under=float(r.get("under", 0)))
        for category, r in rates_cfg.items()
    }
    return AdjustmentParams(
        area_rates=MappingProxyType(area_rates),
        quality_rules=rules_from_config(adj.get("quality_rules") or _DEFAULT_QUALITY_RULES),
        micro_location_rules=rules_from_config(
            adj.get("micro_location_rules") or _DEFAULT_MICRO_LOCATION_RULES
        ),
    )


def get_confidence_params(config: dict[str, Any]) -> ConfidenceParams:
    """Extract confidence scoring params from config."""
    conf = config.get("confidence", {}) or {}
    tiers_cfg = conf.get("sample_size_tiers") or {20: 5, 15: 3, 10: 1}
    tiers = tuple(sorted(((int(k), int(v)) for k, v in tiers_cfg.items()), reverse=True))
    return ConfidenceParams(
        method_base=_method_map(conf.get("method_base"), _DEFAULT_METHOD_BASE, int),
        sample_size_tiers=tiers,
        small_sample_below=int(conf.get("small_sample_below", 5)),
        small_sample_penalty=int(conf.get("small_sample_penalty", 10)),
        known_area_bonus=int(conf.get("known_area_bonus", 5)),
        amenities_bonus=int(conf.get("amenities_bonus", 5)),
    )


def get_decision_policy(config: dict[str, Any]) -> DecisionPolicy:
    """Extract undervaluation threshold and confidence gates from config."""
    dec = config.get("decision", {}) or {}
    return DecisionPolicy(
        threshold=float(dec.get("threshold", 25)),
        confidence_gates=_method_map(dec.get("confidence_gates"), _DEFAULT_CONFIDENCE_GATES, int),
        threshold_by_method=_method_map(dec.get("threshold_by_method"), {}, float),
        moderate_threshold=float(dec.get("moderate_threshold", 5)),
        overvalued_threshold=float(dec.get("overvalued_threshold", -5)),
    )


def get_scoring_params(config: dict[str, Any]) -> ScoringParams:
    """Extract deal-score params from config."""
    sc = config.get("scoring", {}) or {}

    def phrases(key: str, default: tuple[str, ...]) -> tuple[str, ...]:
        values = sc.get(key)
        return tuple(normalize_text(v) for v in values) if values else default

    return ScoringParams(
        premium_neighborhoods=tuple(
            normalize_text(n.replace("-", " "))
            for n in (sc.get("premium_neighborhoods") or DEFAULT_PREMIUM_NEIGHBORHOODS)
        ),
        distress_phrases=phrases("distress_phrases", DEFAULT_DISTRESS_PHRASES),
        renovation_phrases=phrases("renovation_phrases", DEFAULT_RENOVATION_PHRASES),
        urgency_phrases=phrases("urgency_phrases", DEFAULT_URGENCY_PHRASES),
    )
