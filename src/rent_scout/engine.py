"""Rental valuation engine: estimate market rent and decide undervaluation."""

from __future__ import annotations

from typing import Iterable

from loguru import logger

from .config import (
    get_adjustment_params,
    get_amenity_pricing_table,
    get_confidence_params,
    get_decision_policy,
    get_estimation_params,
    get_scoring_params,
    get_selection_params,
    load_config,
)
from .models import (
    AdjustmentEntry,
    AdjustmentParams,
    ConfidenceParams,
    DecisionPolicy,
    EstimationParams,
    PropertyRecord,
    ScoringParams,
    SelectionParams,
    UndervaluationVerdict,
    ValuationResult,
)
from .valuation.adjustments import AdjustmentEngine
from .valuation.amenities import AmenityExtractor
from .valuation.confidence import compute_confidence
from .valuation.estimator import BaseValueEstimator, round_half_up
from .valuation.pricing import AmenityPricingTable
from .valuation.scoring import (
    analyze_description,
    classify_market_position,
    compute_deal_score,
    grade_for,
)
from .valuation.selector import ComparableSelector


def _format_adjustments(adjustments: list[AdjustmentEntry]) -> str:
    return "; ".join(f"{a.category.value} {a.amount:+,.0f}" for a in adjustments)


class RentValuationEngine:
    """
    Comparable-based rental valuation.
    Select method -> estimate base -> adjust -> score confidence -> decide.

    Stateless between calls: every collaborator is built once from config
    and only read afterwards.
    """

    def __init__(
        self,
        config: dict | None = None,
        pricing: AmenityPricingTable | None = None,
        extractor: AmenityExtractor | None = None,
        selection: SelectionParams | None = None,
        estimation: EstimationParams | None = None,
        adjustments: AdjustmentParams | None = None,
        confidence: ConfidenceParams | None = None,
        policy: DecisionPolicy | None = None,
        scoring: ScoringParams | None = None,
    ) -> None:
        cfg = config if config is not None else load_config()
        self._config = cfg
        self.pricing = pricing or get_amenity_pricing_table(cfg)
        self.extractor = extractor or AmenityExtractor()
        self.selection = selection or get_selection_params(cfg)
        self.estimation = estimation or get_estimation_params(cfg)
        self.adjustment_params = adjustments or get_adjustment_params(cfg)
        self.confidence_params = confidence or get_confidence_params(cfg)
        self.policy = policy or get_decision_policy(cfg)
        self.scoring = scoring or get_scoring_params(cfg)

        self._selector = ComparableSelector(self.selection, self.extractor.extract_record)
        self._estimator = BaseValueEstimator(self.estimation)
        self._adjuster = AdjustmentEngine(self.adjustment_params, self.pricing, self.extractor)

    def select_method_and_estimate(
        self,
        subject: PropertyRecord,
        comparables: Iterable[PropertyRecord],
        area: str | None = None,
    ) -> ValuationResult:
        """Estimate market rent for *subject* from *comparables*.

        Insufficient data yields ``success=False`` with the shortfall in
        ``rationale``; nothing is raised.
        """
        selection = self._selector.select(subject, comparables)
        if not selection.success:
            return ValuationResult(success=False, rationale=selection.reason)

        method = selection.method
        comps = selection.comparables
        base = self._estimator.estimate(method, subject, comps)

        location = self.pricing.classify_location(area or subject.borough)
        adjustments = self._adjuster.apply(subject, comps, method, location, base.median_rent)
        total = round_half_up(sum(a.amount for a in adjustments), 2)
        base_value = round_half_up(base.value, 2)
        estimated = int(round_half_up(base_value + total))

        amenities = self.extractor.extract_record(subject)
        confidence, notes = compute_confidence(
            method, len(comps), subject, amenities, self.confidence_params
        )

        rationale = base.detail
        if adjustments:
            rationale += f"; adjustments: {_format_adjustments(adjustments)}"

        return ValuationResult(
            success=True,
            estimated_market_rent=estimated,
            base_market_rent=base_value,
            total_adjustments=total,
            adjustments=adjustments,
            method=method,
            confidence=confidence,
            comparables_used=len(comps),
            rationale=rationale,
            confidence_notes=notes,
        )

    def estimate_undervaluation(
        self,
        subject: PropertyRecord,
        comparables: Iterable[PropertyRecord],
        area: str | None = None,
        threshold: float | None = None,
    ) -> UndervaluationVerdict:
        """Decide whether the listed rent is at least *threshold* % below market.

        *threshold* defaults to the configured policy. The verdict also
        requires the confidence gate of the method used to be met.
        """
        if subject.monthly_rent <= 0:
            return self._not_evaluated(subject, "Cannot evaluate: subject has no listed rent")

        result = self.select_method_and_estimate(subject, comparables, area=area)
        if not result.success:
            return self._not_evaluated(subject, f"Cannot evaluate: {result.rationale}")

        method = result.method
        estimated = result.estimated_market_rent
        actual = subject.monthly_rent
        discount = 0.0
        if estimated > 0:
            discount = round_half_up((estimated - actual) / estimated * 100, 1)

        required = self.policy.threshold_for(method, threshold)
        gate = self.policy.confidence_gates[method]
        meets_threshold = discount >= required
        meets_gate = result.confidence >= gate
        is_undervalued = meets_threshold and meets_gate

        savings = int(round_half_up(estimated - actual))
        description = analyze_description(subject.description, self.scoring)
        amenities = self.extractor.extract_record(subject)
        deal_score = compute_deal_score(subject, amenities, discount, result.confidence, self.scoring)

        rationale = (
            f"{discount:.1f}% below estimated market rent of ${estimated:,} "
            f"({method.value}, {result.comparables_used} comparables, confidence {result.confidence}). "
            f"{result.rationale}. "
        )
        if is_undervalued:
            rationale += f"Meets {required:g}% threshold and {gate} confidence gate."
        elif not meets_threshold:
            rationale += f"Below {required:g}% threshold."
        else:
            rationale += f"Confidence {result.confidence} below {gate} gate for {method.value}."

        verdict = UndervaluationVerdict(
            is_undervalued=is_undervalued,
            discount_percent=discount,
            estimated_market_rent=estimated,
            actual_rent=actual,
            potential_monthly_savings=savings,
            confidence=result.confidence,
            method=method,
            comparables_used=result.comparables_used,
            adjustments=result.adjustments,
            rationale=rationale,
            annual_savings=savings * 12,
            market_position=classify_market_position(discount, required, self.policy),
            deal_score=deal_score,
            grade=grade_for(deal_score),
            distress_signals=description.distress_signals,
            undervaluation_category=description.category,
            subject=subject,
        )
        logger.debug(
            "{} {}: {:.1f}% vs ${:,} ({})",
            subject.id or subject.address or "subject",
            "UNDERVALUED" if is_undervalued else "not undervalued",
            discount,
            estimated,
            method.value,
        )
        return verdict

    def evaluate_many(
        self,
        subjects: Iterable[PropertyRecord],
        pool: list[PropertyRecord],
        area: str | None = None,
        threshold: float | None = None,
    ) -> list[UndervaluationVerdict]:
        """Evaluate each subject against *pool* minus itself, best discount first."""
        verdicts = []
        for subject in subjects:
            comps = [
                c for c in pool
                if c is not subject and not (subject.id and c.id == subject.id)
            ]
            verdict = self.estimate_undervaluation(subject, comps, area=area, threshold=threshold)
            if verdict.is_undervalued:
                logger.info(
                    "Undervalued: {} at ${:,.0f} ({:.1f}% below ${:,})",
                    subject.id or subject.address,
                    subject.monthly_rent,
                    verdict.discount_percent,
                    verdict.estimated_market_rent,
                )
            verdicts.append(verdict)
        return sorted(verdicts, key=lambda v: -v.discount_percent)

    def _not_evaluated(self, subject: PropertyRecord, rationale: str) -> UndervaluationVerdict:
        logger.debug("{}: {}", subject.id or "subject", rationale)
        return UndervaluationVerdict(
            is_undervalued=False,
            discount_percent=0.0,
            estimated_market_rent=0,
            actual_rent=subject.monthly_rent,
            potential_monthly_savings=0,
            confidence=0,
            method=None,
            comparables_used=0,
            adjustments=[],
            rationale=rationale,
            market_position="unknown",
            subject=subject,
        )
