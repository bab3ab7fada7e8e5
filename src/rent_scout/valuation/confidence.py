"""Confidence score (0-100) for a valuation."""

from __future__ import annotations

from ..models import ConfidenceParams, PropertyRecord, ValuationMethod


def compute_confidence(
    method: ValuationMethod,
    comparables_used: int,
    subject: PropertyRecord,
    subject_amenities: frozenset[str],
    params: ConfidenceParams,
) -> tuple[int, list[str]]:
    """Compute confidence score (0-100) and explanatory notes.

    Rules:
    - Start from the method base (95 / 85 / 75 / 60 by default).
    - Sample size: first matching tier bonus (>=20 +5, >=15 +3, >=10 +1),
      or the small-sample penalty below 5 (-10). 5-9 comparables: no change.
    - Completeness: +5 known area, +5 at least one amenity.
    """
    base = params.method_base[method]
    score = base
    notes: list[str] = [f"baseline {base} {method.value}"]

    for minimum, bonus in params.sample_size_tiers:
        if comparables_used >= minimum:
            score += bonus
            notes.append(f"{bonus:+d} comparables>={minimum}")
            break
    else:
        if comparables_used < params.small_sample_below:
            score -= params.small_sample_penalty
            notes.append(f"-{params.small_sample_penalty} comparables<{params.small_sample_below}")

    if subject.has_known_area:
        score += params.known_area_bonus
        notes.append(f"+{params.known_area_bonus} known_area")
    if subject_amenities:
        score += params.amenities_bonus
        notes.append(f"+{params.amenities_bonus} has_amenities")

    score = int(max(0, min(100, score)))
    return score, notes
