"""Listing filters for area grouping, keyword matching and rent constraints."""

from __future__ import annotations

from collections import defaultdict

from .models import PropertyRecord


def _area_key(label: str) -> str:
    return " ".join(label.lower().replace("-", " ").replace("_", " ").split())


def filter_listings(
    records: list[PropertyRecord],
    area: str | None = None,
    include_keywords: list[str] | None = None,
    exclude_keywords: list[str] | None = None,
    max_rent: float | None = None,
) -> list[PropertyRecord]:
    """
    Filter listings before they reach the engine.
    - Same area when given (case and separator insensitive)
    - Must match at least one include keyword (in description or address)
    - Must not match any exclude keyword
    - Rent must be <= max_rent
    """
    result = []
    target = _area_key(area) if area else None
    for r in records:
        if target is not None and _area_key(r.borough) != target:
            continue
        if max_rent is not None and r.monthly_rent > max_rent:
            continue
        combined = f"{r.description} {r.address}".lower()
        if exclude_keywords:
            if any(kw.lower() in combined for kw in exclude_keywords):
                continue
        if include_keywords:
            if not any(kw.lower() in combined for kw in include_keywords):
                continue
        result.append(r)
    return result


def group_by_area(records: list[PropertyRecord]) -> dict[str, list[PropertyRecord]]:
    """Group records by normalized borough/neighborhood; unlabeled ones go under ''."""
    groups: dict[str, list[PropertyRecord]] = defaultdict(list)
    for r in records:
        groups[_area_key(r.borough)].append(r)
    return dict(groups)
