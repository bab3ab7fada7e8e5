"""Export valuation verdicts to CSV and JSON."""

from __future__ import annotations

import csv
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ..models import UndervaluationVerdict


def _serialize(obj: Any) -> Any:
    """JSON serializer for datetime and other objects."""
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, (set, frozenset)):
        return sorted(obj)
    raise TypeError(f"Object of type {type(obj)} is not JSON serializable")


def export_csv(verdicts: list[UndervaluationVerdict], path: Path | str) -> None:
    """Export ranked verdicts to CSV."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fieldnames = [
        "rank",
        "listing_id",
        "address",
        "borough",
        "bedrooms",
        "bathrooms",
        "actual_rent",
        "estimated_market_rent",
        "discount_percent",
        "monthly_savings",
        "annual_savings",
        "method",
        "comparables_used",
        "confidence",
        "undervalued",
        "market_position",
        "deal_score",
        "grade",
        "rationale",
    ]

    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        for i, v in enumerate(verdicts, 1):
            subject = v.subject
            writer.writerow({
                "rank": i,
                "listing_id": subject.id if subject else "",
                "address": subject.address if subject else "",
                "borough": subject.borough if subject else "",
                "bedrooms": subject.bedrooms if subject else "",
                "bathrooms": subject.bathrooms if subject else "",
                "actual_rent": v.actual_rent,
                "estimated_market_rent": v.estimated_market_rent,
                "discount_percent": v.discount_percent,
                "monthly_savings": v.potential_monthly_savings,
                "annual_savings": v.annual_savings,
                "method": v.method.value if v.method else "",
                "comparables_used": v.comparables_used,
                "confidence": v.confidence,
                "undervalued": v.is_undervalued,
                "market_position": v.market_position,
                "deal_score": v.deal_score,
                "grade": v.grade,
                "rationale": v.rationale,
            })


def export_json(verdicts: list[UndervaluationVerdict], path: Path | str) -> None:
    """Export full valuation details to JSON."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    data = {
        "run_at": datetime.now(timezone.utc).isoformat(),
        "count": len(verdicts),
        "undervalued": sum(1 for v in verdicts if v.is_undervalued),
        "results": [v.to_dict() for v in verdicts],
    }

    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, default=_serialize)


def load_json(path: Path | str) -> dict[str, Any]:
    """Read a run written by ``export_json``."""
    with open(path, encoding="utf-8") as f:
        return json.load(f)
