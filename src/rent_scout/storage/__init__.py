"""Export of valuation verdicts."""

from .export import export_csv, export_json, load_json

__all__ = [
    "export_csv",
    "export_json",
    "load_json",
]
