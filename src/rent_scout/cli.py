"""CLI for the rent-scout undervalued rental finder."""

from __future__ import annotations

import json
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from .config import load_config
from .connectors import JsonFileConnector
from .engine import RentValuationEngine
from .filters import filter_listings, group_by_area
from .storage import export_csv, export_json, load_json

app = typer.Typer(
    name="rent-scout",
    help="Find rentals listed well below comparable market rent",
)
console = Console()


def _configure_logging(verbose: bool) -> None:
    """Route loguru to stderr at the requested level."""
    level = "DEBUG" if verbose else os.environ.get("RENT_SCOUT_LOG_LEVEL", "WARNING")
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format="{time:HH:mm:ss} | {level: <7} | {message}")


def _run_id() -> str:
    """Generate run ID from timestamp."""
    return datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")


def _display_report(
    results: list,
    run_id: str,
    limit: int = 20,
    json_path: Optional[Path] = None,
) -> None:
    """Display ranked verdicts table. Results can be UndervaluationVerdict or dict (from JSON)."""
    rows = [r.to_dict() if hasattr(r, "to_dict") else r for r in results]

    if not rows:
        console.print("[yellow]No results to display.[/yellow]")
        return

    table = Table(title=f"Rental Verdicts (Run {run_id})")
    table.add_column("Rank", style="dim")
    table.add_column("Listing", style="cyan")
    table.add_column("Area", style="dim")
    table.add_column("Beds", justify="right")
    table.add_column("Rent", justify="right")
    table.add_column("Market", justify="right")
    table.add_column("Discount", justify="right")
    table.add_column("Conf", justify="right")
    table.add_column("Method", style="dim")
    table.add_column("Grade", justify="center")
    table.add_column("Deal", justify="center")

    for i, r in enumerate(rows[:limit], 1):
        subject = r.get("subject") or {}
        label = subject.get("address") or r.get("listing_id", "")
        label_display = label[:30] + "..." if len(label) > 30 else label
        beds = subject.get("bedrooms")
        table.add_row(
            str(i),
            label_display,
            subject.get("borough", ""),
            "" if beds is None else str(beds),
            f"${r.get('actual_rent', 0):,.0f}",
            f"${r.get('estimated_market_rent', 0):,.0f}",
            f"{r.get('discount_percent', 0):.1f}%",
            str(r.get("confidence", 0)),
            r.get("method") or "-",
            r.get("grade", ""),
            "✓" if r.get("is_undervalued") else "✗",
        )

    console.print(table)
    if json_path:
        console.print(f"\n[dim]Full details: {json_path}[/dim]")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Rental valuation against comparable listings."""
    _configure_logging(verbose)


@app.command()
def evaluate(
    listings_path: Path = typer.Argument(..., help="JSON file of listings (subjects and comparables)"),
    area: Optional[str] = typer.Option(None, "--area", "-a", help="Only evaluate listings in this borough/neighborhood"),
    threshold: Optional[float] = typer.Option(None, "--threshold", "-t", help="Discount percent required (default: config)"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config.yaml"),
    out_dir: Path = typer.Option(Path("output"), "--out", "-o", help="Output directory"),
    show_all: bool = typer.Option(False, "--all", help="Report every listing, not only undervalued ones"),
    save_raw: bool = typer.Option(False, "--raw", help="Also save the raw listing payloads"),
) -> Optional[str]:
    """Evaluate every listing against the other listings in its area."""
    try:
        cfg = load_config(config_path)
        engine = RentValuationEngine(config=cfg)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Config error: {e}[/red]")
        raise typer.Exit(1)

    result = JsonFileConnector(listings_path).fetch()
    for err in result.errors:
        console.print(f"[yellow]Warning: {err}[/yellow]")
    if not result.listings:
        console.print("[red]No listings loaded.[/red]")
        raise typer.Exit(1)

    if area:
        groups = {area: filter_listings(result.listings, area=area)}
    else:
        groups = group_by_area(result.listings)

    verdicts = []
    for label, pool in groups.items():
        logger.debug("Evaluating {} listings in {!r}", len(pool), label)
        verdicts.extend(engine.evaluate_many(pool, pool, area=area, threshold=threshold))
    verdicts.sort(key=lambda v: -v.discount_percent)

    ranked = verdicts if show_all else [v for v in verdicts if v.is_undervalued]

    run_id = _run_id()
    if save_raw:
        # Save raw payloads for debugging
        raw_dir = out_dir / "raw"
        raw_dir.mkdir(parents=True, exist_ok=True)
        raw_file = raw_dir / f"listings_{run_id}.json"
        with open(raw_file, "w", encoding="utf-8") as f:
            json.dump(result.raw_payloads, f, indent=2, default=str)
        console.print(f"[dim]Raw payloads saved to {raw_file}[/dim]")

    csv_path = out_dir / f"verdicts_{run_id}.csv"
    json_path = out_dir / f"verdicts_{run_id}.json"
    export_csv(ranked, csv_path)
    export_json(ranked, json_path)

    found = sum(1 for v in verdicts if v.is_undervalued)
    console.print(
        f"[green]Evaluated {len(verdicts)} listings, {found} undervalued. Run ID: {run_id}[/green]"
    )
    console.print(f"  CSV:  {csv_path}")
    console.print(f"  JSON: {json_path}")
    if ranked:
        _display_report(ranked, run_id, limit=20)
    return run_id


@app.command()
def report(
    run_id: Optional[str] = typer.Option(None, "--run", "-r", help="Specific run ID (default: latest)"),
    limit: int = typer.Option(20, "--limit", "-n", help="Max listings to show"),
    out_dir: Path = typer.Option(Path("output"), "--out", "-o", help="Output directory"),
) -> None:
    """Display a saved run."""
    if not run_id:
        jsons = sorted(out_dir.glob("verdicts_*.json"), reverse=True)
        if not jsons:
            console.print("[yellow]No report files found. Run 'evaluate' first.[/yellow]")
            raise typer.Exit(1)
        json_path = jsons[0]
        run_id = json_path.stem.replace("verdicts_", "")
    else:
        json_path = out_dir / f"verdicts_{run_id}.json"
        if not json_path.exists():
            console.print(f"[red]Report not found: {json_path}[/red]")
            raise typer.Exit(1)

    try:
        data = load_json(json_path)
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[red]Could not read report {json_path}: {e}[/red]")
        raise typer.Exit(1)
    if not isinstance(data, dict):
        console.print(f"[red]Could not read report {json_path}: expected a JSON object[/red]")
        raise typer.Exit(1)

    results = data.get("results", [])
    if not results:
        console.print("[yellow]No results in report.[/yellow]")
        return

    _display_report(results, run_id, limit=limit, json_path=json_path)


if __name__ == "__main__":
    app()
