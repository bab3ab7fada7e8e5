"""Pytest fixtures."""

from pathlib import Path
from typing import Callable

import pytest

from rent_scout.config import load_config
from rent_scout.engine import RentValuationEngine
from rent_scout.models import PropertyRecord

REPO_CONFIG = Path(__file__).resolve().parent.parent / "config.yaml"


def _record(
    rent: float = 3000,
    bedrooms: int | None = 1,
    bathrooms: float | None = 1.0,
    **kwargs,
) -> PropertyRecord:
    return PropertyRecord(monthly_rent=rent, bedrooms=bedrooms, bathrooms=bathrooms, **kwargs)


@pytest.fixture
def make_record() -> Callable[..., PropertyRecord]:
    """Factory for PropertyRecords with one-bed/one-bath defaults."""
    return _record


@pytest.fixture
def repo_config() -> dict:
    return load_config(REPO_CONFIG)


@pytest.fixture
def engine(repo_config: dict) -> RentValuationEngine:
    """Engine built from the repository config.yaml."""
    return RentValuationEngine(config=repo_config)


@pytest.fixture
def comparable_pool() -> list[PropertyRecord]:
    """Ten one-bed/one-bath Astoria listings with median rent 3500."""
    rents = [3000, 3100, 3200, 3300, 3400, 3600, 3700, 3800, 3900, 4000]
    return [
        _record(rent=r, borough="Astoria", id=f"comp-{i}", address=f"{i} 31st St")
        for i, r in enumerate(rents)
    ]
