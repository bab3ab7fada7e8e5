"""Listings from a local JSON export (array or {"listings": [...]})."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from loguru import logger

from ..models import PropertyRecord
from .base import ConnectorResult, ListingConnector


class JsonFileConnector(ListingConnector):
    """Reads listing dicts saved by a scraper or search API dump."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    @property
    def source_name(self) -> str:
        return "json_file"

    def fetch(self) -> ConnectorResult:
        """Parse the file; bad items are skipped and reported in ``errors``."""
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return self._failed(f"File not found: {self.path}")
        except (OSError, json.JSONDecodeError) as e:
            return self._failed(f"{self.path}: {e!s}")

        items = self._items(data)
        if items is None:
            return self._failed(f"{self.path}: expected a JSON array or an object with 'listings'")

        listings: list[PropertyRecord] = []
        raw: list[dict] = []
        errors: list[str] = []
        for i, item in enumerate(items):
            if not isinstance(item, dict):
                errors.append(f"item {i}: expected an object, got {type(item).__name__}")
                continue
            record = PropertyRecord.from_dict(item)
            if not record.id:
                record = PropertyRecord.from_dict({**item, "id": f"{self.path.stem}-{i}"})
            listings.append(record)
            raw.append(item)

        logger.debug("Loaded {} listings from {} ({} skipped)", len(listings), self.path, len(errors))
        return ConnectorResult(
            listings=listings,
            raw_payloads=raw,
            source=self.source_name,
            errors=errors,
        )

    @staticmethod
    def _items(data: Any) -> list | None:
        if isinstance(data, list):
            return data
        if isinstance(data, dict) and isinstance(data.get("listings"), list):
            return data["listings"]
        return None

    def _failed(self, message: str) -> ConnectorResult:
        return ConnectorResult(listings=[], raw_payloads=[], source=self.source_name, errors=[message])
