"""Tests for the JSON file connector."""

import json
from pathlib import Path

from rent_scout.connectors import JsonFileConnector


def _write(path: Path, data) -> Path:
    path.write_text(json.dumps(data))
    return path


class TestJsonFileConnector:
    def test_reads_array(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "listings.json", [
            {"id": "a", "monthlyRent": 3000, "bedrooms": 1, "bathrooms": 1, "borough": "Astoria"},
            {"id": "b", "price": "$2,750", "beds": 1, "baths": 1, "neighborhood": "Astoria"},
        ])
        result = JsonFileConnector(path).fetch()
        assert result.errors == []
        assert result.source == "json_file"
        assert [r.id for r in result.listings] == ["a", "b"]
        assert result.listings[1].monthly_rent == 2750
        assert len(result.raw_payloads) == 2

    def test_reads_listings_object(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "dump.json", {"listings": [{"id": "x", "rent": 2000}]})
        result = JsonFileConnector(path).fetch()
        assert [r.id for r in result.listings] == ["x"]

    def test_assigns_ids_when_missing(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "dump.json", [{"rent": 2000}, {"rent": 2100}])
        result = JsonFileConnector(path).fetch()
        assert [r.id for r in result.listings] == ["dump-0", "dump-1"]

    def test_skips_malformed_items(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "listings.json", [{"id": "ok", "rent": 2000}, "garbage", 42])
        result = JsonFileConnector(path).fetch()
        assert [r.id for r in result.listings] == ["ok"]
        assert len(result.errors) == 2
        assert "item 1" in result.errors[0]

    def test_missing_file(self, tmp_path: Path) -> None:
        result = JsonFileConnector(tmp_path / "none.json").fetch()
        assert result.listings == []
        assert "not found" in result.errors[0]

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        result = JsonFileConnector(path).fetch()
        assert result.listings == []
        assert len(result.errors) == 1

    def test_wrong_shape(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "shape.json", {"results": []})
        result = JsonFileConnector(path).fetch()
        assert result.listings == []
        assert "expected a JSON array" in result.errors[0]
