"""Tests for config loading and parameter builders."""

from pathlib import Path

import pytest

from rent_scout.config import (
    get_adjustment_params,
    get_amenity_pricing_table,
    get_confidence_params,
    get_decision_policy,
    get_estimation_params,
    get_scoring_params,
    get_selection_params,
    load_config,
)
from rent_scout.models import LocationClass, RuleKind, ValuationMethod


class TestLoadConfig:
    def test_repository_config(self, repo_config: dict) -> None:
        assert repo_config["decision"]["threshold"] == 25
        assert "rules" in repo_config["amenity_pricing"]

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    def test_env_var_path(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "custom.yaml"
        path.write_text("decision:\n  threshold: 12\n")
        monkeypatch.setenv("RENT_SCOUT_CONFIG", str(path))
        assert get_decision_policy(load_config()).threshold == 12

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(path) == {}


class TestBuilders:
    def test_defaults_from_empty_config(self) -> None:
        sel = get_selection_params({})
        assert [sel.min_samples[m] for m in ValuationMethod] == [3, 8, 12, 20]
        assert sel.max_rent == 50000
        assert sel.max_days_on_market == 120

        conf = get_confidence_params({})
        assert [conf.method_base[m] for m in ValuationMethod] == [95, 85, 75, 60]
        assert conf.sample_size_tiers == ((20, 5), (15, 3), (10, 1))

        policy = get_decision_policy({})
        assert policy.threshold == 25
        assert [policy.confidence_gates[m] for m in ValuationMethod] == [70, 70, 60, 50]

        est = get_estimation_params({})
        assert est.value_per_bath_step == 200
        assert est.estimated_area_by_bedrooms[4] == 1500

    def test_repository_config_matches_defaults(self, repo_config: dict) -> None:
        assert get_selection_params(repo_config) == get_selection_params({})
        assert get_confidence_params(repo_config) == get_confidence_params({})
        assert get_decision_policy(repo_config) == get_decision_policy({})
        assert get_adjustment_params(repo_config) == get_adjustment_params({})
        assert get_amenity_pricing_table(repo_config) == get_amenity_pricing_table({})

    def test_tiered_threshold_policy(self) -> None:
        policy = get_decision_policy({
            "decision": {"threshold_by_method": {"exact_match": 8, "bedroom_specific": 12}}
        })
        assert policy.threshold_for(ValuationMethod.EXACT_MATCH) == 8
        assert policy.threshold_for(ValuationMethod.BEDROOM_SPECIFIC) == 12
        assert policy.threshold_for(ValuationMethod.BED_BATH_SPECIFIC) == 25
        assert policy.threshold_for(ValuationMethod.EXACT_MATCH, 30) == 30

    def test_unknown_method_raises(self) -> None:
        with pytest.raises(ValueError, match="valuation method"):
            get_selection_params({"selection": {"min_samples": {"nearest_neighbor": 4}}})

    def test_key_amenities_list_form(self) -> None:
        sel = get_selection_params({"selection": {"key_amenities": ["gym", "pool"]}})
        assert dict(sel.key_amenities) == {"gym": ("gym",), "pool": ("pool",)}

    def test_pricing_rules_replace_defaults(self) -> None:
        table = get_amenity_pricing_table({
            "amenity_pricing": {
                "rules": {"views": {"kind": "percentage", "primary_metro": 10, "other_metro": 5}},
                "primary_metro_fragments": ["Downtown"],
            }
        })
        assert set(table.rules) == {"views"}
        assert table.rule_for("views", LocationClass.OTHER_METRO).kind is RuleKind.PERCENTAGE
        assert table.classify_location("Downtown") is LocationClass.PRIMARY_METRO

    def test_malformed_keyword_rules_raise(self) -> None:
        with pytest.raises(ValueError):
            get_adjustment_params({"adjustments": {"quality_rules": [{"phrases": ["nice"]}]}})

    def test_scoring_phrases_normalized(self) -> None:
        params = get_scoring_params({"scoring": {"distress_phrases": ["Must GO"], "premium_neighborhoods": ["Park-Slope"]}})
        assert params.distress_phrases == ("must go",)
        assert params.premium_neighborhoods == ("park slope",)
