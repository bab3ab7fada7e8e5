"""Amenity extraction from structured amenity lists and free-text descriptions.

Comparable listings have patchy structured amenity coverage, so the
description is mined as a second source and the two are merged.
"""

from __future__ import annotations

from typing import Iterable

from ..models import KeywordRule, PropertyRecord, normalize_amenity
from .keywords import apply_supersedes, match_rules

# Synonym groups for structured list entries (entries are matched one at a time).
DEFAULT_SYNONYM_RULES: tuple[KeywordRule, ...] = (
    KeywordRule(
        "full_time_doorman",
        ("full time doorman", "fulltime doorman", "24 hour doorman", "24 hr doorman", "24 7 doorman"),
        supersedes=("doorman",),
    ),
    KeywordRule("doorman", ("doorman", "door man")),
    KeywordRule("concierge", ("concierge",)),
    KeywordRule("elevator", ("elevator", "lift")),
    KeywordRule("gym", ("gym", "fitness")),
    KeywordRule("pool", ("pool",)),
    KeywordRule("roof_deck", ("roof deck", "roofdeck", "rooftop", "roof top")),
    KeywordRule(
        "laundry_in_unit",
        ("washer dryer", "w d", "in unit laundry", "laundry in unit", "washer"),
        supersedes=("laundry_in_building",),
    ),
    KeywordRule("laundry_in_building", ("laundry",)),
    KeywordRule("dishwasher", ("dishwasher",)),
    KeywordRule("central_air", ("central air", "central ac", "central a c")),
    KeywordRule("parking", ("parking", "garage")),
    KeywordRule("bike_room", ("bike room", "bike storage", "bicycle")),
    KeywordRule("storage", ("storage",), unless=("bike storage",)),
    KeywordRule("live_in_super", ("live in super", "super on site", "onsite super")),
    KeywordRule("fireplace", ("fireplace",)),
    KeywordRule("pets_allowed", ("pets allowed", "pet friendly", "dogs allowed", "cats allowed", "pets"), unless=("no pets",)),
    KeywordRule("balcony", ("balcony",)),
    KeywordRule("terrace", ("terrace",)),
    KeywordRule("private_outdoor_space", ("private outdoor space", "outdoor space")),
    KeywordRule("garden", ("garden", "backyard", "back yard")),
    KeywordRule("views", ("views", "view", "skyline")),
)

# Description phrases mapped onto the same vocabulary (most specific first).
DEFAULT_DESCRIPTION_RULES: tuple[KeywordRule, ...] = (
    KeywordRule(
        "full_time_doorman",
        ("24/7 doorman", "24 hour doorman", "24-hour doorman", "full-time doorman", "full time doorman"),
        supersedes=("doorman",),
    ),
    KeywordRule("doorman", ("doorman",)),
    KeywordRule("concierge", ("concierge",)),
    KeywordRule("elevator", ("elevator",)),
    KeywordRule("gym", ("fitness center", "fitness centre", "gym")),
    KeywordRule("pool", ("swimming pool", "pool")),
    KeywordRule("roof_deck", ("roof deck", "roofdeck", "rooftop deck", "rooftop terrace", "roof terrace")),
    KeywordRule(
        "laundry_in_unit",
        (
            "washer/dryer",
            "washer and dryer",
            "washer dryer",
            "in-unit laundry",
            "in unit laundry",
            "w/d in unit",
        ),
        supersedes=("laundry_in_building",),
    ),
    KeywordRule("laundry_in_building", ("laundry room", "laundry in building", "on-site laundry", "laundry")),
    KeywordRule("dishwasher", ("dishwasher",)),
    KeywordRule("central_air", ("central air", "central a/c", "central ac")),
    KeywordRule("parking", ("parking", "garage")),
    KeywordRule("live_in_super", ("live-in super", "live in super")),
    KeywordRule("fireplace", ("fireplace",)),
    KeywordRule("pets_allowed", ("pet friendly", "pet-friendly", "pets allowed", "pets welcome")),
    KeywordRule("balcony", ("balcony",)),
    KeywordRule("terrace", ("private terrace", "terrace"), unless=("roof terrace", "rooftop terrace")),
    KeywordRule("private_outdoor_space", ("private outdoor space", "private outdoor")),
    KeywordRule("garden", ("private garden", "backyard", "back yard", "garden")),
    KeywordRule("views", ("skyline view", "city view", "river view", "water view", "panoramic view")),
)


class AmenityExtractor:
    """Merges structured amenities and description keywords into one set."""

    def __init__(
        self,
        synonym_rules: Iterable[KeywordRule] = DEFAULT_SYNONYM_RULES,
        description_rules: Iterable[KeywordRule] = DEFAULT_DESCRIPTION_RULES,
    ) -> None:
        self.synonym_rules = tuple(synonym_rules)
        self.description_rules = tuple(description_rules)
        self._vocabulary = {r.name for r in self.synonym_rules} | {r.name for r in self.description_rules}

    def normalize_list(self, amenities: Iterable[str]) -> set[str]:
        """Map structured entries onto the vocabulary.

        Entries that match no synonym group are kept in normalized form; the
        pricing table ignores them.
        """
        result: set[str] = set()
        for entry in amenities:
            ident = normalize_amenity(entry)
            if not ident:
                continue
            if ident in self._vocabulary:
                result.add(ident)
                continue
            matched = match_rules(ident.replace("_", " "), self.synonym_rules)
            if matched:
                result.update(rule.name for rule in matched)
            else:
                result.add(ident)
        return result

    def from_description(self, description: str | None) -> set[str]:
        return {rule.name for rule in match_rules(description, self.description_rules)}

    def extract(self, amenities: Iterable[str], description: str | None) -> frozenset[str]:
        merged = self.normalize_list(amenities) | self.from_description(description)
        merged = apply_supersedes(merged, self.synonym_rules + self.description_rules)
        return frozenset(merged)

    def extract_record(self, record: PropertyRecord) -> frozenset[str]:
        return self.extract(record.amenities, record.description)
