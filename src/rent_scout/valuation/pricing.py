"""Amenity pricing table and primary/other metro location classifier."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from ..models import AmenityRule, LocationClass, RuleKind
from .keywords import normalize_text

# Name fragments of the dense urban core (substring match on borough/neighborhood).
DEFAULT_PRIMARY_METRO_FRAGMENTS: tuple[str, ...] = (
    "manhattan",
    "soho",
    "noho",
    "tribeca",
    "west village",
    "east village",
    "greenwich village",
    "lower east side",
    "financial district",
    "battery park",
    "chinatown",
    "little italy",
    "nolita",
    "two bridges",
    "midtown",
    "chelsea",
    "gramercy",
    "kips bay",
    "murray hill",
    "hells kitchen",
    "hell's kitchen",
    "upper east side",
    "upper west side",
    "morningside heights",
    "hamilton heights",
    "washington heights",
    "inwood",
    "harlem",
    "flatiron",
    "civic center",
    "hudson square",
    "hudson yards",
    "nomad",
    "stuyvesant town",
    "yorkville",
    "lenox hill",
    "lincoln square",
    "turtle bay",
    "roosevelt island",
)

# amenity -> (kind, primary metro magnitude, other metro magnitude)
DEFAULT_AMENITY_PRICING: dict[str, tuple[str, float, float]] = {
    "full_time_doorman": ("fixed", 450, 225),
    "doorman": ("fixed", 300, 150),
    "concierge": ("fixed", 150, 75),
    "elevator": ("fixed", 200, 100),
    "gym": ("fixed", 150, 100),
    "pool": ("fixed", 150, 100),
    "roof_deck": ("fixed", 200, 125),
    "laundry_in_unit": ("fixed", 150, 100),
    "laundry_in_building": ("fixed", 50, 40),
    "dishwasher": ("fixed", 75, 50),
    "central_air": ("fixed", 75, 50),
    "parking": ("fixed", 350, 150),
    "storage": ("fixed", 50, 40),
    "bike_room": ("fixed", 25, 20),
    "live_in_super": ("fixed", 50, 40),
    "fireplace": ("fixed", 100, 75),
    "pets_allowed": ("fixed", 50, 50),
    "balcony": ("fixed", 300, 150),
    "terrace": ("percentage", 8, 6),
    "private_outdoor_space": ("percentage", 5, 4),
    "garden": ("percentage", 5, 6),
    "views": ("percentage", 5, 3),
}


def _build_rule(location: LocationClass, kind: str, magnitude: Any) -> AmenityRule:
    try:
        rule_kind = RuleKind(str(kind).lower())
    except ValueError:
        raise ValueError(f"Unknown amenity rule kind: {kind!r}") from None
    return AmenityRule(location_class=location, kind=rule_kind, magnitude=float(magnitude))


@dataclass(frozen=True)
class AmenityPricingTable:
    """Read-only amenity -> {location class -> rule} mapping.

    Safe to share between engines and threads.
    """

    rules: Mapping[str, Mapping[LocationClass, AmenityRule]]
    primary_metro_fragments: tuple[str, ...] = DEFAULT_PRIMARY_METRO_FRAGMENTS

    @classmethod
    def from_dict(
        cls,
        rules_cfg: Mapping[str, Any],
        primary_metro_fragments: Iterable[str] | None = None,
    ) -> "AmenityPricingTable":
        """Build from config.

        Each entry is either ``{kind, primary_metro, other_metro}`` with numeric
        magnitudes, or per-location ``{primary_metro: {kind, magnitude}, ...}``.
        """
        rules: dict[str, Mapping[LocationClass, AmenityRule]] = {}
        for amenity, entry in rules_cfg.items():
            if not isinstance(entry, Mapping):
                raise ValueError(f"Amenity rule for {amenity!r} must be a mapping")
            per_location: dict[LocationClass, AmenityRule] = {}
            for location in LocationClass:
                value = entry.get(location.value)
                if value is None:
                    continue
                if isinstance(value, Mapping):
                    per_location[location] = _build_rule(
                        location, value.get("kind", entry.get("kind", "fixed")), value.get("magnitude", 0)
                    )
                else:
                    per_location[location] = _build_rule(location, entry.get("kind", "fixed"), value)
            rules[str(amenity)] = MappingProxyType(per_location)
        fragments = (
            tuple(normalize_text(f) for f in primary_metro_fragments)
            if primary_metro_fragments is not None
            else DEFAULT_PRIMARY_METRO_FRAGMENTS
        )
        return cls(rules=MappingProxyType(rules), primary_metro_fragments=fragments)

    @classmethod
    def default(cls) -> "AmenityPricingTable":
        return cls.from_dict(
            {
                name: {"kind": kind, "primary_metro": primary, "other_metro": other}
                for name, (kind, primary, other) in DEFAULT_AMENITY_PRICING.items()
            }
        )

    def classify_location(self, borough_or_neighborhood: str | None) -> LocationClass:
        """Primary metro if any core-area fragment appears in the label."""
        text = normalize_text((borough_or_neighborhood or "").replace("-", " ").replace("_", " "))
        if text and any(fragment in text for fragment in self.primary_metro_fragments):
            return LocationClass.PRIMARY_METRO
        return LocationClass.OTHER_METRO

    def rule_for(self, amenity: str, location: LocationClass) -> AmenityRule | None:
        per_location = self.rules.get(amenity)
        if per_location is None:
            return None
        return per_location.get(location)

    def breakdown(
        self,
        amenities: Iterable[str],
        location: LocationClass,
        base_rent: float,
    ) -> dict[str, float]:
        """Dollar value per priced amenity.

        Unknown amenities are ignored and percentage rules without a base
        rent are omitted.
        """
        values: dict[str, float] = {}
        for amenity in sorted(set(amenities)):
            rule = self.rule_for(amenity, location)
            if rule is None:
                continue
            value = rule.resolve(base_rent)
            if value is None:
                continue
            values[amenity] = value
        return values

    def amenity_value(
        self,
        amenities: Iterable[str],
        location: LocationClass,
        base_rent: float,
    ) -> float:
        """Total dollar value of *amenities* at *location*."""
        return sum(self.breakdown(amenities, location, base_rent).values())
