"""Generic trigger-phrase matcher shared by amenity, quality and location rules."""

from __future__ import annotations

import re
from typing import Any, Iterable, Mapping

from ..models import KeywordRule


def normalize_text(text: str | None) -> str:
    """Lowercase and collapse whitespace."""
    if not text:
        return ""
    return " ".join(text.lower().split())


def contains_phrase(text: str, phrase: str) -> bool:
    """Whole-word containment, plurals allowed: "washer" is not found in "dishwasher"."""
    return re.search(r"(?<!\w)" + re.escape(phrase) + r"(?:e?s)?(?!\w)", text) is not None


def rule_matches(text: str, rule: KeywordRule) -> bool:
    """Return True if *text* (already normalized) triggers *rule*."""
    if not any(contains_phrase(text, phrase) for phrase in rule.phrases):
        return False
    return not any(contains_phrase(text, phrase) for phrase in rule.unless)


def match_rules(text: str | None, rules: Iterable[KeywordRule]) -> list[KeywordRule]:
    """Return every rule triggered by *text*, in table order.

    Rules are non-exclusive; the only interaction is ``supersedes``, which
    drops a less specific rule when a more specific one also matched.
    """
    normalized = normalize_text(text)
    if not normalized:
        return []
    matched = [rule for rule in rules if rule_matches(normalized, rule)]
    superseded = {name for rule in matched for name in rule.supersedes}
    return [rule for rule in matched if rule.name not in superseded]


def apply_supersedes(names: Iterable[str], rules: Iterable[KeywordRule]) -> set[str]:
    """Drop names superseded by another name present in the set."""
    present = set(names)
    superseded = {
        name
        for rule in rules
        if rule.name in present
        for name in rule.supersedes
    }
    return present - superseded


def rules_from_config(entries: Iterable[Mapping[str, Any]]) -> tuple[KeywordRule, ...]:
    """Build KeywordRules from config entries (``name``, ``phrases``, ``amount`` ...)."""
    rules: list[KeywordRule] = []
    for entry in entries:
        if not isinstance(entry, Mapping) or not entry.get("name"):
            raise ValueError(f"Keyword rule needs a name: {entry!r}")
        phrases = tuple(normalize_text(p) for p in entry.get("phrases", []) if p)
        if not phrases:
            raise ValueError(f"Keyword rule {entry['name']!r} has no phrases")
        rules.append(
            KeywordRule(
                name=str(entry["name"]),
                phrases=phrases,
                amount=float(entry.get("amount", 0)),
                unless=tuple(normalize_text(p) for p in entry.get("unless", []) if p),
                supersedes=tuple(str(s) for s in entry.get("supersedes", [])),
            )
        )
    return tuple(rules)
