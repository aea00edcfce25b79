# src/tripmuse/features/trait_match.py
"""
Trait match feature (venue-level).

Traits are matched through the declarative rules in `Settings.traits`: a trait
fits a venue when any of its keywords appears (substring) in one of the venue
fields the rule names. Traits without a rule count as unmatched.
"""

from __future__ import annotations

from tripmuse.config.settings import Settings, TraitRule
from tripmuse.domain.models import Venue, VenuePreferences
from tripmuse.scoring.composite import clamp01


def _field_values(venue: Venue, field: str) -> list[str]:
    if field == "tags":
        return [t.lower() for t in venue.tags]
    if field == "category":
        return [venue.category.lower()]
    return [venue.name.lower(), venue.description.lower()]


def trait_matches(rule: TraitRule, venue: Venue) -> bool:
    values = [v for field in rule.fields for v in _field_values(venue, field)]
    return any(keyword in value for keyword in rule.keywords for value in values)


def score_trait_match(
    venue: Venue, *, preferences: VenuePreferences, settings: Settings
) -> tuple[float, dict, list[str]]:
    traits = [t.strip().lower() for t in preferences.traits if t and t.strip()]
    if not traits:
        return float(settings.venue_scoring.neutral_score), {"matched_traits": []}, []

    matched = [t for t in traits if t in settings.traits and trait_matches(settings.traits[t], venue)]
    unknown = [t for t in traits if t not in settings.traits]
    score = clamp01(len(matched) / len(traits))

    reasons: list[str] = []
    if score > settings.venue_scoring.reason_thresholds.trait:
        reasons.append("Fits your travel style")

    details = {"matched_traits": matched, "unknown_traits": unknown}
    return score, details, reasons
