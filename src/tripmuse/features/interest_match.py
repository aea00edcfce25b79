# src/tripmuse/features/interest_match.py
"""
Interest match feature (venue-level).

Each declared interest is checked against the venue:
- category (strong match): counts as a match plus a strong-match bonus,
- otherwise one of the tags: a plain match,
- name or description (partial text match): a half credit, added on top of a tag
  match or on its own.

Category and tag matches are substring matches in either direction, so an interest
"art" matches a tag "art gallery" and an interest "museums" matches a category
"museum". The total is divided by twice the number of interests, so only strong
matches on most interests reach a full score.
"""

from __future__ import annotations

from tripmuse.config.settings import Settings
from tripmuse.domain.models import Venue, VenuePreferences
from tripmuse.scoring.composite import clamp01


def _either_contains(a: str, b: str) -> bool:
    return bool(a) and bool(b) and (a in b or b in a)


def score_interest_match(
    venue: Venue, *, preferences: VenuePreferences, settings: Settings
) -> tuple[float, dict, list[str]]:
    interests = [i.strip().lower() for i in preferences.interests if i and i.strip()]
    if not interests:
        # No declared interests is absence of signal, not a negative signal.
        return float(settings.venue_scoring.neutral_score), {"matches": {}}, []

    cfg = settings.venue_scoring.interest
    category = venue.category.strip().lower()
    tags = [t.strip().lower() for t in venue.tags if t and t.strip()]
    text = f"{venue.name} {venue.description}".lower()

    matches: dict[str, str] = {}
    points = 0.0
    for interest in interests:
        if _either_contains(interest, category):
            matches[interest] = "category"
            points += cfg.match_points + cfg.strong_match_bonus
            continue

        kinds: list[str] = []
        if any(_either_contains(interest, tag) for tag in tags):
            kinds.append("tag")
            points += cfg.match_points
        if interest in text:
            kinds.append("text")
            points += cfg.text_points
        if kinds:
            matches[interest] = "+".join(kinds)

    score = clamp01(points / (len(interests) * cfg.points_per_interest))

    reasons: list[str] = []
    if score > settings.venue_scoring.reason_thresholds.interest:
        reasons.append(f"Matches your interests in {venue.category}")

    details = {"matches": matches, "points": points, "interest_count": len(interests)}
    return score, details, reasons
