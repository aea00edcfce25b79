"""
Quality feature (venue-level): the venue's rating on a 0..1 scale.
"""

from __future__ import annotations

from tripmuse.config.settings import Settings
from tripmuse.domain.models import Venue
from tripmuse.scoring.composite import clamp01


def score_quality(venue: Venue, *, settings: Settings) -> tuple[float, dict, list[str]]:
    rating = float(venue.rating or 0.0)
    score = clamp01(rating / 5)

    reasons: list[str] = []
    if score > settings.venue_scoring.reason_thresholds.quality:
        reasons.append("Highly rated")

    return score, {"rating": rating}, reasons
