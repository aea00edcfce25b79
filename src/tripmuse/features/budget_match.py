"""
Budget match feature (venue-level).

Perfect price-level match scores 1.0; every level of difference costs a fixed
penalty. Venues without a price level are treated as mid-range.
"""

from __future__ import annotations

from tripmuse.config.settings import Settings
from tripmuse.domain.models import Venue, VenuePreferences
from tripmuse.scoring.composite import clamp01


def score_budget_match(
    venue: Venue, *, preferences: VenuePreferences, settings: Settings
) -> tuple[float, dict, list[str]]:
    cfg = settings.venue_scoring.budget
    venue_price = venue.price_level if venue.price_level is not None else cfg.default_price_level
    difference = abs(venue_price - preferences.budget_level)
    score = clamp01(max(0.0, 1 - difference * cfg.penalty_per_level))

    reasons: list[str] = []
    if score > settings.venue_scoring.reason_thresholds.budget:
        reasons.append("Within your budget")

    details = {
        "venue_price_level": venue_price,
        "budget_level": preferences.budget_level,
        "difference": difference,
    }
    return score, details, reasons
