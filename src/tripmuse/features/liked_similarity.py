"""
Similarity-to-liked feature (venue-level).

Average resemblance of a venue to every venue the actor liked before, mixing
category equality, tag overlap (Jaccard) and price-level closeness.
"""

from __future__ import annotations

from typing import Sequence

from tripmuse.config.settings import Settings
from tripmuse.domain.models import Venue
from tripmuse.scoring.composite import clamp01, jaccard_overlap


def _lower_tags(venue: Venue) -> set[str]:
    return {t.strip().lower() for t in venue.tags if t and t.strip()}


def venue_similarity(venue: Venue, other: Venue, *, settings: Settings) -> float:
    cfg = settings.venue_scoring.similarity
    weights = cfg.weights

    category_match = 1.0 if venue.category.strip().lower() == other.category.strip().lower() else 0.0
    tag_overlap = jaccard_overlap(_lower_tags(venue), _lower_tags(other))
    price_a = venue.price_level if venue.price_level is not None else cfg.default_price_level
    price_b = other.price_level if other.price_level is not None else cfg.default_price_level
    price_closeness = max(0.0, 1 - abs(price_a - price_b) * cfg.price_penalty_per_level)

    return (
        weights.get("category", 0.0) * category_match
        + weights.get("tags", 0.0) * tag_overlap
        + weights.get("price", 0.0) * price_closeness
    )


def score_liked_similarity(
    venue: Venue, *, liked_venues: Sequence[Venue], settings: Settings
) -> tuple[float, dict, list[str]]:
    if not liked_venues:
        return float(settings.venue_scoring.neutral_score), {"liked_count": 0}, []

    similarities = [venue_similarity(venue, liked, settings=settings) for liked in liked_venues]
    score = clamp01(sum(similarities) / len(similarities))

    reasons: list[str] = []
    if score > settings.venue_scoring.reason_thresholds.similarity:
        reasons.append("Similar to places you liked")

    return score, {"liked_count": len(liked_venues), "max_similarity": max(similarities)}, reasons
