from __future__ import annotations

# This module is the "orchestrator" for a discovery request.
# It wires together:
# - the explainable venue pass (catalog -> unseen, adjusted, threshold-filtered venues)
# - the preference manager (hybrid re-ranking once the actor is past cold start)
# and returns the venues in their final order with their explanations attached.

import logging
from typing import Sequence

from tripmuse.config.overrides import apply_settings_overrides
from tripmuse.config.settings import Settings
from tripmuse.domain.models import (
    BehaviorEvent,
    Item,
    SwipeRecord,
    Venue,
    VenuePreferences,
    VenueRankingResult,
)
from tripmuse.learning.manager import PreferenceManager
from tripmuse.recommender.venues import rank_venues

logger = logging.getLogger(__name__)


def recommend(
    actor_id: str,
    venues: Sequence[Venue],
    preferences: VenuePreferences,
    swipes: Sequence[SwipeRecord] = (),
    *,
    manager: PreferenceManager,
    all_events: Sequence[BehaviorEvent] | None = None,
    settings: Settings | None = None,
    limit: int | None = None,
) -> VenueRankingResult:
    settings = apply_settings_overrides(settings or manager.settings, preferences.settings_overrides)

    # ---- Step 1: explainable first pass over the raw catalog ----
    first_pass = rank_venues(venues, preferences, swipes, limit=limit, settings=settings)
    if not first_pass.results:
        return first_pass

    # ---- Step 2: learned re-ranking (cold start keeps the explainable order) ----
    learning = settings.learning
    if manager.is_cold_start(actor_id, learning=learning):
        meta = {**first_pass.meta, "personalized": False, "returned_count": len(first_pass.results)}
        logger.info("Discovery for %s: %d venues (cold start)", actor_id, len(first_pass.results))
        return first_pass.model_copy(update={"meta": meta})

    items = [Item.from_venue(s.venue) for s in first_pass.results]
    ranked_items = manager.get_personalized_recommendations(actor_id, items, all_events, learning=learning)

    by_id = {s.venue.id: s for s in first_pass.results}
    results = [by_id[item.id] for item in ranked_items if item.id in by_id]

    meta = {**first_pass.meta, "personalized": True, "returned_count": len(results)}
    logger.info("Discovery for %s: %d venues (personalized)", actor_id, len(results))
    return first_pass.model_copy(update={"results": results, "meta": meta})
