"""
Preference manager.

Entry point used by the outer surfaces (API, CLI, composition pipeline):
- records behavior events into the actor's profile (atomic per actor),
- ranks candidates, falling back to a popularity ordering while an actor is in
  cold start (hard cutover, no blending below the threshold),
- summarizes what has been learned as insights.

Construct one per application (composition root) or per test; there is no
module-level instance.
"""

from __future__ import annotations

import logging
import math
from typing import Sequence

from tripmuse.config.settings import LearningSettings, Settings, get_settings
from tripmuse.domain.models import (
    ActorProfile,
    BehaviorEvent,
    FeatureWeight,
    HybridWeights,
    Item,
    LearningInsights,
)
from tripmuse.learning.collaborative import CollaborativeLearner
from tripmuse.learning.hybrid import HybridRanker
from tripmuse.learning.store import ProfileStore

logger = logging.getLogger(__name__)


def popularity_score(item: Item) -> float:
    return item.rating * math.log(item.reviews + 1)


def popularity_ranking(items: Sequence[Item], limit: int) -> list[Item]:
    """Items by rating * ln(reviews + 1), best first; the input is left untouched."""
    return sorted(items, key=popularity_score, reverse=True)[:limit]


def _require_actor_id(actor_id: object) -> str:
    if not isinstance(actor_id, str):
        raise TypeError(f"actor_id must be a str, got {type(actor_id).__name__}")
    if not actor_id:
        raise ValueError("actor_id must be non-empty")
    return actor_id


class PreferenceManager:
    def __init__(
        self,
        *,
        settings: Settings | None = None,
        store: ProfileStore | None = None,
        ranker: HybridRanker | None = None,
    ):
        self.settings = settings or get_settings()
        learning = self.settings.learning
        self.store = store or ProfileStore()
        self.ranker = ranker or HybridRanker(
            collaborative=CollaborativeLearner(
                similarity_threshold=learning.similarity_threshold,
                default_limit=learning.similar_actor_limit,
            ),
            default_weights=learning.hybrid_weights,
            confidence_saturation=learning.confidence_saturation,
        )

    def get_or_create_profile(self, actor_id: str) -> ActorProfile:
        return self.store.get_or_create(_require_actor_id(actor_id))

    def record_behavior(self, event: BehaviorEvent) -> None:
        if not isinstance(event, BehaviorEvent):
            raise TypeError(f"record_behavior expects a BehaviorEvent, got {type(event).__name__}")
        profile = self.store.update(event.actor_id, lambda current: self.ranker.update_profile(current, event))
        logger.debug(
            "Recorded %s on %s for %s (total=%d, confidence=%.2f)",
            event.action,
            event.item_id,
            event.actor_id,
            profile.metrics.total_interactions,
            profile.metrics.confidence,
        )

    def is_cold_start(self, actor_id: str, *, learning: LearningSettings | None = None) -> bool:
        learning = learning or self.settings.learning
        profile = self.get_or_create_profile(actor_id)
        return profile.metrics.total_interactions < learning.cold_start_min_interactions

    def get_personalized_recommendations(
        self,
        actor_id: str,
        items: Sequence[Item],
        all_events: Sequence[BehaviorEvent] | None = None,
        *,
        weights: HybridWeights | None = None,
        learning: LearningSettings | None = None,
    ) -> list[Item]:
        """Rank `items` for the actor.

        `all_events` feeds the collaborative signal; when omitted, every event in a
        snapshot of this manager's store is used. `learning` carries per-request
        overrides of the cold-start knobs and blend weights.
        """
        profile = self.get_or_create_profile(actor_id)
        if learning is None:
            learning = self.settings.learning
        elif weights is None:
            weights = learning.hybrid_weights
        if profile.metrics.total_interactions < learning.cold_start_min_interactions:
            return popularity_ranking(items, learning.popularity_limit)

        events = self.store.all_events() if all_events is None else all_events
        return self.ranker.generate_recommendations(actor_id, profile, events, items, weights)

    def get_insights(self, actor_id: str) -> LearningInsights:
        profile = self.get_or_create_profile(actor_id)
        learning = self.settings.learning
        top = sorted(profile.preferences.iter_all(), key=lambda kv: kv[1], reverse=True)
        return LearningInsights(
            confidence=profile.metrics.confidence,
            total_interactions=profile.metrics.total_interactions,
            top_preferences=[FeatureWeight(feature=k, weight=w) for k, w in top[: learning.insights_top_n]],
            recommendations=list(learning.insight_guidance),
        )
