"""
Hybrid ranker.

Blends the collaborative and content-based rankings by rank position, and owns
the profile update step: every new event produces a new profile whose weights are
recomputed from the full history (no incremental state is carried).
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Sequence

from tripmuse.domain.models import (
    ActorProfile,
    BehaviorEvent,
    HybridWeights,
    Item,
    LearningMetrics,
    PreferenceWeights,
)
from tripmuse.core.time import now_millis
from tripmuse.learning.collaborative import CollaborativeLearner
from tripmuse.learning.content import ContentBasedLearner
from tripmuse.learning.features import (
    CATEGORY_PREFIX,
    FEATURE_PREFIX,
    context_feature_keys,
    like_skip_ratio,
    split_like_skip,
)

logger = logging.getLogger(__name__)


def confidence_for(total_interactions: int, saturation: int = 50) -> float:
    """min(1, n / saturation)."""
    return min(1.0, total_interactions / saturation)


def _position_scores(ranked: Sequence[Item], weight: float) -> list[tuple[Item, float]]:
    n = len(ranked)
    return [(item, weight * (1 - i / n)) for i, item in enumerate(ranked)]


class HybridRanker:
    def __init__(
        self,
        *,
        content: ContentBasedLearner | None = None,
        collaborative: CollaborativeLearner | None = None,
        default_weights: HybridWeights | None = None,
        confidence_saturation: int = 50,
    ):
        self.content = content or ContentBasedLearner()
        self.collaborative = collaborative or CollaborativeLearner()
        self.default_weights = default_weights or HybridWeights()
        self.confidence_saturation = confidence_saturation

    def generate_recommendations(
        self,
        actor_id: str,
        profile: ActorProfile,
        events: Sequence[BehaviorEvent],
        items: Sequence[Item],
        weights: HybridWeights | None = None,
    ) -> list[Item]:
        """Merge both rankings by id with linearly decaying position scores."""
        weights = weights or self.default_weights

        collaborative_recs = self.collaborative.collaborative_recommendations(actor_id, events, items)
        content_scores = self.content.score_items(items, profile.preferences)
        content_recs = [item for item, _ in sorted(content_scores, key=lambda pair: pair[1], reverse=True)]

        merged: dict[str, tuple[Item, float]] = {}
        for ranked, list_weight in (
            (collaborative_recs, weights.collaborative),
            (content_recs, weights.content_based),
        ):
            for item, score in _position_scores(ranked, list_weight):
                previous = merged.get(item.id)
                merged[item.id] = (item, score + (previous[1] if previous else 0.0))

        logger.debug(
            "Hybrid ranking for %s: %d collaborative, %d content-based candidates",
            actor_id,
            len(collaborative_recs),
            len(content_recs),
        )
        ranked = sorted(merged.values(), key=lambda pair: pair[1], reverse=True)
        return [item for item, _ in ranked]

    def compute_preference_weights(self, history: Sequence[BehaviorEvent]) -> PreferenceWeights:
        """Recompute all four weight mappings from the full history."""
        content_weights = self.content.compute_feature_weights(history)
        tag_weights: dict[str, float] = {}
        category_weights: dict[str, float] = {}
        feature_weights: dict[str, float] = {}
        for key, weight in content_weights.items():
            if key.startswith(CATEGORY_PREFIX):
                category_weights[key] = weight
            elif key.startswith(FEATURE_PREFIX):
                feature_weights[key] = weight
            else:
                # tag_, rating_ and price_ keys share the tag mapping.
                tag_weights[key] = weight

        likes, skips = split_like_skip(history)
        context_weights = like_skip_ratio(
            Counter(k for e in likes for k in context_feature_keys(e)),
            Counter(k for e in skips for k in context_feature_keys(e)),
        )
        return PreferenceWeights(
            tag_weights=tag_weights,
            category_weights=category_weights,
            feature_weights=feature_weights,
            context_weights=context_weights,
        )

    def update_profile(
        self, profile: ActorProfile, event: BehaviorEvent, *, now: int | None = None
    ) -> ActorProfile:
        """Return a new profile with `event` appended and everything recomputed."""
        history = (*profile.history, event)
        total = len(history)
        return profile.model_copy(
            update={
                "history": history,
                "preferences": self.compute_preference_weights(history),
                "metrics": LearningMetrics(
                    total_interactions=total,
                    last_updated=now if now is not None else now_millis(),
                    confidence=confidence_for(total, self.confidence_saturation),
                ),
            }
        )
