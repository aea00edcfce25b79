"""
Content-based learner.

Derives per-feature preference weights from one actor's own like/skip history and
scores items by summing the weights of the features they exhibit.

A feature liked every time it appeared weighs 1.0, skipped every time -1.0, and an
even split lands near 0. Features never observed are absent from the mapping and
contribute nothing when scoring.
"""

from __future__ import annotations

from collections import Counter
from typing import Iterable, Mapping, Sequence

from tripmuse.domain.models import BehaviorEvent, Item, PreferenceWeights
from tripmuse.learning.features import item_feature_keys, like_skip_ratio, split_like_skip


class ContentBasedLearner:
    """Stateless; every call recomputes from the history it is given."""

    def extract_features(self, events: Iterable[BehaviorEvent]) -> Counter[str]:
        """Count feature-key occurrences across the item snapshots of `events`."""
        counts: Counter[str] = Counter()
        for event in events:
            counts.update(item_feature_keys(event.item))
        return counts

    def compute_feature_weights(self, history: Sequence[BehaviorEvent]) -> dict[str, float]:
        likes, skips = split_like_skip(history)
        return like_skip_ratio(self.extract_features(likes), self.extract_features(skips))

    def score_items(
        self, items: Sequence[Item], weights: PreferenceWeights | Mapping[str, float]
    ) -> list[tuple[Item, float]]:
        """Sum learned weights over each item's feature keys (unsorted)."""
        lookup = weights.item_lookup() if isinstance(weights, PreferenceWeights) else weights
        return [(item, sum(lookup.get(key, 0.0) for key in item_feature_keys(item))) for item in items]
