"""
Collaborative learner.

Actors are similar when their sets of liked item ids overlap (Jaccard). Items
liked by similar actors, and not yet liked by the target actor, are surfaced
with a score equal to the summed similarity of the actors who liked them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from tripmuse.domain.models import BehaviorEvent, Item


@dataclass(frozen=True)
class SimilarActor:
    actor_id: str
    similarity: float


def jaccard(a: set[str], b: set[str]) -> float:
    if not a or not b:
        return 0.0
    return len(a & b) / len(a | b)


def liked_sets(events: Iterable[BehaviorEvent]) -> dict[str, dict[str, None]]:
    """Index actor -> liked item ids, in first-like order (a dict used as an ordered set).

    Actors appear in first-event order, including actors with no likes at all.
    """
    index: dict[str, dict[str, None]] = {}
    for event in events:
        liked = index.setdefault(event.actor_id, {})
        if event.action == "like":
            liked.setdefault(event.item_id, None)
    return index


class CollaborativeLearner:
    def __init__(self, *, similarity_threshold: float = 0.1, default_limit: int = 10):
        self.similarity_threshold = similarity_threshold
        self.default_limit = default_limit

    def similarity(self, actor_a: str, actor_b: str, events: Sequence[BehaviorEvent]) -> float:
        index = liked_sets(events)
        return jaccard(set(index.get(actor_a, ())), set(index.get(actor_b, ())))

    def _similar_from_index(
        self, actor_id: str, index: dict[str, dict[str, None]], limit: int
    ) -> list[SimilarActor]:
        target = set(index.get(actor_id, ()))
        candidates = [
            SimilarActor(other, jaccard(target, set(liked)))
            for other, liked in index.items()
            if other != actor_id
        ]
        kept = [c for c in candidates if c.similarity > self.similarity_threshold]
        kept.sort(key=lambda c: c.similarity, reverse=True)
        return kept[:limit]

    def similar_actors(
        self, actor_id: str, events: Sequence[BehaviorEvent], limit: int | None = None
    ) -> list[SimilarActor]:
        """Other actors with similarity above the threshold, most similar first."""
        limit = self.default_limit if limit is None else limit
        return self._similar_from_index(actor_id, liked_sets(events), limit)

    def collaborative_scores(
        self, actor_id: str, events: Sequence[BehaviorEvent], items: Sequence[Item]
    ) -> list[tuple[Item, float]]:
        index = liked_sets(events)
        similar = self._similar_from_index(actor_id, index, self.default_limit)
        if not similar:
            return []

        by_id = {item.id: item for item in items}
        already_liked = index.get(actor_id, {})
        scores: dict[str, float] = {}
        for peer in similar:
            for item_id in index[peer.actor_id]:
                if item_id in already_liked or item_id not in by_id:
                    continue
                scores[item_id] = scores.get(item_id, 0.0) + peer.similarity

        ranked = sorted(scores.items(), key=lambda kv: kv[1], reverse=True)
        return [(by_id[item_id], score) for item_id, score in ranked]

    def collaborative_recommendations(
        self, actor_id: str, events: Sequence[BehaviorEvent], items: Sequence[Item]
    ) -> list[Item]:
        """Items liked by similar actors, best first. Empty on cold start."""
        return [item for item, _ in self.collaborative_scores(actor_id, events, items)]
