from __future__ import annotations

import pytest

from tripmuse.domain.models import BehaviorEvent, Item
from tripmuse.learning.collaborative import CollaborativeLearner, jaccard, liked_sets


def _like(actor_id: str, item_id: str) -> BehaviorEvent:
    return BehaviorEvent(actor_id=actor_id, item_id=item_id, action="like")


def _events() -> list[BehaviorEvent]:
    return [
        _like("alice", "a"),
        _like("alice", "b"),
        _like("alice", "c"),
        _like("bob", "a"),
        _like("bob", "b"),
        _like("bob", "d"),
        _like("carol", "x"),
        BehaviorEvent(actor_id="dave", item_id="a", action="skip"),
    ]


def test_similarity_is_symmetric_jaccard():
    learner = CollaborativeLearner()
    events = _events()

    # {a, b, c} vs {a, b, d}: 2 shared out of 4.
    assert learner.similarity("alice", "bob", events) == pytest.approx(0.5)
    assert learner.similarity("bob", "alice", events) == pytest.approx(0.5)
    assert learner.similarity("alice", "alice", events) == pytest.approx(1.0)
    assert learner.similarity("alice", "carol", events) == 0.0


def test_actors_without_likes_have_zero_similarity():
    learner = CollaborativeLearner()
    events = _events()
    assert learner.similarity("alice", "dave", events) == 0.0
    assert learner.similarity("dave", "dave", events) == 0.0
    assert jaccard(set(), set()) == 0.0


def test_liked_sets_keeps_actors_without_likes():
    index = liked_sets(_events())
    assert list(index) == ["alice", "bob", "carol", "dave"]
    assert list(index["alice"]) == ["a", "b", "c"]
    assert list(index["dave"]) == []


def test_similar_actors_excludes_self_and_dissimilar():
    similar = CollaborativeLearner().similar_actors("alice", _events())
    assert [s.actor_id for s in similar] == ["bob"]
    assert similar[0].similarity == pytest.approx(0.5)


def test_similarity_threshold_is_exclusive():
    events = [_like("alice", f"i{n}") for n in range(10)] + [_like("erin", "i0")]
    # 1 shared out of 10 sits exactly on the 0.1 threshold.
    assert CollaborativeLearner().similar_actors("alice", events) == []


def test_similar_actors_respects_limit():
    events = [_like("alice", "a")] + [_like(f"peer{n}", "a") for n in range(15)]
    learner = CollaborativeLearner()
    assert len(learner.similar_actors("alice", events)) == 10
    assert len(learner.similar_actors("alice", events, limit=3)) == 3


def test_recommendations_come_from_similar_actors():
    items = [Item(id=i) for i in ("a", "b", "c", "d", "x")]
    recs = CollaborativeLearner().collaborative_recommendations("alice", _events(), items)
    # Items alice already liked are not surfaced again; carol is not similar.
    assert [item.id for item in recs] == ["d"]


def test_recommendations_skip_items_missing_from_catalog():
    items = [Item(id=i) for i in ("a", "b", "c")]
    assert CollaborativeLearner().collaborative_recommendations("alice", _events(), items) == []


def test_cold_start_actor_gets_no_collaborative_signal():
    items = [Item(id=i) for i in ("a", "b", "c", "d", "x")]
    learner = CollaborativeLearner()
    assert learner.collaborative_recommendations("newcomer", _events(), items) == []
    assert learner.collaborative_recommendations("dave", _events(), items) == []
