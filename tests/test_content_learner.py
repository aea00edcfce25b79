from __future__ import annotations

import pytest

from tripmuse.domain.models import BehaviorEvent, Item
from tripmuse.learning.content import ContentBasedLearner


def _event(action: str, item: Item, actor_id: str = "alice") -> BehaviorEvent:
    return BehaviorEvent(actor_id=actor_id, item_id=item.id, action=action, item=item)


def _museum(item_id: str) -> Item:
    return Item(id=item_id, tags=["museum"], category="Museum")


def test_feature_weight_is_like_skip_ratio():
    history = [
        _event("like", _museum("m1")),
        _event("like", _museum("m2")),
        _event("like", _museum("m3")),
        _event("skip", Item(id="n1", tags=["museum", "nightlife"], category="Bar")),
    ]

    weights = ContentBasedLearner().compute_feature_weights(history)

    # Three likes and one skip: (3 - 1) / 4.
    assert weights["tag_museum"] == pytest.approx(0.5)
    # Only ever skipped.
    assert weights["tag_nightlife"] == pytest.approx(-1.0)
    assert weights["category_bar"] == pytest.approx(-1.0)
    assert weights["category_museum"] == pytest.approx(1.0)
    # Never observed features are absent, not zero.
    assert "tag_beach" not in weights


def test_views_and_saves_carry_no_signal():
    history = [
        _event("view", _museum("m1")),
        _event("save", _museum("m2")),
    ]
    assert ContentBasedLearner().compute_feature_weights(history) == {}


def test_extract_features_counts_each_occurrence():
    item = Item(
        id="x",
        tags=["Beach", "beach "],
        category="Park",
        rating=4.7,
        price_level=1,
        features={"has_photos": True, "has_phone": True},
    )
    counts = ContentBasedLearner().extract_features([_event("like", item)])

    assert counts["tag_beach"] == 2
    assert counts["category_park"] == 1
    assert counts["rating_4"] == 1
    assert counts["price_1"] == 1
    assert counts["feature_has_photos"] == 1
    assert counts["feature_has_phone"] == 1
    assert "feature_has_website" not in counts


def test_score_items_prefers_liked_features():
    learner = ContentBasedLearner()
    history = [
        _event("like", _museum("m1")),
        _event("like", _museum("m2")),
        _event("skip", Item(id="n1", tags=["nightlife"], category="Bar")),
    ]
    weights = learner.compute_feature_weights(history)

    museum = Item(id="m9", tags=["museum"], category="Museum")
    bar = Item(id="b9", tags=["nightlife"], category="Bar")
    scores = dict((item.id, score) for item, score in learner.score_items([bar, museum], weights))

    assert scores["m9"] > 0 > scores["b9"]


def test_unknown_features_score_zero():
    learner = ContentBasedLearner()
    scores = learner.score_items([Item(id="z", tags=["zoo"], category="Zoo")], {"tag_museum": 1.0})
    assert scores[0][1] == 0.0
