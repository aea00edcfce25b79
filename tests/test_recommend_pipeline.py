from __future__ import annotations

from tripmuse.config.settings import Settings
from tripmuse.domain.models import BehaviorEvent, Item, SwipeRecord, Venue, VenuePreferences
from tripmuse.learning.manager import PreferenceManager
from tripmuse.recommender.recommend import recommend
from tripmuse.recommender.venues import rank_venues


def _catalog() -> list[Venue]:
    return [
        Venue(id="museum", name="Old Town Museum", category="Museum", tags=["museum"], rating=3.0, reviews=5),
        Venue(id="bar", name="Night Owl", category="Bar", tags=["nightlife"], rating=4.9, reviews=900),
        Venue(id="park", name="Riverside Park", category="Park", tags=["park"], rating=4.0, reviews=100),
    ]


def test_cold_start_keeps_the_explainable_order():
    manager = PreferenceManager(settings=Settings())
    prefs = VenuePreferences(interests=["museum"], traits=["cultural"])

    result = recommend("newcomer", _catalog(), prefs, manager=manager)
    first_pass = rank_venues(_catalog(), prefs, settings=Settings())

    # A well-matched but little-reviewed venue is not pushed down by popularity.
    assert result.results[0].venue.id == "museum"
    assert [s.venue.id for s in result.results] == [s.venue.id for s in first_pass.results]
    assert result.meta["personalized"] is False
    assert result.meta["returned_count"] == 3


def test_cold_start_ignores_review_counts():
    manager = PreferenceManager(settings=Settings())
    catalog = [
        Venue(id="museum", name="Old Town Museum", category="Museum", tags=["museum"], rating=4.0, reviews=10),
        Venue(id="bar", name="Night Owl", category="Bar", tags=["nightlife"], rating=4.5, reviews=5000),
    ]
    prefs = VenuePreferences(interests=["museum"], traits=["cultural"])

    result = recommend("newcomer", catalog, prefs, manager=manager)

    assert [s.venue.id for s in result.results] == ["museum", "bar"]


def test_learned_preferences_rerank_after_cold_start():
    manager = PreferenceManager(settings=Settings())
    for n in range(5):
        item = Item(id=f"m{n}", tags=["museum"], category="Museum", rating=3.0)
        manager.record_behavior(BehaviorEvent(actor_id="alice", item_id=item.id, action="like", item=item))

    result = recommend("alice", _catalog(), VenuePreferences(), manager=manager)

    assert result.results[0].venue.id == "museum"
    assert result.meta["personalized"] is True
    # Explanations from the venue pass survive the re-ranking.
    assert all(s.components for s in result.results)


def test_swiped_venues_stay_excluded():
    manager = PreferenceManager(settings=Settings())
    catalog = _catalog()
    swipes = [SwipeRecord(actor_id="newcomer", venue_id="bar", action="dislike", venue=catalog[1])]

    result = recommend("newcomer", catalog, VenuePreferences(), swipes, manager=manager)

    assert "bar" not in {s.venue.id for s in result.results}


def test_empty_catalog_returns_empty_result():
    manager = PreferenceManager(settings=Settings())
    result = recommend("newcomer", [], VenuePreferences(), manager=manager)
    assert result.results == []


def test_learning_overrides_reach_the_cold_start_cut_over():
    manager = PreferenceManager(settings=Settings())
    prefs = VenuePreferences(settings_overrides={"learning": {"cold_start_min_interactions": 0}})

    result = recommend("newcomer", _catalog(), prefs, manager=manager)

    assert result.meta["personalized"] is True
    # The manager's own settings are not changed by a per-request override.
    assert manager.is_cold_start("newcomer")
