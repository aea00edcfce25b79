from __future__ import annotations

import pytest

from tripmuse.config.settings import Settings
from tripmuse.domain.models import SwipeRecord, Venue, VenuePreferences
from tripmuse.recommender.venues import rank_venues, score_venue


def _venue(venue_id: str, **kwargs) -> Venue:
    data = {"id": venue_id, "name": venue_id.title(), "category": "Museum", "rating": 5.0, "price_level": 2}
    data.update(kwargs)
    return Venue(**data)


def _swipe(venue: Venue, action: str = "like") -> SwipeRecord:
    return SwipeRecord(actor_id="alice", venue_id=venue.id, action=action, venue=venue)


def test_sparse_catalog_never_returns_empty():
    venues = [_venue(f"v{n}", rating=0.0, price_level=None) for n in range(3)]
    result = rank_venues(venues, VenuePreferences(), settings=Settings())

    assert len(result.results) == 3
    assert result.meta["threshold_stage"] == "top_scored"
    assert result.meta["threshold"] is None


def test_default_threshold_with_few_likes():
    venues = [_venue(f"v{n}") for n in range(12)]
    result = rank_venues(venues, VenuePreferences(), settings=Settings())

    assert result.meta["threshold_stage"] == "default"
    assert result.meta["threshold"] == pytest.approx(0.3)
    assert len(result.results) == 12


def test_relaxed_threshold_when_few_venues_clear_the_default():
    # No interest, trait or budget fit: rating 3.0 scores .15 + .05 similarity + .05 novelty.
    prefs = VenuePreferences(interests=["zzz"], traits=["wizardry"], budget_level=0)
    fair = [_venue(f"fair{n}", rating=3.0, price_level=4) for n in range(6)]
    poor = [_venue(f"poor{n}", rating=0.0, price_level=4) for n in range(4)]

    result = rank_venues([*fair, *poor], prefs, settings=Settings())

    assert result.meta["threshold_stage"] == "relaxed"
    assert result.meta["threshold"] == pytest.approx(0.2)
    assert {s.venue.id for s in result.results} == {v.id for v in fair}
    assert all(s.score == pytest.approx(0.25) for s in result.results)


def test_strict_threshold_after_enough_likes():
    liked = [_venue(f"zoo{n}", category="Zoo") for n in range(4)]
    venues = [_venue(f"v{n}") for n in range(12)] + liked
    result = rank_venues(venues, VenuePreferences(), [_swipe(v) for v in liked], settings=Settings())

    assert result.meta["threshold_stage"] == "strict"
    assert result.meta["threshold"] == pytest.approx(0.4)
    assert result.meta["liked_count"] == 4
    assert result.meta["unseen_count"] == 12


def test_swiped_venues_are_excluded():
    venues = [_venue(f"v{n}") for n in range(6)]
    swipes = [_swipe(venues[0]), _swipe(venues[1], "dislike"), _swipe(venues[2], "skip")]

    result = rank_venues(venues, VenuePreferences(), swipes, settings=Settings())

    returned = {s.venue.id for s in result.results}
    assert returned == {"v3", "v4", "v5"}
    # Only explicit dislikes feed the penalties.
    assert result.meta["disliked_count"] == 1


def test_results_are_sorted_and_limited():
    venues = [_venue(f"v{n}", rating=float(n % 6)) for n in range(15)]
    result = rank_venues(venues, VenuePreferences(), limit=4, settings=Settings())

    scores = [s.score for s in result.results]
    assert len(scores) == 4
    assert scores == sorted(scores, reverse=True)


def test_history_adjustments_and_reasons():
    settings = Settings()
    prefs = VenuePreferences()
    loved = _venue("loved", category="Museum", tags=["art"])
    disliked = _venue("loud", category="Bar", tags=["loud"])
    candidates = [
        _venue("same-category", category="Museum", tags=["history"]),
        _venue("shared-tag", category="Gallery", tags=["art"]),
        _venue("bar", category="Bar", tags=["loud", "music"]),
        _venue("park", category="Park"),
    ]
    swipes = [_swipe(loved), _swipe(disliked, "dislike")]

    result = rank_venues([*candidates, loved, disliked], prefs, swipes, settings=settings)
    by_id = {s.venue.id: s for s in result.results}

    def delta(venue_id: str) -> float:
        base = score_venue(by_id[venue_id].venue, prefs, [loved], settings=settings)
        return by_id[venue_id].score - base.score

    assert delta("same-category") == pytest.approx(0.2)
    assert delta("shared-tag") == pytest.approx(0.15 + 0.05)
    assert delta("bar") == pytest.approx(-0.3 - 0.2 + 0.05)
    assert delta("park") == pytest.approx(0.05)

    assert by_id["same-category"].reasons[0] == "Category you loved"
    assert "New experience" not in by_id["same-category"].reasons
    assert by_id["shared-tag"].reasons[0] == "Has art (you liked this)"
    assert by_id["shared-tag"].reasons[-1] == "New experience"


def test_everything_seen_falls_back_to_top_rated():
    venues = [_venue("low", rating=2.0), _venue("high", rating=4.9), _venue("mid", rating=3.5)]
    swipes = [_swipe(v, "skip") for v in venues]

    result = rank_venues(venues, VenuePreferences(), swipes, settings=Settings())

    assert result.meta["threshold_stage"] == "all_seen"
    assert [s.venue.id for s in result.results] == ["high", "mid", "low"]


def test_settings_overrides_apply_per_call():
    settings = Settings()
    venues = [_venue("v0", category="Park")]
    prefs = VenuePreferences(settings_overrides={"venue_scoring": {"adjustments": {"novelty_bonus": 0.0}}})

    result = rank_venues(venues, prefs, settings=settings)

    base = score_venue(venues[0], prefs, [], settings=settings)
    assert result.results[0].score == pytest.approx(base.score)
    # The shared settings object is untouched.
    assert settings.venue_scoring.adjustments.novelty_bonus == pytest.approx(0.05)


def test_disallowed_overrides_are_rejected():
    prefs = VenuePreferences(settings_overrides={"persistence": {"dir": "/tmp"}})
    with pytest.raises(ValueError, match="persistence"):
        rank_venues([_venue("v0")], prefs, settings=Settings())
