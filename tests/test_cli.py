from __future__ import annotations

import json

from tripmuse.cli import _parse_override_pairs, main


def _write(path, payload) -> str:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return str(path)


def test_rank_venues_json_output(tmp_path, capsys):
    venues = _write(
        tmp_path / "venues.json",
        [
            {"id": "museum", "name": "Old Town Museum", "category": "Museum", "rating": 4.6},
            {"id": "bar", "name": "Night Owl", "category": "Bar", "rating": 3.1},
        ],
    )

    assert main(["rank-venues", "--venues", venues, "--interest", "museum", "--json"]) == 0

    data = json.loads(capsys.readouterr().out)
    assert [s["venue"]["id"] for s in data["results"]] == ["museum", "bar"]


def test_replay_and_insights(tmp_path, capsys):
    events = _write(
        tmp_path / "events.json",
        [
            {
                "actor_id": "alice",
                "item_id": f"m{n}",
                "action": "like",
                "timestamp": 1_700_000_000_000 + n,
                "item": {"id": f"m{n}", "tags": ["museum"], "category": "Museum"},
            }
            for n in range(5)
        ],
    )
    items = _write(
        tmp_path / "items.json",
        [
            {"id": "bar", "tags": ["nightlife"], "category": "Bar", "rating": 4.9, "reviews": 900},
            {"id": "museum", "tags": ["museum"], "category": "Museum", "rating": 3.0, "reviews": 5},
        ],
    )

    assert main(["replay", "--events", events, "--items", items, "--actor", "alice", "--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["replayed_events"] == 5
    assert data["cold_start"] is False
    assert [item["id"] for item in data["results"]] == ["museum", "bar"]

    assert main(["insights", "--events", events, "--actor", "alice", "--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["total_interactions"] == 5
    assert data["confidence"] == 0.1


def test_parse_override_pairs_builds_nested_mapping():
    out = _parse_override_pairs(["venue_scoring.adjustments.novelty_bonus=0.1", "learning.popularity_limit=5"])
    assert out == {
        "venue_scoring": {"adjustments": {"novelty_bonus": 0.1}},
        "learning": {"popularity_limit": 5},
    }
