from __future__ import annotations

import pytest

from tripmuse.config.settings import Settings
from tripmuse.domain.models import ActorProfile, BehaviorEvent, EventContext
from tripmuse.learning.manager import PreferenceManager
from tripmuse.learning.persistence import JsonProfileRepository
from tripmuse.learning.store import ProfileStore


def _manager(repository: JsonProfileRepository) -> PreferenceManager:
    return PreferenceManager(settings=Settings(), store=ProfileStore(repository))


def test_save_and_load_round_trip(tmp_path):
    repo = JsonProfileRepository(tmp_path)
    manager = _manager(repo)
    manager.record_behavior(
        BehaviorEvent(
            actor_id="alice",
            item_id="m1",
            action="like",
            timestamp=1_700_000_000_000,
            item={"id": "m1", "tags": ["museum"], "rating": 4.2, "price_level": 1},
            context=EventContext(time_of_day="evening", day_of_week=5),
        )
    )

    stored = repo.load("alice")

    assert stored.model_dump() == manager.get_or_create_profile("alice").model_dump()
    assert stored.history[0].item.tags == ["museum"]
    assert stored.preferences.context_weights == {"time_evening": 1.0, "day_5": 1.0}


def test_file_names_do_not_leak_actor_ids(tmp_path):
    repo = JsonProfileRepository(tmp_path)
    repo.save(ActorProfile(actor_id="../../etc/passwd"))

    files = list(tmp_path.iterdir())
    assert len(files) == 1
    assert files[0].parent == tmp_path
    assert files[0].suffix == ".json"
    assert repo.load("../../etc/passwd").actor_id == "../../etc/passwd"


def test_missing_or_corrupt_profiles_load_as_none(tmp_path):
    repo = JsonProfileRepository(tmp_path)
    assert repo.load("nobody") is None

    repo.save(ActorProfile(actor_id="alice"))
    path = next(tmp_path.iterdir())
    path.write_text("{not json", encoding="utf-8")
    assert repo.load("alice") is None


def test_new_store_rehydrates_profiles(tmp_path):
    first = _manager(JsonProfileRepository(tmp_path))
    for n in range(3):
        first.record_behavior(BehaviorEvent(actor_id="alice", item_id=f"i{n}", action="like"))

    second = _manager(JsonProfileRepository(tmp_path))
    profile = second.get_or_create_profile("alice")

    assert profile.metrics.total_interactions == 3
    second.record_behavior(BehaviorEvent(actor_id="alice", item_id="i3", action="skip"))
    assert second.get_or_create_profile("alice").metrics.total_interactions == 4


@pytest.mark.parametrize("error", [OSError("disk full"), TypeError("profile is not serializable")])
def test_save_failures_keep_the_in_memory_update(caplog, error):
    class _BrokenRepository:
        def load(self, actor_id):
            return None

        def save(self, profile):
            raise error

    manager = PreferenceManager(settings=Settings(), store=ProfileStore(_BrokenRepository()))
    manager.record_behavior(BehaviorEvent(actor_id="alice", item_id="i1", action="like"))

    assert manager.get_or_create_profile("alice").metrics.total_interactions == 1
    assert "Failed to persist profile for alice" in caplog.text
