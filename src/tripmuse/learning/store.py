"""
In-memory profile store.

Holds one immutable `ActorProfile` per actor for the lifetime of the process.

Concurrency model:
- writes for one actor are serialized by a per-actor lock, so two concurrent
  events for the same actor can never drop each other's history append;
- profiles are immutable, so readers see either the previous or the next object,
  never a partially applied update;
- cross-actor readers take `snapshot()`, a point-in-time copy of the mapping.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable

from tripmuse.domain.models import ActorProfile, BehaviorEvent
from tripmuse.learning.persistence import ProfileRepository

logger = logging.getLogger(__name__)


class ProfileStore:
    def __init__(self, repository: ProfileRepository | None = None):
        self._profiles: dict[str, ActorProfile] = {}
        self._actor_locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()
        self._repository = repository

    def _lock_for(self, actor_id: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._actor_locks.get(actor_id)
            if lock is None:
                lock = self._actor_locks[actor_id] = threading.Lock()
            return lock

    def get(self, actor_id: str) -> ActorProfile | None:
        with self._registry_lock:
            return self._profiles.get(actor_id)

    def _load_or_new(self, actor_id: str) -> ActorProfile:
        profile = self._repository.load(actor_id) if self._repository is not None else None
        if profile is not None:
            logger.info("Rehydrated profile for %s (%d events)", actor_id, len(profile.history))
            return profile
        return ActorProfile(actor_id=actor_id)

    def get_or_create(self, actor_id: str) -> ActorProfile:
        existing = self.get(actor_id)
        if existing is not None:
            return existing
        with self._lock_for(actor_id):
            with self._registry_lock:
                existing = self._profiles.get(actor_id)
            if existing is not None:
                return existing
            profile = self._load_or_new(actor_id)
            with self._registry_lock:
                return self._profiles.setdefault(actor_id, profile)

    def update(self, actor_id: str, apply: Callable[[ActorProfile], ActorProfile]) -> ActorProfile:
        """Apply `apply` to the actor's current profile under its lock and store the result."""
        with self._lock_for(actor_id):
            with self._registry_lock:
                current = self._profiles.get(actor_id)
            if current is None:
                current = self._load_or_new(actor_id)
            updated = apply(current)
            with self._registry_lock:
                self._profiles[actor_id] = updated
            # Saved under the actor lock so files never go back in time.
            if self._repository is not None:
                try:
                    self._repository.save(updated)
                except Exception:
                    logger.exception("Failed to persist profile for %s; keeping in-memory update", actor_id)
        return updated

    def snapshot(self) -> dict[str, ActorProfile]:
        with self._registry_lock:
            return dict(self._profiles)

    def all_events(self) -> list[BehaviorEvent]:
        """Every recorded event across actors, taken from one consistent snapshot."""
        return [event for profile in self.snapshot().values() for event in profile.history]
