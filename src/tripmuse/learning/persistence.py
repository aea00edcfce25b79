"""
Profile persistence boundary.

The engine only works on in-memory profiles. Keeping them across process restarts
is delegated to an injected `ProfileRepository`; `JsonProfileRepository` stores one
JSON document per actor on disk:
- file names are hashed (SHA-256) to avoid filesystem path issues with actor ids,
- writes go through a temporary file + atomic replace so a crash never leaves a
  partially written profile behind.
"""

from __future__ import annotations

import logging
from hashlib import sha256
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from tripmuse.domain.models import ActorProfile

logger = logging.getLogger(__name__)


class ProfileRepository(Protocol):
    def load(self, actor_id: str) -> ActorProfile | None: ...

    def save(self, profile: ActorProfile) -> None: ...


class JsonProfileRepository:
    """A filesystem-backed profile repository keyed by actor id."""

    def __init__(self, base_dir: Path):
        self._base_dir = base_dir

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def _path(self, actor_id: str) -> Path:
        digest = sha256(actor_id.encode("utf-8")).hexdigest()
        return self._base_dir / f"{digest}.json"

    def load(self, actor_id: str) -> ActorProfile | None:
        """Return the stored profile, or None when absent or unreadable."""
        path = self._path(actor_id)
        if not path.exists():
            return None
        try:
            profile = ActorProfile.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValidationError):
            logger.warning("Ignoring unreadable profile file %s", path, exc_info=True)
            return None
        if profile.actor_id != actor_id:
            logger.warning("Profile file %s belongs to %s, not %s", path, profile.actor_id, actor_id)
            return None
        return profile

    def save(self, profile: ActorProfile) -> None:
        path = self._path(profile.actor_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(profile.model_dump_json(), encoding="utf-8")
        tmp.replace(path)
