"""
Catalog and event loaders.

The CLI reads venue catalogs, swipe histories and behavior-event logs from local
JSON files (a top-level list of objects). We validate them into typed Pydantic
models so downstream scoring code can assume a consistent shape.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import TypeAdapter

from tripmuse.core.env import resolve_project_path
from tripmuse.domain.models import BehaviorEvent, Item, SwipeRecord, Venue

_VENUES_ADAPTER = TypeAdapter(list[Venue])
_ITEMS_ADAPTER = TypeAdapter(list[Item])
_SWIPES_ADAPTER = TypeAdapter(list[SwipeRecord])
_EVENTS_ADAPTER = TypeAdapter(list[BehaviorEvent])


def _read_json_list(path: str | Path) -> list:
    resolved = resolve_project_path(path)
    payload = json.loads(resolved.read_text(encoding="utf-8"))
    if not isinstance(payload, list):
        raise ValueError(f"Expected a JSON list in {resolved}")
    return payload


def load_venues(path: str | Path) -> list[Venue]:
    """Load and validate a venue catalog JSON file."""
    return _VENUES_ADAPTER.validate_python(_read_json_list(path))


def load_items(path: str | Path) -> list[Item]:
    return _ITEMS_ADAPTER.validate_python(_read_json_list(path))


def load_swipes(path: str | Path) -> list[SwipeRecord]:
    return _SWIPES_ADAPTER.validate_python(_read_json_list(path))


def load_events(path: str | Path) -> list[BehaviorEvent]:
    """Load behavior events, sorted by timestamp so replays apply them in order."""
    events = _EVENTS_ADAPTER.validate_python(_read_json_list(path))
    return sorted(events, key=lambda e: e.timestamp)
