"""
Feature keys and the like/skip ratio shared by every learner.

Each observable property of an item (or of the event context) becomes a string key
with a namespace prefix, so tag, category, rating and context keys can never
collide even when they share a raw value (e.g. a tag "museum" and a category "Museum").
"""

from __future__ import annotations

import math
from collections import Counter
from typing import Iterable

from tripmuse.domain.models import BehaviorEvent, Item

TAG_PREFIX = "tag_"
CATEGORY_PREFIX = "category_"
RATING_PREFIX = "rating_"
PRICE_PREFIX = "price_"
FEATURE_PREFIX = "feature_"
TIME_PREFIX = "time_"
DAY_PREFIX = "day_"

FLAG_NAMES = ("has_photos", "has_website", "has_phone", "is_open_now")


def tag_key(tag: str) -> str:
    return f"{TAG_PREFIX}{tag.strip().lower()}"


def category_key(category: str) -> str:
    return f"{CATEGORY_PREFIX}{category.strip().lower()}"


def rating_key(rating: float) -> str:
    return f"{RATING_PREFIX}{math.floor(rating)}"


def price_key(price_level: int) -> str:
    return f"{PRICE_PREFIX}{price_level}"


def flag_key(flag: str) -> str:
    return f"{FEATURE_PREFIX}{flag}"


def time_key(bucket: str) -> str:
    return f"{TIME_PREFIX}{bucket}"


def day_key(day: int) -> str:
    return f"{DAY_PREFIX}{day}"


def item_feature_keys(item: Item) -> list[str]:
    """All feature keys an item exhibits, one entry per occurrence."""
    keys = [tag_key(t) for t in item.tags if t and t.strip()]
    keys.append(category_key(item.category))
    keys.append(rating_key(item.rating))
    if item.price_level is not None:
        keys.append(price_key(item.price_level))
    keys.extend(flag_key(name) for name in FLAG_NAMES if getattr(item.features, name))
    return keys


def context_feature_keys(event: BehaviorEvent) -> list[str]:
    keys: list[str] = []
    if event.context.time_of_day is not None:
        keys.append(time_key(event.context.time_of_day))
    if event.context.day_of_week is not None:
        keys.append(day_key(event.context.day_of_week))
    return keys


def like_skip_ratio(liked: Counter[str], skipped: Counter[str]) -> dict[str, float]:
    """(liked - skipped) / (liked + skipped) for every key seen on either side.

    Keys are emitted in first-seen order (liked first) so repeated runs over the
    same history produce identical mappings.
    """
    weights: dict[str, float] = {}
    for key in [*liked, *(k for k in skipped if k not in liked)]:
        liked_count = liked.get(key, 0)
        skipped_count = skipped.get(key, 0)
        total = liked_count + skipped_count
        if total > 0:
            weights[key] = (liked_count - skipped_count) / total
    return weights


def split_like_skip(history: Iterable[BehaviorEvent]) -> tuple[list[BehaviorEvent], list[BehaviorEvent]]:
    """Partition events into (likes, skips); view and save events carry no signal here."""
    likes: list[BehaviorEvent] = []
    skips: list[BehaviorEvent] = []
    for event in history:
        if event.action == "like":
            likes.append(event)
        elif event.action == "skip":
            skips.append(event)
    return likes, skips
