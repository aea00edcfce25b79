"""
Domain models (Pydantic).

These types are the shared vocabulary between the learning engine, the venue
scoring pass and the outer surfaces (API/CLI):
- scorable items and the behavior events that reference them (`Item`, `BehaviorEvent`)
- per-actor learned state (`ActorProfile`)
- catalog venues and the explainable scoring output (`Venue`, `ScoredVenue`)

Item-like payloads arrive from several producers (swipe UI, catalog fetch), so
missing fields default to neutral values instead of failing validation.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator, model_validator

from tripmuse.core.time import day_of_week_index, ensure_tz, now_millis, parse_datetime, time_of_day_bucket

Action = Literal["like", "skip", "view", "save"]
SwipeAction = Literal["like", "dislike", "skip"]
TimeOfDay = Literal["morning", "afternoon", "evening", "night"]
Season = Literal["spring", "summer", "fall", "winter"]

DEFAULT_CATEGORY = "General"


class Coordinates(BaseModel):
    """A geographic point in decimal degrees."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class ItemLocation(BaseModel):
    model_config = ConfigDict(frozen=True)

    city: str = ""
    country: str = ""
    coordinates: Coordinates | None = None


class FeatureFlags(BaseModel):
    """Boolean feature bundle; `is_open_now` is unknown when None."""

    model_config = ConfigDict(frozen=True)

    has_photos: bool = False
    has_website: bool = False
    has_phone: bool = False
    is_open_now: bool | None = None

    @field_validator("has_photos", "has_website", "has_phone", mode="before")
    @classmethod
    def _truthy(cls, value: Any) -> bool:
        return bool(value)


class Item(BaseModel):
    """A recommendable venue/attraction as observed at interaction time."""

    model_config = ConfigDict(frozen=True)

    id: StrictStr = Field(..., min_length=1)
    title: str = ""
    tags: list[str] = Field(default_factory=list)
    rating: float = Field(0.0, ge=0, le=5)
    reviews: int = Field(0, ge=0)
    price_level: int | None = Field(default=None, ge=0, le=4)
    category: str = DEFAULT_CATEGORY
    location: ItemLocation = Field(default_factory=ItemLocation)
    features: FeatureFlags = Field(default_factory=FeatureFlags)

    @model_validator(mode="before")
    @classmethod
    def _fill_neutral_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for key in ("title", "tags", "rating", "reviews", "price_level", "location", "features"):
            if key in data and data[key] is None:
                data.pop(key)
        if isinstance(data.get("tags"), (list, tuple)):
            data["tags"] = [t for t in data["tags"] if t]
        category = data.get("category")
        if not isinstance(category, str) or not category.strip():
            tags = data.get("tags") or []
            data["category"] = tags[0] if tags else DEFAULT_CATEGORY
        return data

    @classmethod
    def from_venue(cls, venue: "Venue", *, city: str = "", country: str = "") -> "Item":
        """Snapshot a catalog venue into the generic item shape."""
        coordinates = None
        if venue.location is not None:
            coordinates = Coordinates(lat=venue.location.lat, lng=venue.location.lng)
        return cls(
            id=venue.id,
            title=venue.name,
            tags=list(venue.tags),
            rating=venue.rating or 0.0,
            reviews=venue.reviews or 0,
            price_level=venue.price_level,
            category=venue.category,
            location=ItemLocation(city=city, country=country, coordinates=coordinates),
            features=FeatureFlags(
                has_photos=bool(venue.photos),
                has_website=bool(venue.website),
                has_phone=bool(venue.phone),
                is_open_now=venue.open_now,
            ),
        )


class EventContext(BaseModel):
    """Situational context captured alongside a behavior event."""

    model_config = ConfigDict(frozen=True)

    traits: list[str] = Field(default_factory=list)
    interests: list[str] = Field(default_factory=list)
    destination: str = ""
    time_of_day: TimeOfDay | None = None
    day_of_week: int | None = Field(default=None, ge=0, le=6)
    season: Season | None = None

    @classmethod
    def at(
        cls,
        moment: datetime,
        *,
        traits: list[str] | None = None,
        interests: list[str] | None = None,
        destination: str = "",
    ) -> "EventContext":
        """Build a context with time buckets derived from `moment`."""
        return cls(
            traits=list(traits or []),
            interests=list(interests or []),
            destination=destination,
            time_of_day=time_of_day_bucket(moment),
            day_of_week=day_of_week_index(moment),
        )


class BehaviorEvent(BaseModel):
    """One timestamped action of an actor on an item (append-only)."""

    model_config = ConfigDict(frozen=True)

    actor_id: StrictStr = Field(..., min_length=1)
    item_id: StrictStr = Field(..., min_length=1)
    action: Action
    timestamp: int = Field(default_factory=now_millis, ge=0)
    item: Item
    context: EventContext = Field(default_factory=EventContext)

    @field_validator("timestamp", mode="before")
    @classmethod
    def _timestamp_to_millis(cls, value: Any) -> Any:
        # Event logs written by hand may carry ISO strings; naive values are UTC.
        if isinstance(value, str) and not value.strip().isdigit():
            value = parse_datetime(value, "UTC")
        if isinstance(value, datetime):
            return int(ensure_tz(value, "UTC").timestamp() * 1000)
        return value

    @model_validator(mode="before")
    @classmethod
    def _ensure_item_snapshot(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("item") is None:
            # Minimal events carry no features; record the id only.
            data = {**data, "item": {"id": data.get("item_id")}}
        return data

    @model_validator(mode="after")
    def _item_matches_item_id(self) -> "BehaviorEvent":
        if self.item.id != self.item_id:
            raise ValueError(f"item.id '{self.item.id}' does not match item_id '{self.item_id}'")
        return self


class PreferenceWeights(BaseModel):
    """Learned signed weights, one mapping per namespace family."""

    model_config = ConfigDict(frozen=True)

    tag_weights: dict[str, float] = Field(default_factory=dict)
    category_weights: dict[str, float] = Field(default_factory=dict)
    feature_weights: dict[str, float] = Field(default_factory=dict)
    context_weights: dict[str, float] = Field(default_factory=dict)

    def item_lookup(self) -> dict[str, float]:
        """Merge the mappings that describe item features into one lookup."""
        return {**self.tag_weights, **self.category_weights, **self.feature_weights}

    def iter_all(self) -> list[tuple[str, float]]:
        return [
            *self.tag_weights.items(),
            *self.category_weights.items(),
            *self.feature_weights.items(),
            *self.context_weights.items(),
        ]


class LearningMetrics(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_interactions: int = Field(0, ge=0)
    last_updated: int = Field(default_factory=now_millis)
    confidence: float = Field(0.0, ge=0, le=1)


class ActorProfile(BaseModel):
    """Accumulated preference state for one actor (immutable snapshot)."""

    model_config = ConfigDict(frozen=True)

    actor_id: StrictStr = Field(..., min_length=1)
    preferences: PreferenceWeights = Field(default_factory=PreferenceWeights)
    history: tuple[BehaviorEvent, ...] = ()
    metrics: LearningMetrics = Field(default_factory=LearningMetrics)


class FeatureWeight(BaseModel):
    feature: str
    weight: float


class LearningInsights(BaseModel):
    """Human-readable summary of what has been learned for an actor."""

    confidence: float = Field(..., ge=0, le=1)
    total_interactions: int = Field(..., ge=0)
    top_preferences: list[FeatureWeight] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


class HybridWeights(BaseModel):
    """Blend weights for collaborative vs content-based rankings."""

    collaborative: float = Field(0.3, ge=0)
    content_based: float = Field(0.7, ge=0)


# ---- Venue catalog types (used by the explainable venue scoring pass) ----


class VenueLocation(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    address: str = ""


class Venue(BaseModel):
    """A catalog venue with the richer structured fields used by venue scoring."""

    id: StrictStr = Field(..., min_length=1)
    name: str = ""
    category: str = DEFAULT_CATEGORY
    description: str = ""
    location: VenueLocation | None = None
    price_level: int | None = Field(default=None, ge=0, le=4)
    rating: float | None = Field(default=None, ge=0, le=5)
    reviews: int | None = Field(default=None, ge=0)
    photos: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    website: str | None = None
    phone: str | None = None
    open_now: bool | None = None
    google_place_id: str | None = None

    @field_validator("tags", "photos", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("description", mode="before")
    @classmethod
    def _none_to_blank(cls, value: Any) -> Any:
        return "" if value is None else value


class VenuePreferences(BaseModel):
    """Declared onboarding preferences of an actor."""

    interests: list[str] = Field(default_factory=list)
    traits: list[str] = Field(default_factory=list)
    budget_level: int = Field(2, ge=0, le=4)
    travel_style: str = "solo"
    settings_overrides: dict[str, Any] | None = None


class SwipeRecord(BaseModel):
    """A persisted swipe with the venue it was made on (when still known)."""

    actor_id: StrictStr = Field(..., min_length=1)
    venue_id: StrictStr = Field(..., min_length=1)
    action: SwipeAction
    venue: Venue | None = None
    timestamp: int = Field(default_factory=now_millis, ge=0)


class ScoreComponent(BaseModel):
    """One explainable sub-score of a venue score."""

    name: Literal["quality", "interest", "trait", "budget", "similarity"]
    score: float = Field(..., ge=0, le=1)
    weight: float = Field(..., ge=0, le=1)
    contribution: float = Field(..., ge=0, le=1)
    details: dict[str, Any] = Field(default_factory=dict)
    reasons: list[str] = Field(default_factory=list)


class ScoredVenue(BaseModel):
    venue: Venue
    score: float
    reasons: list[str] = Field(default_factory=list)
    components: list[ScoreComponent] = Field(default_factory=list)


class VenueRankingResult(BaseModel):
    """Ranked venues plus how the ranking pass resolved its thresholds."""

    generated_at: datetime
    results: list[ScoredVenue]
    meta: dict[str, Any] = Field(default_factory=dict)
