"""
API routes.

Endpoints:
- POST `/api/behavior`: record one behavior event.
- POST `/api/recommendations`: rank candidate items for an actor.
- GET  `/api/insights/{actor_id}`: learned preferences summary.
- POST `/api/venues/score`: explainable score of one venue.
- POST `/api/venues/rank`: catalog ranking pass with threshold relaxation.
- POST `/api/discover`: catalog pass followed by learned re-ranking.
- GET  `/api/settings`: public tuning knobs for the web UI.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field, ValidationError

from tripmuse.config.overrides import apply_settings_overrides
from tripmuse.domain.models import (
    BehaviorEvent,
    Item,
    LearningInsights,
    ScoredVenue,
    SwipeRecord,
    Venue,
    VenuePreferences,
    VenueRankingResult,
)
from tripmuse.learning.manager import PreferenceManager
from tripmuse.recommender.recommend import recommend
from tripmuse.recommender.venues import rank_venues, score_venue

router = APIRouter()


class RecommendationRequest(BaseModel):
    actor_id: str = Field(..., min_length=1)
    items: list[Item]
    all_events: list[BehaviorEvent] | None = None


class RecommendationResponse(BaseModel):
    actor_id: str
    cold_start: bool
    results: list[Item]


class VenueScoreRequest(BaseModel):
    venue: Venue
    preferences: VenuePreferences = Field(default_factory=VenuePreferences)
    liked_venues: list[Venue] = Field(default_factory=list)


class VenueRankRequest(BaseModel):
    venues: list[Venue]
    preferences: VenuePreferences = Field(default_factory=VenuePreferences)
    swipes: list[SwipeRecord] = Field(default_factory=list)
    limit: int | None = Field(default=None, ge=1, le=100)


class DiscoverRequest(VenueRankRequest):
    actor_id: str = Field(..., min_length=1)


def _manager(request: Request) -> PreferenceManager:
    return request.app.state.manager


def _bad_request(e: ValueError) -> HTTPException:
    # Overrides that merge into invalid settings surface as pydantic errors (422).
    status_code = 422 if isinstance(e, ValidationError) else 400
    return HTTPException(status_code=status_code, detail={"code": "VALIDATION_ERROR", "message": str(e)})


@router.post("/api/behavior")
def post_behavior(event: BehaviorEvent, request: Request) -> dict:
    """Record a behavior event into the actor's profile."""
    manager = _manager(request)
    manager.record_behavior(event)
    profile = manager.get_or_create_profile(event.actor_id)
    return {"status": "recorded", "total_interactions": profile.metrics.total_interactions}


@router.post("/api/recommendations", response_model=RecommendationResponse)
def post_recommendations(payload: RecommendationRequest, request: Request) -> RecommendationResponse:
    manager = _manager(request)
    cold_start = manager.is_cold_start(payload.actor_id)
    results = manager.get_personalized_recommendations(payload.actor_id, payload.items, payload.all_events)
    return RecommendationResponse(actor_id=payload.actor_id, cold_start=cold_start, results=results)


@router.get("/api/insights/{actor_id}", response_model=LearningInsights)
def get_insights(actor_id: str, request: Request) -> LearningInsights:
    return _manager(request).get_insights(actor_id)


@router.post("/api/venues/score", response_model=ScoredVenue)
def post_venue_score(payload: VenueScoreRequest, request: Request) -> ScoredVenue:
    try:
        settings = apply_settings_overrides(_manager(request).settings, payload.preferences.settings_overrides)
        return score_venue(payload.venue, payload.preferences, payload.liked_venues, settings=settings)
    except ValueError as e:
        raise _bad_request(e) from e


@router.post("/api/venues/rank", response_model=VenueRankingResult)
def post_venue_rank(payload: VenueRankRequest, request: Request) -> VenueRankingResult:
    try:
        return rank_venues(
            payload.venues,
            payload.preferences,
            payload.swipes,
            limit=payload.limit,
            settings=_manager(request).settings,
        )
    except ValueError as e:
        raise _bad_request(e) from e


@router.post("/api/discover", response_model=VenueRankingResult)
def post_discover(payload: DiscoverRequest, request: Request) -> VenueRankingResult:
    try:
        return recommend(
            payload.actor_id,
            payload.venues,
            payload.preferences,
            payload.swipes,
            manager=_manager(request),
            limit=payload.limit,
        )
    except ValueError as e:
        raise _bad_request(e) from e


@router.get("/api/settings")
def get_public_settings(request: Request) -> dict[str, Any]:
    """Return tuning knobs and trait ids (persistence paths are not exposed)."""
    settings = _manager(request).settings
    return {
        "app": settings.app.model_dump(),
        "learning": settings.learning.model_dump(),
        "venue_scoring": settings.venue_scoring.model_dump(),
        "traits": sorted(settings.traits),
    }
