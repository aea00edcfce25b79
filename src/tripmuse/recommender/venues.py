from __future__ import annotations

# Explainable venue scoring over a raw catalog.
#
# Two layers:
# - `score_venue`: a weighted sum of five 0..1 sub-scores (quality, interest, trait,
#   budget, similarity-to-liked) with human-readable reasons.
# - `rank_venues`: the catalog pass. It drops already-swiped venues, nudges scores
#   with what the actor liked/disliked before, then filters with a threshold that
#   relaxes step by step so a sparse catalog still yields a usable list.

import logging
from datetime import datetime, timezone
from typing import Sequence

from tripmuse.config.overrides import apply_settings_overrides
from tripmuse.config.settings import Settings, get_settings
from tripmuse.domain.models import (
    ScoreComponent,
    ScoredVenue,
    SwipeRecord,
    Venue,
    VenuePreferences,
    VenueRankingResult,
)
from tripmuse.features.budget_match import score_budget_match
from tripmuse.features.interest_match import score_interest_match
from tripmuse.features.liked_similarity import score_liked_similarity
from tripmuse.features.quality import score_quality
from tripmuse.features.trait_match import score_trait_match
from tripmuse.scoring.composite import normalize_weights

logger = logging.getLogger(__name__)


def score_venue(
    venue: Venue,
    preferences: VenuePreferences,
    liked_venues: Sequence[Venue],
    *,
    settings: Settings | None = None,
) -> ScoredVenue:
    """Weighted base score of one venue plus the reasons behind it."""
    settings = settings or get_settings()
    weights = normalize_weights(dict(settings.venue_scoring.component_weights))

    results = {
        "quality": score_quality(venue, settings=settings),
        "interest": score_interest_match(venue, preferences=preferences, settings=settings),
        "trait": score_trait_match(venue, preferences=preferences, settings=settings),
        "budget": score_budget_match(venue, preferences=preferences, settings=settings),
        "similarity": score_liked_similarity(venue, liked_venues=liked_venues, settings=settings),
    }

    components: list[ScoreComponent] = []
    reasons: list[str] = []
    total = 0.0
    for name, (score, details, comp_reasons) in results.items():
        weight = float(weights.get(name, 0.0))
        contribution = weight * score
        total += contribution
        reasons.extend(comp_reasons)
        components.append(
            ScoreComponent(
                name=name,
                score=score,
                weight=weight,
                contribution=contribution,
                details=details,
                reasons=comp_reasons,
            )
        )

    return ScoredVenue(venue=venue, score=total, reasons=reasons, components=components)


def _lower_tags(venue: Venue) -> list[str]:
    return [t.strip().lower() for t in venue.tags if t and t.strip()]


def _apply_history_adjustments(
    scored: ScoredVenue,
    *,
    liked_categories: set[str],
    liked_tags: set[str],
    disliked_categories: set[str],
    disliked_tags: set[str],
    settings: Settings,
) -> ScoredVenue:
    adj = settings.venue_scoring.adjustments
    venue = scored.venue
    category = venue.category.strip().lower()
    tags = _lower_tags(venue)

    score = scored.score
    reasons = list(scored.reasons)

    if category in liked_categories:
        score += adj.liked_category_bonus
        reasons.insert(0, "Category you loved")

    matching_liked = [t for t in tags if t in liked_tags]
    if matching_liked:
        score += adj.liked_tag_bonus * len(matching_liked)
        reasons.insert(0, f"Has {matching_liked[0]} (you liked this)")

    if category in disliked_categories:
        score -= adj.disliked_category_penalty

    matching_disliked = [t for t in tags if t in disliked_tags]
    if matching_disliked:
        score -= adj.disliked_tag_penalty * len(matching_disliked)

    if category not in liked_categories:
        score += adj.novelty_bonus
        reasons.append("New experience")

    return scored.model_copy(update={"score": score, "reasons": reasons})


def _apply_threshold_ladder(
    scored: list[ScoredVenue], *, liked_count: int, settings: Settings
) -> tuple[list[ScoredVenue], dict]:
    """Filter a descending-sorted list, relaxing the threshold until enough remain."""
    ladder = settings.venue_scoring.ladder
    threshold = ladder.strict_threshold if liked_count > ladder.strict_after_likes else ladder.default_threshold
    stage = "strict" if liked_count > ladder.strict_after_likes else "default"

    kept = [s for s in scored if s.score >= threshold]
    if len(kept) < ladder.min_before_relax:
        logger.debug("Only %d venues cleared %.2f; relaxing to %.2f", len(kept), threshold, ladder.relaxed_threshold)
        threshold = ladder.relaxed_threshold
        stage = "relaxed"
        kept = [s for s in scored if s.score >= threshold]

    if len(kept) < ladder.min_before_fallback:
        logger.debug("Only %d venues cleared the relaxed threshold; taking top scorers", len(kept))
        threshold = None
        stage = "top_scored"
        kept = scored[: ladder.fallback_top_n]

    return kept, {"threshold": threshold, "threshold_stage": stage}


def rank_venues(
    venues: Sequence[Venue],
    preferences: VenuePreferences,
    swipes: Sequence[SwipeRecord] = (),
    *,
    limit: int | None = None,
    settings: Settings | None = None,
) -> VenueRankingResult:
    """Rank unseen catalog venues for an actor; see module notes for the policy."""
    settings = apply_settings_overrides(settings or get_settings(), preferences.settings_overrides)
    limit = int(limit or settings.venue_scoring.limit_default)
    generated_at = datetime.now(timezone.utc)

    swiped_ids = {s.venue_id for s in swipes}
    liked_swipes = [s for s in swipes if s.action == "like"]
    liked_venues = [s.venue for s in liked_swipes if s.venue is not None]
    disliked_venues = [s.venue for s in swipes if s.action == "dislike" and s.venue is not None]

    unseen = [v for v in venues if v.id not in swiped_ids]
    meta: dict = {
        "catalog_size": len(venues),
        "unseen_count": len(unseen),
        "liked_count": len(liked_swipes),
        "disliked_count": len(disliked_venues),
    }

    if not unseen:
        # Everything has been seen: fall back to the best-rated venues overall.
        top_rated = sorted(venues, key=lambda v: v.rating or 0.0, reverse=True)[:limit]
        results = [score_venue(v, preferences, liked_venues, settings=settings) for v in top_rated]
        meta.update({"threshold": None, "threshold_stage": "all_seen"})
        return VenueRankingResult(generated_at=generated_at, results=results, meta=meta)

    liked_categories = {v.category.strip().lower() for v in liked_venues if v.category}
    liked_tags = {t for v in liked_venues for t in _lower_tags(v)}
    disliked_categories = {v.category.strip().lower() for v in disliked_venues if v.category}
    disliked_tags = {t for v in disliked_venues for t in _lower_tags(v)}

    scored = [
        _apply_history_adjustments(
            score_venue(v, preferences, liked_venues, settings=settings),
            liked_categories=liked_categories,
            liked_tags=liked_tags,
            disliked_categories=disliked_categories,
            disliked_tags=disliked_tags,
            settings=settings,
        )
        for v in unseen
    ]
    scored.sort(key=lambda s: s.score, reverse=True)

    kept, ladder_meta = _apply_threshold_ladder(scored, liked_count=len(liked_swipes), settings=settings)
    meta.update(ladder_meta)
    results = kept[:limit]
    meta["returned_count"] = len(results)

    logger.info(
        "Ranked %d unseen venues (stage=%s, returned=%d)",
        len(unseen),
        meta["threshold_stage"],
        len(results),
    )
    return VenueRankingResult(generated_at=generated_at, results=results, meta=meta)
