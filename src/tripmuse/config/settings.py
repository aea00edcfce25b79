# src/tripmuse/config/settings.py
"""
Application settings (Pydantic).

Settings are loaded from `src/tripmuse/config/defaults.yaml`, then optionally overridden by:
- environment variables (e.g., `TRIPMUSE_LOG_LEVEL`, `TRIPMUSE_PROFILE_DIR`)
- an external YAML file via `TRIPMUSE_CONFIG_PATH`

Design rule:
- Tuning knobs (thresholds, bonuses, blend weights, trait keyword rules) live in YAML,
  not hard-coded in business logic.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator

from tripmuse.core.env import load_dotenv_if_present
from tripmuse.domain.models import HybridWeights


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file packaged inside `tripmuse.config`."""
    text = resources.files("tripmuse.config").joinpath(filename).read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {filename}; expected a mapping.")
    return data


def _read_yaml_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML file from disk and return its mapping root."""
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {path}; expected a mapping.")
    return data


class AppSettings(BaseModel):
    name: str = "TripMuse"
    timezone: str = "America/New_York"
    log_level: str = "INFO"


DEFAULT_INSIGHT_GUIDANCE = [
    "Try more attractions to improve recommendations",
    "Rate attractions you visit to help the system learn",
    "Explore different types of attractions for better diversity",
]


class LearningSettings(BaseModel):
    cold_start_min_interactions: int = Field(5, ge=0)
    popularity_limit: int = Field(20, ge=1)
    confidence_saturation: int = Field(50, ge=1)
    similarity_threshold: float = Field(0.1, ge=0, le=1)
    similar_actor_limit: int = Field(10, ge=1)
    hybrid_weights: HybridWeights = Field(default_factory=HybridWeights)
    insights_top_n: int = Field(10, ge=1)
    insight_guidance: list[str] = Field(default_factory=lambda: list(DEFAULT_INSIGHT_GUIDANCE))


class InterestMatchSettings(BaseModel):
    match_points: float = Field(1.0, ge=0)
    strong_match_bonus: float = Field(2.0, ge=0)
    text_points: float = Field(0.5, ge=0)
    points_per_interest: float = Field(2.0, gt=0)


class BudgetMatchSettings(BaseModel):
    default_price_level: int = Field(2, ge=0, le=4)
    penalty_per_level: float = Field(0.25, ge=0)


class LikedSimilaritySettings(BaseModel):
    default_price_level: int = Field(2, ge=0, le=4)
    price_penalty_per_level: float = Field(0.2, ge=0)
    weights: dict[Literal["category", "tags", "price"], float] = Field(
        default_factory=lambda: {"category": 0.4, "tags": 0.4, "price": 0.2}
    )


class ReasonThresholds(BaseModel):
    quality: float = 0.7
    interest: float = 0.5
    trait: float = 0.5
    budget: float = 0.8
    similarity: float = 0.5


class RankingAdjustments(BaseModel):
    liked_category_bonus: float = 0.2
    liked_tag_bonus: float = 0.15
    disliked_category_penalty: float = 0.3
    disliked_tag_penalty: float = 0.2
    novelty_bonus: float = 0.05


class ThresholdLadder(BaseModel):
    strict_threshold: float = 0.4
    default_threshold: float = 0.3
    relaxed_threshold: float = 0.2
    strict_after_likes: int = Field(3, ge=0)
    min_before_relax: int = Field(10, ge=0)
    min_before_fallback: int = Field(5, ge=0)
    fallback_top_n: int = Field(20, ge=1)


class VenueScoringSettings(BaseModel):
    neutral_score: float = Field(0.5, ge=0, le=1)
    component_weights: dict[Literal["quality", "interest", "trait", "budget", "similarity"], float] = Field(
        default_factory=lambda: {
            "quality": 0.25,
            "interest": 0.30,
            "trait": 0.20,
            "budget": 0.15,
            "similarity": 0.10,
        }
    )
    interest: InterestMatchSettings = Field(default_factory=InterestMatchSettings)
    budget: BudgetMatchSettings = Field(default_factory=BudgetMatchSettings)
    similarity: LikedSimilaritySettings = Field(default_factory=LikedSimilaritySettings)
    reason_thresholds: ReasonThresholds = Field(default_factory=ReasonThresholds)
    adjustments: RankingAdjustments = Field(default_factory=RankingAdjustments)
    ladder: ThresholdLadder = Field(default_factory=ThresholdLadder)
    limit_default: int = Field(20, ge=1)


TraitField = Literal["tags", "category", "text"]


class TraitRule(BaseModel):
    """Keywords that identify venues fitting one onboarding trait."""

    keywords: list[str] = Field(..., min_length=1)
    fields: list[TraitField] = Field(default_factory=lambda: ["tags", "category"], min_length=1)

    @field_validator("keywords")
    @classmethod
    def _normalize_keywords(cls, keywords: list[str]) -> list[str]:
        cleaned = [k.strip().lower() for k in keywords]
        if any(not k for k in cleaned):
            raise ValueError("trait keywords must be non-empty strings")
        return sorted(set(cleaned))


def _default_traits() -> dict[str, TraitRule]:
    return {
        "adventurous": TraitRule(keywords=["outdoor", "adventure", "sports"], fields=["tags"]),
        "cultural": TraitRule(keywords=["museum", "art", "culture", "historic"]),
        "foodie": TraitRule(keywords=["food", "restaurant", "cafe", "market"]),
        "nightlife": TraitRule(keywords=["nightlife", "bar", "club", "entertainment"], fields=["tags"]),
        "relaxed": TraitRule(keywords=["park", "nature", "spa", "garden"]),
        "shopping": TraitRule(keywords=["shopping", "mall", "market"]),
    }


class PersistenceSettings(BaseModel):
    enabled: bool = False
    dir: str = ".cache/tripmuse/profiles"


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    learning: LearningSettings = Field(default_factory=LearningSettings)
    venue_scoring: VenueScoringSettings = Field(default_factory=VenueScoringSettings)
    traits: dict[str, TraitRule] = Field(default_factory=_default_traits)
    persistence: PersistenceSettings = Field(default_factory=PersistenceSettings)

    @field_validator("traits")
    @classmethod
    def _normalize_trait_ids(cls, traits: dict[str, TraitRule]) -> dict[str, TraitRule]:
        out: dict[str, TraitRule] = {}
        for trait_id, rule in traits.items():
            key = trait_id.strip().lower()
            if not key:
                raise ValueError("trait ids must be non-empty")
            if key in out:
                raise ValueError(f"duplicate trait id after normalization: '{key}'")
            out[key] = rule
        return out


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay selected environment variables onto raw settings payload.

    Note: We intentionally keep this whitelist small.
    """
    load_dotenv_if_present()
    data = dict(data)
    log_level = os.getenv("TRIPMUSE_LOG_LEVEL")
    if log_level:
        data.setdefault("app", {})["log_level"] = log_level

    profile_dir = os.getenv("TRIPMUSE_PROFILE_DIR")
    if profile_dir:
        persistence = data.setdefault("persistence", {})
        persistence["dir"] = profile_dir
        persistence["enabled"] = True

    return data


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings (cached)."""
    load_dotenv_if_present()
    config_path = os.getenv("TRIPMUSE_CONFIG_PATH")
    raw = _read_yaml_file(config_path) if config_path else _read_package_yaml("defaults.yaml")
    raw = _apply_env_overrides(raw)
    return Settings.model_validate(raw)


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """Load logging configuration (cached)."""
    return _read_package_yaml("logging.yaml")
