"""Configuration models and YAML loader for the interview readiness engine."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, model_validator


class DatabaseConfig(BaseModel):
    """SQLite database holding interviews, jobs and preparation activities."""

    path: str = "data/readiness.db"


class LocalStoreConfig(BaseModel):
    """JSON files kept locally: per-interview checklists and practice attempts."""

    checklist_path: str = "data/interview_prep.json"
    attempts_path: str = "data/technical_prep_attempts.json"


class CacheConfig(BaseModel):
    """Staleness window for shared snapshots (jobs, activities, attempts)."""

    stale_seconds: float = Field(default=3600.0, ge=0.0)


class ScoringWeights(BaseModel):
    """Weights of the composite readiness score. Must sum to 1.0."""

    role_match: float = Field(default=0.30, ge=0.0, le=1.0)
    research: float = Field(default=0.18, ge=0.0, le=1.0)
    practice: float = Field(default=0.22, ge=0.0, le=1.0)
    mock: float = Field(default=0.18, ge=0.0, le=1.0)
    history: float = Field(default=0.12, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def weights_sum_to_one(self) -> "ScoringWeights":
        total = self.role_match + self.research + self.practice + self.mock + self.history
        if abs(total - 1.0) > 1e-6:
            msg = f"scoring weights must sum to 1.0, got {total:.4f}"
            raise ValueError(msg)
        return self


class ActionMessages(BaseModel):
    """Recommendation texts, emitted in role -> research -> practice order."""

    role_match: str = (
        "Refine job-specific keywords in your resume and practice matching "
        "examples to the JD"
    )
    research: str = (
        "Complete company research: mission, recent news, and prepare 3 "
        "company-specific questions"
    )
    practice: str = "Do at least two 30-minute mock interviews focused on the role"
    well_prepared: str = (
        "You are well-prepared; focus on confidence and concise impact statements"
    )


class ScoringConfig(BaseModel):
    """Thresholds and constants for readiness scoring."""

    weights: ScoringWeights = Field(default_factory=ScoringWeights)
    # Placeholder baseline until real interview -> offer outcomes are tracked.
    historical_offer_rate: float = Field(default=0.03, ge=0.0, le=1.0)
    practice_ceiling_minutes: float = Field(default=300.0, gt=0.0)
    window_days: int = Field(default=90, ge=1)
    mock_decay: float = Field(default=0.7, gt=0.0, lt=1.0)
    role_match_action_threshold: int = Field(default=50, ge=0, le=100)
    role_match_signal_threshold: int = Field(default=40, ge=0, le=100)
    min_practice_minutes: int = Field(default=60, ge=0)
    confidence_base: int = Field(default=40, ge=0, le=100)
    confidence_step: int = Field(default=20, ge=0, le=100)
    actions: ActionMessages = Field(default_factory=ActionMessages)


class Settings(BaseModel):
    """Top-level settings loaded from YAML."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    local_store: LocalStoreConfig = Field(default_factory=LocalStoreConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)
