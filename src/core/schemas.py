"""Core data models for the interview readiness engine.

All input records are frozen: the engine reads them and never mutates them.
"""

import re
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

_NUMERIC_ID = re.compile(r"\d+")


def coerce_job_id(value: Any) -> int | None:
    """Return an integer job id, or None for blanks and non-numeric values."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    text = str(value).strip()
    if _NUMERIC_ID.fullmatch(text):
        return int(text)
    return None


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so window comparisons never mix kinds."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _non_negative_number(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if number != number or number < 0:  # NaN or negative
        return 0.0
    return number


class InterviewStatus(str, Enum):
    SCHEDULED = "scheduled"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class Interview(BaseModel):
    """A scheduled interview owned by the scheduling subsystem."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str = "Interview"
    start: datetime | None = None
    linked_job_ref: str | None = None
    status: InterviewStatus = InterviewStatus.SCHEDULED

    @field_validator("title", mode="before")
    @classmethod
    def default_title(cls, v: Any) -> str:
        text = str(v or "").strip()
        return text or "Interview"

    @field_validator("linked_job_ref", mode="before")
    @classmethod
    def ref_to_text(cls, v: Any) -> str | None:
        if v is None:
            return None
        text = str(v).strip()
        return text or None

    @property
    def linked_job_id(self) -> int | None:
        """Numeric job id when the linked reference is all digits."""
        if self.linked_job_ref and _NUMERIC_ID.fullmatch(self.linked_job_ref):
            return int(self.linked_job_ref)
        return None


class JobRecord(BaseModel):
    """A job from the job directory."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str = ""
    company_name: str = ""


class PreparationActivity(BaseModel):
    """One entry from the append-only preparation activity log."""

    model_config = ConfigDict(frozen=True)

    job_id: int | None = None
    activity_type: str = ""
    description: str = ""
    notes: str = ""
    time_spent_minutes: float = 0.0
    activity_date: datetime | None = None

    @field_validator("job_id", mode="before")
    @classmethod
    def parse_job_id(cls, v: Any) -> int | None:
        return coerce_job_id(v)

    @field_validator("activity_type", "description", "notes", mode="before")
    @classmethod
    def text_or_empty(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("time_spent_minutes", mode="before")
    @classmethod
    def parse_minutes(cls, v: Any) -> float:
        return _non_negative_number(v)

    @field_validator("activity_date")
    @classmethod
    def normalize_date(cls, v: datetime | None) -> datetime | None:
        return as_utc(v) if v is not None else None

    @property
    def search_text(self) -> str:
        return f"{self.description} {self.notes}".lower()


class PracticeAttempt(BaseModel):
    """A cached technical-practice session.

    Accepts the cache's camelCase keys (``jobId``, ``elapsedMs``) and falls
    back to ``question`` when ``text`` is missing. Unknown keys are ignored.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    job_id: int | None = Field(default=None, alias="jobId")
    text: str = ""
    origin: str = ""
    code: str = ""
    elapsed_ms: float = Field(default=0.0, alias="elapsedMs")

    @model_validator(mode="before")
    @classmethod
    def question_as_text(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("text") and data.get("question"):
            data = {**data, "text": data["question"]}
        return data

    @field_validator("job_id", mode="before")
    @classmethod
    def parse_job_id(cls, v: Any) -> int | None:
        return coerce_job_id(v)

    @field_validator("text", "origin", "code", mode="before")
    @classmethod
    def text_or_empty(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("elapsed_ms", mode="before")
    @classmethod
    def parse_elapsed(cls, v: Any) -> float:
        return _non_negative_number(v)

    @property
    def search_text(self) -> str:
        return f"{self.text} {self.origin} {self.code}".lower()

    @property
    def minutes(self) -> float:
        return self.elapsed_ms / 60000


class ChecklistItem(BaseModel):
    """One item of an interview preparation checklist."""

    model_config = ConfigDict(frozen=True)

    id: str
    text: str = ""
    done: bool = False

    @field_validator("id", "text", mode="before")
    @classmethod
    def to_text(cls, v: Any) -> str:
        return "" if v is None else str(v)


class ReadinessSignals(BaseModel):
    """The four component outputs that feed the composite scorer."""

    model_config = ConfigDict(frozen=True)

    role_match: int = Field(default=0, ge=0, le=100)
    research_done: bool = False
    practice_minutes: int = Field(default=0, ge=0)
    mock_count: int = Field(default=0, ge=0)


class ScoreResult(BaseModel):
    """Readiness estimate for one interview. Transient, never persisted."""

    model_config = ConfigDict(frozen=True)

    raw_probability: int = Field(ge=0, le=100)
    confidence: int = Field(ge=0, le=100)
    role_match: int = Field(ge=0, le=100)
    practice_minutes: int = Field(ge=0)
    actions: list[str] = Field(default_factory=list)

    def top_actions(self, limit: int = 2) -> list[str]:
        return self.actions[:limit]
