"""Abstract base class for the engine's read-only data sources."""

from abc import ABC, abstractmethod

from src.core.schemas import ChecklistItem, Interview, JobRecord, PracticeAttempt, PreparationActivity


class ReadinessSources(ABC):
    """Read contracts the readiness engine depends on.

    Implementations must not raise: failures degrade to empty results
    (``None`` for a missing or corrupt checklist).
    """

    @abstractmethod
    async def list_scheduled_interviews(self) -> list[Interview]:
        """All interviews known to the scheduling subsystem."""

    @abstractmethod
    async def list_jobs(self) -> dict[str, JobRecord]:
        """Job directory keyed by string id."""

    @abstractmethod
    async def list_preparation_activities(self) -> list[PreparationActivity]:
        """Preparation activity log, malformed rows already dropped."""

    @abstractmethod
    async def read_checklist(self, interview_id: str) -> list[ChecklistItem] | None:
        """Checklist for one interview, or None when there is none."""

    @abstractmethod
    async def read_local_practice_attempts(self) -> list[PracticeAttempt]:
        """Locally cached technical-practice attempts."""
