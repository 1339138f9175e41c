"""Local sources: SQLite for interviews, jobs and activities, JSON files for the rest."""

import logging
import sqlite3

from src.core.config import LocalStoreConfig
from src.core.db import list_jobs, list_preparation_activities, list_scheduled_interviews
from src.core.local_store import read_checklist, read_local_practice_attempts
from src.core.schemas import ChecklistItem, Interview, JobRecord, PracticeAttempt, PreparationActivity
from src.sources.base import ReadinessSources

logger = logging.getLogger(__name__)


class LocalSources(ReadinessSources):
    """Reads from an open SQLite connection and the configured JSON files."""

    def __init__(self, conn: sqlite3.Connection, store: LocalStoreConfig) -> None:
        self._conn = conn
        self._store = store

    async def list_scheduled_interviews(self) -> list[Interview]:
        interviews = list_scheduled_interviews(self._conn)
        logger.debug("Loaded %d interviews", len(interviews))
        return interviews

    async def list_jobs(self) -> dict[str, JobRecord]:
        return list_jobs(self._conn)

    async def list_preparation_activities(self) -> list[PreparationActivity]:
        return list_preparation_activities(self._conn)

    async def read_checklist(self, interview_id: str) -> list[ChecklistItem] | None:
        return read_checklist(self._store.checklist_path, interview_id)

    async def read_local_practice_attempts(self) -> list[PracticeAttempt]:
        return read_local_practice_attempts(self._store.attempts_path)
