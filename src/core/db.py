"""SQLite layer for scheduled interviews, jobs, and preparation activities.

The readers implement the engine's read contracts: they never raise.
Database errors degrade to empty results, rows with malformed dates are
skipped (activities) or lose their date (interviews).
"""

import logging
import sqlite3
from datetime import datetime
from pathlib import Path

from src.core.schemas import (
    Interview,
    InterviewStatus,
    JobRecord,
    PreparationActivity,
    as_utc,
)

logger = logging.getLogger(__name__)

_INTERVIEWS_TABLE = """
CREATE TABLE IF NOT EXISTS scheduled_interviews (
    id              TEXT    PRIMARY KEY,
    title           TEXT    NOT NULL DEFAULT '',
    interview_date  TEXT,
    linked_job_id   TEXT,
    status          TEXT    NOT NULL DEFAULT 'scheduled'
);
"""

_JOBS_TABLE = """
CREATE TABLE IF NOT EXISTS jobs (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    job_title       TEXT    NOT NULL DEFAULT '',
    company_name    TEXT    NOT NULL DEFAULT ''
);
"""

_ACTIVITIES_TABLE = """
CREATE TABLE IF NOT EXISTS preparation_activities (
    id                    INTEGER PRIMARY KEY AUTOINCREMENT,
    job_id                INTEGER,
    activity_type         TEXT    NOT NULL DEFAULT '',
    activity_description  TEXT,
    notes                 TEXT,
    time_spent_minutes    INTEGER,
    activity_date         TEXT
);
"""


def init_db(path: str | Path) -> sqlite3.Connection:
    """Create the database and tables, returning a connection."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute(_INTERVIEWS_TABLE)
    conn.execute(_JOBS_TABLE)
    conn.execute(_ACTIVITIES_TABLE)
    conn.commit()
    return conn


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp. Raises ValueError when malformed."""
    if value is None or not str(value).strip():
        return None
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return as_utc(datetime.fromisoformat(text))


# ---------------------------------------------------------------------------
# Writers (used by the owning subsystems and by tests)
# ---------------------------------------------------------------------------


def insert_interview(
    conn: sqlite3.Connection,
    interview_id: str,
    title: str,
    interview_date: datetime | str | None = None,
    linked_job_id: str | int | None = None,
    status: str = InterviewStatus.SCHEDULED.value,
) -> None:
    """Insert or replace a scheduled interview row."""
    if isinstance(interview_date, datetime):
        interview_date = interview_date.isoformat()
    conn.execute(
        """
        INSERT OR REPLACE INTO scheduled_interviews
            (id, title, interview_date, linked_job_id, status)
        VALUES (?, ?, ?, ?, ?)
        """,
        (
            interview_id,
            title,
            interview_date,
            None if linked_job_id is None else str(linked_job_id),
            status,
        ),
    )
    conn.commit()


def insert_job(conn: sqlite3.Connection, job_title: str, company_name: str = "") -> int:
    """Insert a job. Returns the row ID."""
    cursor = conn.execute(
        "INSERT INTO jobs (job_title, company_name) VALUES (?, ?)",
        (job_title, company_name),
    )
    conn.commit()
    return cursor.lastrowid or 0


def insert_preparation_activity(
    conn: sqlite3.Connection,
    activity_type: str,
    *,
    job_id: int | None = None,
    description: str = "",
    notes: str = "",
    time_spent_minutes: int | None = None,
    activity_date: datetime | str | None = None,
) -> int:
    """Append a preparation activity. Returns the row ID."""
    if isinstance(activity_date, datetime):
        activity_date = activity_date.isoformat()
    cursor = conn.execute(
        """
        INSERT INTO preparation_activities
            (job_id, activity_type, activity_description, notes,
             time_spent_minutes, activity_date)
        VALUES (?, ?, ?, ?, ?, ?)
        """,
        (job_id, activity_type, description, notes, time_spent_minutes, activity_date),
    )
    conn.commit()
    return cursor.lastrowid or 0


# ---------------------------------------------------------------------------
# Readers (read contracts)
# ---------------------------------------------------------------------------


def list_scheduled_interviews(conn: sqlite3.Connection) -> list[Interview]:
    """Return all interviews; empty list on database error."""
    try:
        rows = conn.execute(
            "SELECT id, title, interview_date, linked_job_id, status "
            "FROM scheduled_interviews ORDER BY interview_date"
        ).fetchall()
    except sqlite3.Error as exc:
        logger.warning("Failed to load scheduled interviews: %s", exc)
        return []

    interviews: list[Interview] = []
    for row in rows:
        try:
            start = parse_timestamp(row["interview_date"])
        except ValueError:
            logger.debug("Interview %s has malformed date %r", row["id"], row["interview_date"])
            start = None
        status = row["status"] or InterviewStatus.SCHEDULED.value
        if status not in {s.value for s in InterviewStatus}:
            logger.debug("Interview %s has unknown status %r", row["id"], status)
            continue
        interviews.append(
            Interview(
                id=str(row["id"]),
                title=row["title"],
                start=start,
                linked_job_ref=row["linked_job_id"],
                status=status,
            )
        )
    return interviews


def list_jobs(conn: sqlite3.Connection) -> dict[str, JobRecord]:
    """Return jobs keyed by string id; empty map on database error."""
    try:
        rows = conn.execute("SELECT id, job_title, company_name FROM jobs").fetchall()
    except sqlite3.Error as exc:
        logger.warning("Failed to load jobs: %s", exc)
        return {}
    return {
        str(row["id"]): JobRecord(
            id=str(row["id"]),
            title=row["job_title"] or "",
            company_name=row["company_name"] or "",
        )
        for row in rows
    }


def list_preparation_activities(
    conn: sqlite3.Connection,
    limit: int | None = None,
) -> list[PreparationActivity]:
    """Return preparation activities in log order; empty list on database error.

    The whole log is read unless ``limit`` is given, in which case only the
    newest ``limit`` rows are kept. Rows whose activity_date cannot be parsed
    are skipped.
    """
    query = """
        SELECT job_id, activity_type, activity_description, notes,
               time_spent_minutes, activity_date
        FROM preparation_activities
    """
    try:
        if limit is None:
            rows = conn.execute(query + " ORDER BY id").fetchall()
        else:
            rows = conn.execute(query + " ORDER BY id DESC LIMIT ?", (limit,)).fetchall()
            rows.reverse()
    except sqlite3.Error as exc:
        logger.warning("Failed to load preparation activities: %s", exc)
        return []

    activities: list[PreparationActivity] = []
    skipped = 0
    for row in rows:
        try:
            activity_date = parse_timestamp(row["activity_date"])
        except ValueError:
            skipped += 1
            continue
        activities.append(
            PreparationActivity(
                job_id=row["job_id"],
                activity_type=row["activity_type"],
                description=row["activity_description"],
                notes=row["notes"],
                time_spent_minutes=row["time_spent_minutes"],
                activity_date=activity_date,
            )
        )
    if skipped:
        logger.debug("Skipped %d activities with malformed dates", skipped)
    return activities
