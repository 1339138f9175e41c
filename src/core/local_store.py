"""JSON-file store for per-interview checklists and cached practice attempts.

Layout:
  checklist file  {"<interview_id>": {"items": [{"id", "text", "done"}, ...]}}
  attempts file   [{"jobId", "text" | "question", "origin", "code", "elapsedMs"}, ...]

Readers never raise: missing files and corrupt JSON read as absence.
"""

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from src.core.schemas import ChecklistItem, PracticeAttempt

logger = logging.getLogger(__name__)


def _load_json(path: str | Path) -> Any:
    """Return parsed JSON, or None when the file is missing or corrupt."""
    path = Path(path)
    if not path.exists():
        return None
    try:
        return json.loads(path.read_text())
    except (OSError, ValueError) as exc:
        logger.warning("Unreadable local store %s: %s", path, exc)
        return None


def read_checklist(path: str | Path, interview_id: str) -> list[ChecklistItem] | None:
    """Return the checklist items for an interview, or None if there is none."""
    data = _load_json(path)
    if not isinstance(data, dict):
        return None
    entry = data.get(str(interview_id))
    if not isinstance(entry, dict):
        return None
    raw_items = entry.get("items")
    if not isinstance(raw_items, list):
        return None

    items: list[ChecklistItem] = []
    for raw in raw_items:
        try:
            items.append(ChecklistItem.model_validate(raw))
        except ValidationError:
            logger.debug("Skipping malformed checklist item for %s: %r", interview_id, raw)
    return items


def read_local_practice_attempts(path: str | Path) -> list[PracticeAttempt]:
    """Return cached practice attempts; empty list when missing or corrupt."""
    data = _load_json(path)
    if not isinstance(data, list):
        return []

    attempts: list[PracticeAttempt] = []
    for raw in data:
        if not raw:
            continue
        try:
            attempts.append(PracticeAttempt.model_validate(raw))
        except ValidationError:
            logger.debug("Skipping malformed practice attempt: %r", raw)
    return attempts


def save_checklist(path: str | Path, interview_id: str, items: list[ChecklistItem]) -> None:
    """Write (or replace) one interview's checklist, keeping other entries."""
    path = Path(path)
    data = _load_json(path)
    if not isinstance(data, dict):
        data = {}
    data[str(interview_id)] = {"items": [item.model_dump() for item in items]}
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2))


def save_practice_attempts(path: str | Path, attempts: list[PracticeAttempt]) -> None:
    """Overwrite the attempts cache using the cache's camelCase keys."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = [a.model_dump(by_alias=True) for a in attempts]
    path.write_text(json.dumps(payload, indent=2))
