"""Research-completion reader for interview preparation checklists."""

import logging
from collections.abc import Awaitable, Callable

from src.core.schemas import ChecklistItem

logger = logging.getLogger(__name__)

ChecklistReader = Callable[[str], Awaitable[list[ChecklistItem] | None]]

RESEARCH_ID_SUFFIX = "-research"


def find_research_item(items: list[ChecklistItem] | None) -> ChecklistItem | None:
    """Return the first item whose id ends with '-research' or whose text mentions research."""
    if not items:
        return None
    for item in items:
        if item.id.endswith(RESEARCH_ID_SUFFIX) or "research" in item.text.lower():
            return item
    return None


def checklist_research_done(items: list[ChecklistItem] | None) -> bool:
    item = find_research_item(items)
    return item is not None and item.done


async def is_research_done(interview_id: str, read_checklist: ChecklistReader) -> bool:
    """Load the interview's checklist and report whether its research item is done.

    A failing reader counts as "no checklist".
    """
    try:
        items = await read_checklist(interview_id)
    except Exception as exc:  # noqa: BLE001
        logger.debug("Checklist read failed for %s: %s", interview_id, exc)
        return False
    return checklist_research_done(items)
