"""Mock-interview repetition count and its diminishing-returns boost.

boost(n) = min(100, round((1 - decay**n) * 100)); with decay 0.7:
n=1 -> 30, n=2 -> 51, n=3 -> 66.
"""

import logging
from collections.abc import Iterable

from src.core.numeric import round_half_up
from src.core.schemas import PracticeAttempt, PreparationActivity
from src.pipeline.matcher import MatchContext, MatchStrategy
from src.pipeline.practice import is_interview_activity

logger = logging.getLogger(__name__)


def mock_boost(count: int, decay: float = 0.7) -> int:
    if count <= 0:
        return 0
    return min(100, round_half_up((1 - decay**count) * 100))


def count_mock_sessions(
    context: MatchContext,
    activities: Iterable[PreparationActivity],
    attempts: Iterable[PracticeAttempt],
    strategy: MatchStrategy | None = None,
) -> int:
    """Count mock/interview records that match the interview, once per record.

    Activities are typed by activity_type, attempts by origin. The count is
    not deduplicated across the two sources.
    """
    strategy = strategy or MatchStrategy()
    count = 0

    try:
        for activity in activities:
            if is_interview_activity(activity.activity_type) and strategy.matches(
                activity.job_id, activity.search_text, context,
            ):
                count += 1
    except Exception as exc:  # noqa: BLE001
        logger.warning("Ignoring activity log while counting mocks: %s", exc)

    try:
        for attempt in attempts:
            if is_interview_activity(attempt.origin) and strategy.matches(
                attempt.job_id, attempt.search_text, context,
            ):
                count += 1
    except Exception as exc:  # noqa: BLE001
        logger.warning("Ignoring practice attempts while counting mocks: %s", exc)

    return count
