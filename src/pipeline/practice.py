"""Practice-time aggregation over the activity log and the local attempt cache.

Activity log: only records inside the trailing window (or undated) count. A
record counts when it references the linked job, or when it is an
interview/mock activity whose description or notes mention the interview
title or company.

Attempt cache: no window. Job id first, then the title/company text fallback.

The total is not capped here; the scorer normalizes it.
"""

import logging
from collections.abc import Iterable
from datetime import datetime, timedelta

from src.core.numeric import round_half_up
from src.core.schemas import PracticeAttempt, PreparationActivity, as_utc
from src.pipeline.matcher import MatchContext, MatchStrategy

logger = logging.getLogger(__name__)

INTERVIEW_ACTIVITY_HINTS = ("interview", "mock")


def trailing_cutoff(now: datetime, window_days: int = 90) -> datetime:
    return as_utc(now) - timedelta(days=window_days)


def in_window(activity: PreparationActivity, cutoff: datetime) -> bool:
    """Undated activities always count."""
    return activity.activity_date is None or activity.activity_date >= cutoff


def is_interview_activity(activity_type: str) -> bool:
    kind = activity_type.lower()
    return any(hint in kind for hint in INTERVIEW_ACTIVITY_HINTS)


def activity_minutes(
    context: MatchContext,
    activities: Iterable[PreparationActivity],
    cutoff: datetime,
    strategy: MatchStrategy,
) -> float:
    total = 0.0
    for activity in activities:
        if not in_window(activity, cutoff):
            continue
        if strategy.matches(
            activity.job_id,
            activity.search_text,
            context,
            allow_text=is_interview_activity(activity.activity_type),
        ):
            total += activity.time_spent_minutes
    return total


def attempt_minutes(
    context: MatchContext,
    attempts: Iterable[PracticeAttempt],
    strategy: MatchStrategy,
) -> float:
    total = 0.0
    for attempt in attempts:
        if strategy.matches(attempt.job_id, attempt.search_text, context):
            total += attempt.minutes
    return total


def practice_minutes(
    context: MatchContext,
    activities: Iterable[PreparationActivity],
    attempts: Iterable[PracticeAttempt],
    now: datetime,
    *,
    window_days: int = 90,
    strategy: MatchStrategy | None = None,
) -> int:
    """Total practice minutes for one interview, rounded and never negative.

    A failure while reading either source contributes zero minutes.
    """
    strategy = strategy or MatchStrategy()
    cutoff = trailing_cutoff(now, window_days)

    from_log = 0.0
    try:
        from_log = activity_minutes(context, activities, cutoff, strategy)
    except Exception as exc:  # noqa: BLE001
        logger.warning("Ignoring activity log while aggregating practice: %s", exc)

    from_cache = 0.0
    try:
        from_cache = attempt_minutes(context, attempts, strategy)
    except Exception as exc:  # noqa: BLE001
        logger.warning("Ignoring practice attempts while aggregating practice: %s", exc)

    return max(0, round_half_up(from_log + from_cache))
