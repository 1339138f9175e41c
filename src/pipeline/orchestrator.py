"""Orchestrator: wires sources, snapshot cache, signal components and scorer.

Data flow per refresh:
  1. Shared snapshots (interviews, jobs, activities, attempts) via SnapshotCache
  2. Per scheduled interview, concurrently:
       role match, research checklist, practice minutes, mock count
  3. Composite scorer -> ScoreResult
  4. ReadinessBoard applies the results only if it is still interested
"""

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable, Sequence
from datetime import datetime
from typing import TypeVar

from src.core.config import ScoringConfig
from src.core.schemas import (
    ChecklistItem,
    Interview,
    InterviewStatus,
    JobRecord,
    PracticeAttempt,
    PreparationActivity,
    ReadinessSignals,
    ScoreResult,
)
from src.pipeline.cache import SnapshotCache
from src.pipeline.events import InvalidationBus, Topic
from src.pipeline.matcher import MatchStrategy, build_match_context
from src.pipeline.mock_counter import count_mock_sessions
from src.pipeline.practice import practice_minutes
from src.pipeline.research import checklist_research_done, is_research_done
from src.pipeline.role_match import interview_role_match
from src.pipeline.scorer import score_readiness
from src.sources.base import ReadinessSources

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Cache keys per invalidation topic. Checklists are read per interview, uncached.
_CACHE_KEYS: dict[Topic, str] = {
    Topic.INTERVIEWS: "interviews",
    Topic.JOBS: "jobs",
    Topic.ACTIVITIES: "activities",
    Topic.ATTEMPTS: "attempts",
}


def gather_signals(
    interview: Interview,
    jobs_by_id: dict[str, JobRecord],
    activities: Sequence[PreparationActivity],
    attempts: Sequence[PracticeAttempt],
    now: datetime,
    *,
    research_done: bool,
    config: ScoringConfig,
    strategy: MatchStrategy | None = None,
) -> ReadinessSignals:
    """Run the four signal components for one interview."""
    strategy = strategy or MatchStrategy()
    context = build_match_context(interview, jobs_by_id)
    return ReadinessSignals(
        role_match=interview_role_match(interview, jobs_by_id),
        research_done=research_done,
        practice_minutes=practice_minutes(
            context, activities, attempts, now,
            window_days=config.window_days, strategy=strategy,
        ),
        mock_count=count_mock_sessions(context, activities, attempts, strategy),
    )


def compute_readiness(
    interview: Interview,
    jobs_by_id: dict[str, JobRecord],
    activities: Sequence[PreparationActivity],
    attempts: Sequence[PracticeAttempt],
    now: datetime,
    *,
    checklist: list[ChecklistItem] | None = None,
    config: ScoringConfig | None = None,
    strategy: MatchStrategy | None = None,
) -> ScoreResult:
    """Score one interview from already-loaded snapshots. Never raises."""
    config = config or ScoringConfig()
    signals = gather_signals(
        interview, jobs_by_id, activities, attempts, now,
        research_done=checklist_research_done(checklist),
        config=config,
        strategy=strategy,
    )
    return score_readiness(signals, config)


async def _safe_load(name: str, loader: Callable[[], Awaitable[T]], default: T) -> T:
    try:
        return await loader()
    except Exception as exc:  # noqa: BLE001
        logger.warning("Source '%s' failed, using empty snapshot: %s", name, exc)
        return default


async def score_interviews(
    sources: ReadinessSources,
    now: datetime,
    config: ScoringConfig | None = None,
    cache: SnapshotCache | None = None,
    strategy: MatchStrategy | None = None,
) -> dict[str, ScoreResult]:
    """Score every scheduled interview. Returns results keyed by interview id."""
    config = config or ScoringConfig()
    cache = cache or SnapshotCache()

    # A failed load is not cached; the next refresh retries the source.
    async def _snapshot(topic: Topic, loader: Callable[[], Awaitable[T]], default: T) -> T:
        key = _CACHE_KEYS[topic]
        return await _safe_load(key, lambda: cache.get(key, loader, now), default)

    interviews: list[Interview] = await _snapshot(
        Topic.INTERVIEWS, sources.list_scheduled_interviews, [],
    )
    jobs_by_id: dict[str, JobRecord] = await _snapshot(Topic.JOBS, sources.list_jobs, {})
    activities: list[PreparationActivity] = await _snapshot(
        Topic.ACTIVITIES, sources.list_preparation_activities, [],
    )
    attempts: list[PracticeAttempt] = await _snapshot(
        Topic.ATTEMPTS, sources.read_local_practice_attempts, [],
    )

    scheduled = [iv for iv in interviews if iv.status is InterviewStatus.SCHEDULED]

    async def _score_one(interview: Interview) -> tuple[str, ScoreResult]:
        done = await is_research_done(interview.id, sources.read_checklist)
        signals = gather_signals(
            interview, jobs_by_id, activities, attempts, now,
            research_done=done, config=config, strategy=strategy,
        )
        result = score_readiness(signals, config)
        logger.debug("Interview %s (%s): %d%%", interview.id, interview.title, result.raw_probability)
        return interview.id, result

    pairs = await asyncio.gather(*(_score_one(iv) for iv in scheduled))
    logger.info(
        "Scored %d scheduled interviews (%d skipped as not scheduled)",
        len(scheduled), len(interviews) - len(scheduled),
    )
    return dict(pairs)


class ReadinessBoard:
    """The consuming view: holds the latest results and re-scores on invalidation.

    Results from a refresh are dropped if the board was disposed, or a newer
    refresh started, while scoring was in flight.

    Usage::

        board = ReadinessBoard(sources, bus, settings.scoring)
        await board.refresh(now)
        bus.publish(Topic.ACTIVITIES)   # data owner signals a change
        await board.refresh_if_dirty(now)
        board.dispose()
    """

    def __init__(
        self,
        sources: ReadinessSources,
        bus: InvalidationBus,
        config: ScoringConfig | None = None,
        cache: SnapshotCache | None = None,
        strategy: MatchStrategy | None = None,
    ) -> None:
        self._sources = sources
        self._bus = bus
        self._config = config or ScoringConfig()
        self._cache = cache or SnapshotCache()
        self._strategy = strategy
        self._results: dict[str, ScoreResult] = {}
        self._generation = 0
        self._dirty = True
        self._disposed = False
        for topic in Topic:
            bus.subscribe(topic, self._on_invalidate)

    @property
    def results(self) -> dict[str, ScoreResult]:
        return dict(self._results)

    @property
    def dirty(self) -> bool:
        return self._dirty

    @property
    def disposed(self) -> bool:
        return self._disposed

    def _on_invalidate(self, topic: Topic) -> None:
        key = _CACHE_KEYS.get(topic)
        if key is not None:
            self._cache.invalidate(key)
        self._dirty = True
        logger.debug("Readiness board invalidated by '%s'", topic.value)

    async def refresh(self, now: datetime) -> dict[str, ScoreResult] | None:
        """Recompute all results. Returns None when the results were discarded."""
        if self._disposed:
            return None
        self._generation += 1
        generation = self._generation
        self._dirty = False

        results = await score_interviews(
            self._sources, now, self._config, self._cache, self._strategy,
        )

        if self._disposed or generation != self._generation:
            logger.debug("Discarding readiness results from refresh %d", generation)
            return None
        self._results = results
        return results

    async def refresh_if_dirty(self, now: datetime) -> dict[str, ScoreResult] | None:
        if not self._dirty:
            return None
        return await self.refresh(now)

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        for topic in Topic:
            self._bus.unsubscribe(topic, self._on_invalidate)


def export_results_json(
    interviews: Sequence[Interview],
    results: dict[str, ScoreResult],
) -> str:
    """Export scored interviews as a JSON string."""
    data = []
    for iv in interviews:
        result = results.get(iv.id)
        if result is None:
            continue
        data.append({
            "interview_id": iv.id,
            "title": iv.title,
            "start": iv.start.isoformat() if iv.start else None,
            "linked_job_ref": iv.linked_job_ref,
            **result.model_dump(),
        })
    return json.dumps(data, indent=2)
