"""Tests for compute_readiness, score_interviews and the ReadinessBoard."""

import asyncio
import json
from datetime import datetime, timedelta, timezone

from src.core.config import ScoringConfig
from src.core.schemas import (
    ChecklistItem,
    Interview,
    InterviewStatus,
    JobRecord,
    PracticeAttempt,
    PreparationActivity,
)
from src.pipeline.cache import SnapshotCache
from src.pipeline.events import InvalidationBus, Topic
from src.pipeline.orchestrator import (
    ReadinessBoard,
    compute_readiness,
    export_results_json,
    score_interviews,
)
from src.sources.base import ReadinessSources

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
MESSAGES = ScoringConfig().actions


class FakeSources(ReadinessSources):
    """In-memory sources with call counters and an optional gate."""

    def __init__(
        self,
        interviews: list[Interview] | None = None,
        jobs: dict[str, JobRecord] | None = None,
        activities: list[PreparationActivity] | None = None,
        attempts: list[PracticeAttempt] | None = None,
        checklists: dict[str, list[ChecklistItem]] | None = None,
    ) -> None:
        self.interviews = interviews or []
        self.jobs = jobs or {}
        self.activities = activities or []
        self.attempts = attempts or []
        self.checklists = checklists or {}
        self.calls: dict[str, int] = {}
        self.gate: asyncio.Event | None = None

    def _count(self, name: str) -> None:
        self.calls[name] = self.calls.get(name, 0) + 1

    async def list_scheduled_interviews(self) -> list[Interview]:
        self._count("interviews")
        if self.gate is not None:
            await self.gate.wait()
        return list(self.interviews)

    async def list_jobs(self) -> dict[str, JobRecord]:
        self._count("jobs")
        return dict(self.jobs)

    async def list_preparation_activities(self) -> list[PreparationActivity]:
        self._count("activities")
        return list(self.activities)

    async def read_checklist(self, interview_id: str) -> list[ChecklistItem] | None:
        self._count("checklist")
        return self.checklists.get(interview_id)

    async def read_local_practice_attempts(self) -> list[PracticeAttempt]:
        self._count("attempts")
        return list(self.attempts)


class RecoveringJobsSources(FakeSources):
    """Job directory that fails on the first read only."""

    async def list_jobs(self) -> dict[str, JobRecord]:
        self._count("jobs")
        if self.calls["jobs"] == 1:
            raise ConnectionError("directory down")
        return dict(self.jobs)


class BrokenSources(FakeSources):
    async def list_jobs(self) -> dict[str, JobRecord]:
        raise ConnectionError("directory down")

    async def list_preparation_activities(self) -> list[PreparationActivity]:
        raise ConnectionError("log down")

    async def read_checklist(self, interview_id: str) -> list[ChecklistItem] | None:
        raise OSError("corrupt")

    async def read_local_practice_attempts(self) -> list[PracticeAttempt]:
        raise ValueError("bad json")


def _interview(**kwargs: object) -> Interview:
    defaults: dict[str, object] = {
        "id": "iv1",
        "title": "Senior Backend Engineer",
        "start": NOW + timedelta(days=3),
        "linked_job_ref": "42",
    }
    defaults.update(kwargs)
    return Interview(**defaults)  # type: ignore[arg-type]


JOBS = {"42": JobRecord(id="42", title="Backend Engineer, Senior", company_name="Acme")}


# ---------------------------------------------------------------------------
# compute_readiness scenarios
# ---------------------------------------------------------------------------


class TestComputeReadiness:
    def test_reordered_title_full_role_match(self) -> None:
        result = compute_readiness(_interview(), JOBS, [], [], NOW)
        assert result.role_match == 100

    def test_no_checklist_means_research_missing(self) -> None:
        result = compute_readiness(_interview(), JOBS, [], [], NOW, checklist=None)
        assert MESSAGES.research in result.actions

    def test_ninety_job_linked_minutes(self) -> None:
        activities = [PreparationActivity(
            job_id=42, activity_type="skills_practice", time_spent_minutes=90,
            activity_date=NOW - timedelta(days=10),
        )]
        result = compute_readiness(_interview(), JOBS, activities, [], NOW)
        assert result.practice_minutes == 90
        # role 30 + practice 0.22*30 + history 3.6 = 40.2
        assert result.raw_probability == 40

    def test_fully_prepared(self) -> None:
        activities = [
            PreparationActivity(
                job_id=42, activity_type="mock_interview", time_spent_minutes=100,
                activity_date=NOW - timedelta(days=d),
            )
            for d in (1, 5, 9)
        ]
        checklist = [ChecklistItem(id="iv1-research", text="Research Acme", done=True)]
        result = compute_readiness(_interview(), JOBS, activities, [], NOW, checklist=checklist)
        assert result.practice_minutes == 300
        assert result.raw_probability == 85
        assert result.confidence == 100
        assert result.actions == [MESSAGES.well_prepared]

    def test_nothing_available(self) -> None:
        result = compute_readiness(_interview(linked_job_ref=None, title="Onsite"), {}, [], [], NOW)
        assert result.raw_probability == 4
        assert result.confidence == 40
        assert result.actions == [MESSAGES.role_match, MESSAGES.research, MESSAGES.practice]

    def test_inputs_not_mutated(self) -> None:
        activities = [PreparationActivity(job_id=42, activity_type="mock", time_spent_minutes=10)]
        attempts = [PracticeAttempt(job_id=42, origin="mock", elapsed_ms=60000)]
        jobs = dict(JOBS)
        before = ([a.model_dump() for a in activities], [a.model_dump() for a in attempts], dict(jobs))
        compute_readiness(_interview(), jobs, activities, attempts, NOW)
        after = ([a.model_dump() for a in activities], [a.model_dump() for a in attempts], dict(jobs))
        assert before == after

    def test_deterministic_for_same_instant(self) -> None:
        activities = [PreparationActivity(job_id=42, activity_type="mock", time_spent_minutes=10)]
        a = compute_readiness(_interview(), JOBS, activities, [], NOW)
        b = compute_readiness(_interview(), JOBS, activities, [], NOW)
        assert a == b

    def test_window_depends_on_now(self) -> None:
        activities = [PreparationActivity(
            job_id=42, activity_type="skills_practice", time_spent_minutes=90,
            activity_date=NOW - timedelta(days=80),
        )]
        assert compute_readiness(_interview(), JOBS, activities, [], NOW).practice_minutes == 90
        later = NOW + timedelta(days=20)
        assert compute_readiness(_interview(), JOBS, activities, [], later).practice_minutes == 0

    def test_config_window(self) -> None:
        activities = [PreparationActivity(
            job_id=42, activity_type="skills_practice", time_spent_minutes=90,
            activity_date=NOW - timedelta(days=10),
        )]
        config = ScoringConfig(window_days=7)
        assert compute_readiness(_interview(), JOBS, activities, [], NOW, config=config).practice_minutes == 0


# ---------------------------------------------------------------------------
# score_interviews
# ---------------------------------------------------------------------------


class TestScoreInterviews:
    async def test_scores_only_scheduled(self) -> None:
        sources = FakeSources(
            interviews=[
                _interview(id="a"),
                _interview(id="b", status=InterviewStatus.CANCELLED),
                _interview(id="c", status=InterviewStatus.COMPLETED),
            ],
            jobs=JOBS,
        )
        results = await score_interviews(sources, NOW)
        assert set(results) == {"a"}

    async def test_reads_checklist_per_interview(self) -> None:
        sources = FakeSources(
            interviews=[_interview(id="a"), _interview(id="b")],
            jobs=JOBS,
            checklists={"a": [ChecklistItem(id="a-research", done=True)]},
        )
        results = await score_interviews(sources, NOW)
        assert MESSAGES.research not in results["a"].actions
        assert MESSAGES.research in results["b"].actions
        assert sources.calls["checklist"] == 2
        assert sources.calls["jobs"] == 1

    async def test_total_source_failure_still_scores(self) -> None:
        sources = BrokenSources(interviews=[_interview()])
        results = await score_interviews(sources, NOW)
        result = results["iv1"]
        # Without the job directory, role match compares against the raw ref "42".
        assert result.role_match == 0
        assert result.raw_probability == 4
        assert result.confidence == 40
        assert len(result.actions) == 3

    async def test_no_interviews(self) -> None:
        assert await score_interviews(FakeSources(), NOW) == {}

    async def test_cache_shared_between_calls(self) -> None:
        sources = FakeSources(interviews=[_interview()], jobs=JOBS)
        cache = SnapshotCache()
        await score_interviews(sources, NOW, cache=cache)
        await score_interviews(sources, NOW + timedelta(minutes=5), cache=cache)
        assert sources.calls["jobs"] == 1
        assert sources.calls["checklist"] == 2

    async def test_failed_source_retried_on_next_call(self) -> None:
        sources = RecoveringJobsSources(interviews=[_interview()], jobs=JOBS)
        cache = SnapshotCache()

        first = await score_interviews(sources, NOW, cache=cache)
        assert first["iv1"].role_match == 0

        second = await score_interviews(sources, NOW + timedelta(minutes=5), cache=cache)
        assert second["iv1"].role_match == 100
        assert sources.calls["jobs"] == 2


# ---------------------------------------------------------------------------
# ReadinessBoard
# ---------------------------------------------------------------------------


class TestReadinessBoard:
    async def test_refresh_applies_results(self) -> None:
        board = ReadinessBoard(FakeSources(interviews=[_interview()], jobs=JOBS), InvalidationBus())
        results = await board.refresh(NOW)
        assert results is not None
        assert board.results["iv1"].role_match == 100
        assert board.dirty is False

    async def test_invalidation_reloads_snapshot(self) -> None:
        sources = FakeSources(interviews=[_interview()], jobs=JOBS)
        bus = InvalidationBus()
        board = ReadinessBoard(sources, bus)
        await board.refresh(NOW)
        assert await board.refresh_if_dirty(NOW) is None

        sources.activities = [PreparationActivity(job_id=42, activity_type="mock", time_spent_minutes=120)]
        bus.publish(Topic.ACTIVITIES)
        assert board.dirty is True

        results = await board.refresh_if_dirty(NOW)
        assert results is not None
        assert results["iv1"].practice_minutes == 120
        assert sources.calls["activities"] == 2
        assert sources.calls["jobs"] == 1

    async def test_checklist_signal_marks_dirty(self) -> None:
        bus = InvalidationBus()
        board = ReadinessBoard(FakeSources(interviews=[_interview()]), bus)
        await board.refresh(NOW)
        bus.publish(Topic.CHECKLISTS)
        assert board.dirty is True

    async def test_dispose_during_refresh_discards_results(self) -> None:
        sources = FakeSources(interviews=[_interview()], jobs=JOBS)
        sources.gate = asyncio.Event()
        board = ReadinessBoard(sources, InvalidationBus())

        task = asyncio.create_task(board.refresh(NOW))
        await asyncio.sleep(0)
        board.dispose()
        sources.gate.set()

        assert await task is None
        assert board.results == {}

    async def test_newer_refresh_wins(self) -> None:
        sources = FakeSources(interviews=[_interview()], jobs=JOBS)
        sources.gate = asyncio.Event()
        board = ReadinessBoard(sources, InvalidationBus(), cache=SnapshotCache(stale_seconds=0))

        first = asyncio.create_task(board.refresh(NOW))
        await asyncio.sleep(0)
        second = asyncio.create_task(board.refresh(NOW + timedelta(seconds=1)))
        await asyncio.sleep(0)
        sources.gate.set()

        assert await first is None
        assert await second is not None
        assert "iv1" in board.results

    async def test_dispose_unsubscribes(self) -> None:
        bus = InvalidationBus()
        board = ReadinessBoard(FakeSources(), bus)
        assert bus.listener_count(Topic.JOBS) == 1
        board.dispose()
        board.dispose()
        assert bus.listener_count(Topic.JOBS) == 0
        assert board.disposed is True
        assert await board.refresh(NOW) is None


class TestExportResultsJson:
    def test_export(self) -> None:
        iv = _interview()
        result = compute_readiness(iv, JOBS, [], [], NOW)
        data = json.loads(export_results_json([iv, _interview(id="other")], {"iv1": result}))
        assert len(data) == 1
        assert data[0]["interview_id"] == "iv1"
        assert data[0]["raw_probability"] == result.raw_probability
        assert data[0]["actions"] == result.actions

    def test_empty(self) -> None:
        assert json.loads(export_results_json([_interview()], {})) == []
