"""Record matching: decides whether a preparation record belongs to an interview.

Two strategies, tried in order:
  1. JobIdMatcher         exact, the record's job id equals the interview's linked job id
  2. TextHeuristicMatcher fallback, the interview title or company name appears
                          (case-insensitive substring) in the record's free text

Both the practice aggregator and the mock counter go through MatchStrategy,
so either strategy can be swapped without touching the aggregation logic.
"""

import logging
from typing import Protocol

from pydantic import BaseModel, ConfigDict

from src.core.schemas import Interview, JobRecord

logger = logging.getLogger(__name__)


class MatchContext(BaseModel):
    """Interview-side keys for matching, pre-normalized to lowercase."""

    model_config = ConfigDict(frozen=True)

    job_id: int | None = None
    title: str = ""
    company: str = ""


class RecordMatcher(Protocol):
    """A matcher takes a record's job id and lowercased text and returns a verdict."""

    def __call__(self, job_id: int | None, text: str, context: MatchContext) -> bool: ...


class JobIdMatcher:
    """Match when the record references the interview's linked job."""

    def __call__(self, job_id: int | None, text: str, context: MatchContext) -> bool:
        return context.job_id is not None and job_id == context.job_id


class TextHeuristicMatcher:
    """Match when the interview title or company name occurs in the record text."""

    def __call__(self, job_id: int | None, text: str, context: MatchContext) -> bool:
        if context.title and context.title in text:
            return True
        return bool(context.company) and context.company in text


class MatchStrategy:
    """Job-id match first, then the text heuristic when the caller allows it."""

    def __init__(
        self,
        by_job_id: RecordMatcher | None = None,
        by_text_heuristic: RecordMatcher | None = None,
    ) -> None:
        self.by_job_id = by_job_id or JobIdMatcher()
        self.by_text_heuristic = by_text_heuristic or TextHeuristicMatcher()

    def matches(
        self,
        job_id: int | None,
        text: str,
        context: MatchContext,
        *,
        allow_text: bool = True,
    ) -> bool:
        if self.by_job_id(job_id, text, context):
            return True
        return allow_text and self.by_text_heuristic(job_id, text, context)


def build_match_context(interview: Interview, jobs_by_id: dict[str, JobRecord]) -> MatchContext:
    """Derive the matching keys for an interview.

    Company is the linked job's company name. When the reference does not
    resolve to a known job and is free text (not a numeric id), the reference
    text itself stands in for the company.
    """
    company = ""
    ref = interview.linked_job_ref
    if ref:
        job = jobs_by_id.get(ref)
        if job is not None:
            company = job.company_name
        elif interview.linked_job_id is None:
            company = ref
    context = MatchContext(
        job_id=interview.linked_job_id,
        title=interview.title.strip().lower(),
        company=company.strip().lower(),
    )
    logger.debug(
        "Match context for %s: job_id=%s title=%r company=%r",
        interview.id, context.job_id, context.title, context.company,
    )
    return context
