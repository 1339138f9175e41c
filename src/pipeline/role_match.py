"""Token-overlap similarity between an interview title and its linked job title.

Score = round(100 * |A & B| / max(|A|, |B|)) over lowercase alphanumeric
token sets. The denominator is the larger set, not the union.
"""

import re

from src.core.numeric import round_half_up
from src.core.schemas import Interview, JobRecord

_TOKEN_SPLIT = re.compile(r"[^a-z0-9]+")


def tokenize(text: str | None) -> set[str]:
    """Split on non-alphanumeric runs, lowercase, drop empties."""
    if not text:
        return set()
    return {t for t in _TOKEN_SPLIT.split(str(text).lower()) if t}


def role_match(title_a: str | None, title_b: str | None) -> int:
    """Return the 0-100 token-overlap score for two titles."""
    tokens_a = tokenize(title_a)
    tokens_b = tokenize(title_b)
    if not tokens_a or not tokens_b:
        return 0
    common = len(tokens_a & tokens_b)
    return round_half_up(100 * common / max(len(tokens_a), len(tokens_b)))


def resolve_job_title(interview: Interview, jobs_by_id: dict[str, JobRecord]) -> str:
    """Title to compare against: the linked job's title, else the raw reference text."""
    ref = interview.linked_job_ref
    if not ref:
        return ""
    job = jobs_by_id.get(ref)
    if job is not None:
        return job.title
    return ref


def interview_role_match(interview: Interview, jobs_by_id: dict[str, JobRecord]) -> int:
    return role_match(interview.title, resolve_job_title(interview, jobs_by_id))
