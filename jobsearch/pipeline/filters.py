# jobsearch/pipeline/filters.py
import logging
import re
from datetime import datetime
from typing import Optional

from jobsearch.models.job import DateFilterOutcome, JobResult
from jobsearch.pipeline.normalize import (
    age_in_days,
    employment_type_matches,
    is_work_arrangement,
    location_part_matches,
    parse_iso_date,
    parse_location,
)

logger = logging.getLogger(__name__)

DATE_WINDOWS: dict[str, int] = {
    "24h": 1,
    "3d": 3,
    "7d": 7,
    "14d": 14,
    "30d": 30,
}

CONTRACT_KEYWORDS = [
    "contract", "contractor", "freelance", "1099", "w2", "corp-to-corp",
    "c2c", "consulting", "consultant", "interim", "fractional",
]

LOCAL_REMOTE_TYPES = {"local", "onsite", "hybrid"}


# ---------------------
# Date
# ---------------------
def filter_by_date(jobs: list[JobResult], date_posted: Optional[str], now: Optional[datetime] = None) -> list[JobResult]:
    max_days = DATE_WINDOWS.get(date_posted or "any")
    if max_days is None:
        return jobs
    out = []
    for job in jobs:
        age = age_in_days(job.posted_date, now)
        if age is not None and age <= max_days:
            out.append(job)
    return out


def apply_date_filter(
    jobs: list[JobResult], date_posted: Optional[str], now: Optional[datetime] = None
) -> tuple[list[JobResult], DateFilterOutcome]:
    """
    Date filter with relaxation: when a real window removes every job from a
    non-empty set, the unfiltered set is returned instead and the outcome is
    marked ``relaxed``. ``strict_count`` always reports what the strict filter
    kept, so callers can tell the two apart.
    """
    requested = date_posted or "any"
    filtered = filter_by_date(jobs, requested, now)
    outcome = DateFilterOutcome(requested=requested, strict_count=len(filtered))
    logger.info("[date] %r filter: %d -> %d jobs", requested, len(jobs), len(filtered))
    if not filtered and jobs and requested != "any":
        logger.info("[date] %r too restrictive, keeping all %d jobs", requested, len(jobs))
        outcome.relaxed = True
        return list(jobs), outcome
    return filtered, outcome


# ---------------------
# Contract
# ---------------------
def is_contract_job(job: JobResult) -> bool:
    text = job.model_dump_json().lower()
    return any(k in text for k in CONTRACT_KEYWORDS)


# ---------------------
# Dedup
# ---------------------
_ws_re = re.compile(r"\s+")


def dedup_key(job: JobResult) -> str:
    key = f"{job.company}_{job.title}_{job.location}".lower()
    return _ws_re.sub("_", key)


def deduplicate_jobs(jobs: list[JobResult]) -> list[JobResult]:
    seen: dict[str, JobResult] = {}
    for job in jobs:
        seen.setdefault(dedup_key(job), job)
    return list(seen.values())


# ---------------------
# Location / remote / employment
# ---------------------
def _allows_remote(remote_type: Optional[str]) -> bool:
    return remote_type in (None, "", "any", "remote")


def filter_by_location(jobs: list[JobResult], location: Optional[str], remote_type: Optional[str] = None) -> list[JobResult]:
    parts = parse_location(location)
    if not parts:
        return jobs
    out = []
    for job in jobs:
        job_loc = (job.location or "").lower()
        if is_work_arrangement(job.location):
            out.append(job)
        elif job.remote_type == "remote" and _allows_remote(remote_type):
            out.append(job)
        elif all(location_part_matches(p, job_loc) for p in parts):
            out.append(job)
    logger.info("[location] %r %s: %d -> %d jobs", location, parts, len(jobs), len(out))
    return out


def filter_by_remote_type(jobs: list[JobResult], remote_type: Optional[str]) -> list[JobResult]:
    if not remote_type or remote_type == "any":
        return jobs
    if remote_type == "remote":
        out = [j for j in jobs if j.remote_type == "remote"]
    elif remote_type in LOCAL_REMOTE_TYPES:
        out = [j for j in jobs if j.remote_type in ("hybrid", "onsite")]
    else:
        logger.warning("[remote] unknown remote type %r, not filtering", remote_type)
        return jobs
    logger.info("[remote] %r: %d -> %d jobs", remote_type, len(jobs), len(out))
    return out


def filter_by_employment_type(jobs: list[JobResult], employment_type: Optional[str]) -> list[JobResult]:
    if not employment_type or employment_type == "any":
        return jobs
    out = [j for j in jobs if employment_type_matches(j.employment_type, employment_type)]
    logger.info("[employment] %r: %d -> %d jobs", employment_type, len(jobs), len(out))
    return out


# ---------------------
# Ordering
# ---------------------
def _sort_key(job: JobResult):
    posted = parse_iso_date(job.posted_date)
    ts = posted.timestamp() if posted else float("-inf")
    score = job.match_score
    return (score is None, -(score or 0), -ts)


def sort_jobs(jobs: list[JobResult]) -> list[JobResult]:
    """Scored jobs by match_score desc; ties and unscored by posted_date desc."""
    return sorted(jobs, key=_sort_key)
