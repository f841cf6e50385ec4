"""
Boolean search strings, as typed by recruiters:

    (Engineer OR Developer) AND Python -Senior

Parsed into alternate titles (searched separately), skills (at least one must
appear in the posting) and exclusions (none may appear).
"""
import logging
import re
from dataclasses import dataclass, field

from jobsearch.models.job import JobResult

logger = logging.getLogger(__name__)

# "-term" only at a word start so hyphenated words (full-stack) survive
_exclusion_re = re.compile(r"""(?:^|(?<=\s))-["']?([^"'\s]+)["']?|\bNOT\s+["']?([^"'\s]+)["']?""", re.I)
_group_re = re.compile(r"\(([^)]+)\)")
_or_re = re.compile(r"\s+OR\s+", re.I)
_and_re = re.compile(r"\s+AND\s+", re.I)
_skill_re = re.compile(r"""\bAND\s+["']?([^"'\s]+)["']?""", re.I)
_quotes_re = re.compile(r"""['"]""")


@dataclass
class BooleanQuery:
    titles: list[str] = field(default_factory=list)
    skills: list[str] = field(default_factory=list)
    exclusions: list[str] = field(default_factory=list)


def _clean(term: str) -> str:
    return _quotes_re.sub("", term).strip()


def parse_boolean_string(boolean_string: str) -> BooleanQuery:
    parsed = BooleanQuery()

    for m in _exclusion_re.finditer(boolean_string):
        parsed.exclusions.append((m.group(1) or m.group(2)).strip())
    clean = _exclusion_re.sub("", boolean_string)

    for m in _group_re.finditer(clean):
        for title in _or_re.split(m.group(1)):
            if _clean(title):
                parsed.titles.append(_clean(title))

    if not parsed.titles:
        parts = _or_re.split(clean)
        if len(parts) > 1:
            for part in parts:
                title = _clean(_and_re.split(part)[0])
                if title:
                    parsed.titles.append(title)

    if not parsed.titles:
        first = _clean(_and_re.split(clean)[0])
        if first:
            parsed.titles.append(first)

    for m in _skill_re.finditer(clean):
        skill = m.group(1).strip()
        if skill.startswith("(") or skill in parsed.titles:
            continue
        parsed.skills.append(skill)

    logger.info(
        "[boolean] titles=%d skills=%d exclusions=%d",
        len(parsed.titles), len(parsed.skills), len(parsed.exclusions),
    )
    return parsed


def apply_boolean_filters(jobs: list[JobResult], parsed: BooleanQuery) -> list[JobResult]:
    out = jobs
    if parsed.skills:
        skills = [s.lower() for s in parsed.skills]
        before = len(out)
        out = [j for j in out if any(s in _job_text(j) for s in skills)]
        logger.info("[boolean] skill filter %s: %d -> %d", parsed.skills, before, len(out))
    if parsed.exclusions:
        exclusions = [e.lower() for e in parsed.exclusions]
        before = len(out)
        out = [j for j in out if not any(e in _job_text(j) for e in exclusions)]
        logger.info("[boolean] exclusion filter %s: %d -> %d", parsed.exclusions, before, len(out))
    return out


def _job_text(job: JobResult) -> str:
    return f"{job.title} {job.description or ''}".lower()
