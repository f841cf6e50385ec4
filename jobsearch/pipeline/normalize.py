# jobsearch/pipeline/normalize.py
import html
import logging
import math
import re
from datetime import datetime, timedelta, timezone
from typing import Optional

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

HOURS_PER_YEAR = 2080

# ---------------------------
# Work arrangement
# ---------------------------

REMOTE_TYPES = ("remote", "hybrid", "onsite")

# Location values that describe how, not where, someone works
WORK_ARRANGEMENT_WORDS = {
    "remote", "hybrid", "onsite", "on-site", "on site", "in-office", "in office",
    "flexible", "anywhere", "remote first", "remote-first", "worldwide",
}


def infer_remote_type(location: Optional[str], description: Optional[str] = None) -> str:
    loc = (location or "").lower()
    desc = (description or "").lower()
    if "remote" in loc or "fully remote" in desc:
        return "remote"
    if "hybrid" in loc or "hybrid" in desc:
        return "hybrid"
    return "onsite"


def is_work_arrangement(location: Optional[str]) -> bool:
    loc = re.sub(r"[()\[\]]", "", (location or "")).strip().lower()
    return loc in WORK_ARRANGEMENT_WORDS


# ---------------------------
# Salary
# ---------------------------

_AMOUNT = r"\$(\d+(?:,\d+)*(?:\.\d+)?[KkMm]?)"
_RANGE_SEP = r"\s*(?:–|-|to)\s*"
_hourly_re = re.compile(_AMOUNT + _RANGE_SEP + _AMOUNT + r"\s*(?:an?\s*hour|/\s*hr|/\s*hour|per\s*hour)", re.I)
_yearly_re = re.compile(_AMOUNT + _RANGE_SEP + _AMOUNT + r"\s*(?:a\s*year|/\s*year|/\s*yr|per\s*year|annually)", re.I)
_single_re = re.compile(_AMOUNT + r"\s*(a\s*year|an?\s*hour)", re.I)

_PERIOD_MULTIPLIER = {
    "hour": HOURS_PER_YEAR,
    "day": 260,
    "week": 52,
    "biweek": 26,
    "month": 12,
    "year": 1,
}
# USAJobs RateIntervalCode values
_PERIOD_ALIASES = {"pa": "year", "ph": "hour", "pd": "day", "pw": "week", "bw": "biweek", "pm": "month"}


def _parse_amount(text: str) -> float:
    text = text.replace(",", "")
    if text[-1:] in ("k", "K"):
        return float(text[:-1]) * 1_000
    if text[-1:] in ("m", "M"):
        return float(text[:-1]) * 1_000_000
    return float(text)


def annualize(amount: Optional[float], period: Optional[str]) -> Optional[float]:
    """Scale an amount paid per ``period`` to a yearly figure."""
    if amount is None:
        return None
    p = (period or "year").strip().lower()
    p = _PERIOD_ALIASES.get(p, p)
    for key, mult in _PERIOD_MULTIPLIER.items():
        if p.startswith(key):
            return float(amount) * mult
    return float(amount)


def parse_salary(text: Optional[str]) -> Optional[tuple[float, float]]:
    """
    Extract an annual (min, max) salary from free text such as
    "$120K–$150K a year" or "$45–$60 an hour". Hourly figures are
    annualized at 2080 hours.
    """
    if not text:
        return None
    m = _yearly_re.search(text)
    if m:
        return _parse_amount(m.group(1)), _parse_amount(m.group(2))
    m = _hourly_re.search(text)
    if m:
        return _parse_amount(m.group(1)) * HOURS_PER_YEAR, _parse_amount(m.group(2)) * HOURS_PER_YEAR
    m = _single_re.search(text)
    if m:
        amount = _parse_amount(m.group(1))
        if "hour" in m.group(2).lower():
            amount *= HOURS_PER_YEAR
        return amount, amount
    return None


# ---------------------------
# Dates
# ---------------------------

def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat()


_fraction_re = re.compile(r"\.(\d+)")


def parse_iso_date(value) -> Optional[datetime]:
    """Accept ISO-8601 strings (with or without 'Z') and epoch milliseconds."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    # fromisoformat before 3.11 only takes 3 or 6 fractional digits
    text = _fraction_re.sub(lambda m: "." + (m.group(1) + "000000")[:6], text, count=1)
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        return None
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def iso_or_now(value, now: Optional[datetime] = None) -> str:
    dt = parse_iso_date(value)
    return to_iso(dt or now or utcnow())


_leading_int_re = re.compile(r"(\d+)")


def parse_relative_date(text: str, now: Optional[datetime] = None) -> str:
    """
    Turn "3 days ago", "Posted Yesterday", "Posted 30+ Days Ago" and the like
    into an ISO timestamp. Granularity is whatever the unit was; unknown text
    falls back to ``now``.
    """
    now = now or utcnow()
    lower = (text or "").strip().lower()
    m = _leading_int_re.search(lower)
    n = int(m.group(1)) if m else 1

    if not lower or "just now" in lower or "today" in lower:
        return to_iso(now)
    if "yesterday" in lower:
        return to_iso(now - timedelta(days=1))
    if "minute" in lower:
        return to_iso(now - timedelta(minutes=n))
    if "hour" in lower:
        return to_iso(now - timedelta(hours=n))
    if "day" in lower:
        return to_iso(now - timedelta(days=n))
    if "week" in lower:
        return to_iso(now - timedelta(weeks=n))
    if "month" in lower:
        return to_iso(now - timedelta(days=30 * n))

    logger.warning("[dates] unknown relative date %r, defaulting to now", text)
    return to_iso(now)


def age_in_days(posted, now: Optional[datetime] = None) -> Optional[int]:
    dt = parse_iso_date(posted)
    if dt is None:
        return None
    seconds = abs(((now or utcnow()) - dt).total_seconds())
    return math.ceil(seconds / 86400)


# ---------------------------
# Text
# ---------------------------

def strip_html(text: Optional[str]) -> Optional[str]:
    """Plain text from an HTML (or entity-escaped HTML) description."""
    if not text:
        return text
    raw = html.unescape(text)
    if "<" not in raw:
        return raw.strip()
    return BeautifulSoup(raw, "lxml").get_text(" ", strip=True)


def company_from_slug(slug: str) -> str:
    return " ".join(w[:1].upper() + w[1:] for w in re.split(r"[-_]", slug) if w)


def matches_all_terms(query: str, text: str) -> bool:
    hay = (text or "").lower()
    return all(term in hay for term in (query or "").lower().split())


# ---------------------------
# Location
# ---------------------------

US_STATES = {
    "al": "alabama", "ak": "alaska", "az": "arizona", "ar": "arkansas", "ca": "california",
    "co": "colorado", "ct": "connecticut", "de": "delaware", "fl": "florida", "ga": "georgia",
    "hi": "hawaii", "id": "idaho", "il": "illinois", "in": "indiana", "ia": "iowa",
    "ks": "kansas", "ky": "kentucky", "la": "louisiana", "me": "maine", "md": "maryland",
    "ma": "massachusetts", "mi": "michigan", "mn": "minnesota", "ms": "mississippi",
    "mo": "missouri", "mt": "montana", "ne": "nebraska", "nv": "nevada", "nh": "new hampshire",
    "nj": "new jersey", "nm": "new mexico", "ny": "new york", "nc": "north carolina",
    "nd": "north dakota", "oh": "ohio", "ok": "oklahoma", "or": "oregon", "pa": "pennsylvania",
    "ri": "rhode island", "sc": "south carolina", "sd": "south dakota", "tn": "tennessee",
    "tx": "texas", "ut": "utah", "vt": "vermont", "va": "virginia", "wa": "washington",
    "wv": "west virginia", "wi": "wisconsin", "wy": "wyoming", "dc": "district of columbia",
}
_STATE_CODES = {name: code for code, name in US_STATES.items()}


def parse_location(location: Optional[str]) -> list[str]:
    """
    Split a requested location into lowercase city/state-like parts.
    "Houston, TX" -> ["houston", "tx"]; "Austin TX" -> ["austin", "tx"];
    "Denver" -> ["denver"].
    """
    loc = (location or "").strip().lower()
    if not loc:
        return []
    if "," in loc:
        return [p.strip() for p in loc.split(",") if p.strip()]
    tokens = loc.split()
    if len(tokens) > 1:
        if tokens[-1] in US_STATES:
            return [" ".join(tokens[:-1]), tokens[-1]]
        for n in (2, 1):
            tail = " ".join(tokens[-n:])
            if tail in _STATE_CODES and len(tokens) > n:
                return [" ".join(tokens[:-n]), tail]
    return [loc]


def location_part_matches(part: str, job_location: str) -> bool:
    if part in job_location:
        return True
    alias = US_STATES.get(part) or _STATE_CODES.get(part)
    return bool(alias) and alias in job_location


# ---------------------------
# Employment type
# ---------------------------

EMPLOYMENT_SYNONYMS: dict[str, list[str]] = {
    "full-time": ["full", "fulltime", "full_time", "permanent"],
    "part-time": ["part", "parttime", "part_time"],
    "contract": ["contract", "contractor", "freelance", "temporary"],
    "freelance": ["freelance", "contract", "contractor"],
    "internship": ["intern"],
}


def employment_type_matches(job_type: Optional[str], wanted: Optional[str]) -> bool:
    if not wanted or wanted == "any":
        return True
    if not job_type:
        return False
    jt = job_type.lower()
    synonyms = EMPLOYMENT_SYNONYMS.get(wanted.lower(), [wanted.lower()])
    return any(s in jt for s in synonyms)
