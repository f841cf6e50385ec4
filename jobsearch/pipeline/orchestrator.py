# jobsearch/pipeline/orchestrator.py
from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, ContextManager, Iterable, Optional

import httpx

from jobsearch.adapters.adzuna import AdzunaAdapter
from jobsearch.adapters.ashby import AshbyAdapter
from jobsearch.adapters.base import BaseAdapter, SourcePage
from jobsearch.adapters.google_jobs import GoogleJobsAdapter
from jobsearch.adapters.greenhouse import GreenhouseAdapter
from jobsearch.adapters.jsearch import JSearchAdapter
from jobsearch.adapters.lever import LeverAdapter
from jobsearch.adapters.recruitee import RecruiteeAdapter
from jobsearch.adapters.usajobs import USAJobsAdapter
from jobsearch.adapters.workable import WorkableAdapter
from jobsearch.adapters.workday import WorkdayAdapter
from jobsearch.errors import InvalidSearchError
from jobsearch.models.job import PageCursor, SearchRequest, SearchResponse, SourceStatus
from jobsearch.pipeline.filters import (
    apply_date_filter,
    deduplicate_jobs,
    filter_by_employment_type,
    filter_by_location,
    filter_by_remote_type,
    is_contract_job,
    sort_jobs,
)
from jobsearch.pipeline.scoring import ScoringWeights, score_with_vault
from jobsearch.pipeline.storage import get_session, init_engine, upsert_listings

logger = logging.getLogger(__name__)

BOARD_SOURCES = ["greenhouse", "lever", "workday", "recruitee", "workable", "ashby"]

# A requested source name expands to these adapters
SOURCE_FAMILIES: dict[str, list[str]] = {
    "google_jobs": ["google_jobs"],
    "usajobs": ["usajobs"],
    "adzuna": ["adzuna"],
    "jsearch": ["jsearch"],
    "company_boards": BOARD_SOURCES,
}
SOURCE_FAMILIES.update({name: [name] for name in BOARD_SOURCES})

DEFAULT_SOURCES = ["google_jobs", "usajobs", "adzuna", "jsearch", "company_boards"]

SKIPPED = "skipped: not configured"

SessionFactory = Callable[[], ContextManager]


# --- adapter factory ----------------------------------------------------------

def build_adapters(settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> dict[str, BaseAdapter]:
    adapters: list[BaseAdapter] = [
        GoogleJobsAdapter(
            settings.SEARCHAPI_KEY,
            page_timeout=settings.GOOGLE_PAGE_TIMEOUT,
            total_timeout=settings.GOOGLE_TOTAL_TIMEOUT,
            max_pages=settings.GOOGLE_MAX_PAGES,
            results_per_page=settings.GOOGLE_RESULTS_PER_PAGE,
            transport=transport,
        ),
        USAJobsAdapter(settings.USAJOBS_API_KEY, settings.USAJOBS_EMAIL,
                       timeout=settings.USAJOBS_TIMEOUT, transport=transport),
        AdzunaAdapter(settings.ADZUNA_APP_ID, settings.ADZUNA_APP_KEY, country=settings.ADZUNA_COUNTRY,
                      timeout=settings.API_TIMEOUT, transport=transport),
        JSearchAdapter(settings.RAPIDAPI_KEY, timeout=settings.API_TIMEOUT, transport=transport),
        GreenhouseAdapter(settings.GREENHOUSE_BOARDS, settings.BOARD_TIMEOUT, transport),
        LeverAdapter(settings.LEVER_BOARDS, settings.BOARD_TIMEOUT, transport),
        WorkdayAdapter(settings.WORKDAY_BOARDS, settings.WORKDAY_TIMEOUT, transport),
        RecruiteeAdapter(settings.RECRUITEE_BOARDS, settings.BOARD_TIMEOUT, transport),
        WorkableAdapter(settings.WORKABLE_BOARDS, settings.BOARD_TIMEOUT, transport),
        AshbyAdapter(settings.ASHBY_BOARDS, settings.BOARD_TIMEOUT, transport),
    ]
    return {a.name: a for a in adapters}


def resolve_sources(requested: Optional[Iterable[str]]) -> list[str]:
    """Expand family names into adapter names, keeping order and dropping unknowns."""
    names: list[str] = []
    for source in requested or DEFAULT_SOURCES:
        members = SOURCE_FAMILIES.get(source)
        if members is None:
            logger.warning("[sources] unknown source %r ignored", source)
            continue
        for name in members:
            if name not in names:
                names.append(name)
    return names


def _error_status(exc: BaseException) -> str:
    return f"error: {str(exc) or exc.__class__.__name__}"


# --- aggregator ---------------------------------------------------------------

class JobAggregator:
    """
    Fans a search out to every enabled source, then filters, deduplicates,
    scores, sorts and stores what came back. A failing source never fails
    the search; it shows up as an ``error: ...`` status in ``sources``.
    """

    def __init__(
        self,
        adapters: dict[str, BaseAdapter],
        session_factory: Optional[SessionFactory] = None,
        weights: Optional[ScoringWeights] = None,
    ):
        self.adapters = adapters
        self.session_factory = session_factory
        self.weights = weights or ScoringWeights()

    async def _run_source(self, adapter: BaseAdapter, query: str, location: Optional[str], filters) -> SourcePage:
        return await adapter.search(query, location, filters)

    async def fan_out(self, names: list[str], query: str, location: Optional[str], filters):
        stats: dict[str, SourceStatus] = {}
        runnable: list[BaseAdapter] = []
        for name in names:
            adapter = self.adapters.get(name)
            if adapter is None:
                logger.warning("[sources] no adapter registered for %r", name)
                continue
            if not adapter.is_configured():
                logger.warning("[%s] not configured, skipping", name)
                stats[name] = SourceStatus(count=0, status=SKIPPED)
                continue
            runnable.append(adapter)

        logger.info("[search] waiting for %d sources", len(runnable))
        results = await asyncio.gather(
            *(self._run_source(a, query, location, filters) for a in runnable), return_exceptions=True
        )

        jobs = []
        cursor: Optional[PageCursor] = None
        for adapter, result in zip(runnable, results):
            if isinstance(result, BaseException):
                logger.warning("[%s] failed: %r", adapter.name, result)
                stats[adapter.name] = SourceStatus(count=0, status=_error_status(result))
                continue
            jobs.extend(result.jobs)
            stats[adapter.name] = SourceStatus(count=len(result.jobs), status="success")
            if result.next_cursor is not None:
                cursor = result.next_cursor

        for name, st in stats.items():
            logger.info("[search] %s %-14s: %d jobs (%s)", "✓" if st.status == "success" else "✗", name, st.count, st.status)
        logger.info("[search] total raw jobs: %d", len(jobs))
        return jobs, stats, cursor

    def _score(self, jobs, user_id: str):
        if self.session_factory is None:
            logger.warning("[vault] no storage configured, cannot score for user %s", user_id)
            return jobs
        try:
            with self.session_factory() as session:
                return score_with_vault(jobs, user_id, session, self.weights)
        except Exception:
            logger.exception("[vault] could not open a session for scoring")
            return jobs

    def _store(self, jobs) -> None:
        if self.session_factory is None or not jobs:
            return
        try:
            with self.session_factory() as session:
                n = upsert_listings(session, jobs)
        except Exception:
            logger.exception("[storage] error storing %d jobs", len(jobs))
            return
        logger.info("[storage] stored %d jobs", n)

    async def search(self, request: SearchRequest) -> SearchResponse:
        query = (request.query or "").strip()
        if not query:
            raise InvalidSearchError("Search query is required")

        started = time.monotonic()
        updates = {}
        if request.radius_miles is not None:
            updates["radius_miles"] = request.radius_miles
        if request.next_page_token is not None:
            updates["next_page_token"] = request.next_page_token
        filters = request.filters.model_copy(update=updates)
        logger.info("[search] %r location=%r filters=%s", query, request.location, filters.model_dump(exclude_none=True))

        names = resolve_sources(request.sources)
        all_jobs, stats, cursor = await self.fan_out(names, query, request.location, filters)

        jobs, date_outcome = apply_date_filter(all_jobs, filters.date_posted)

        if filters.contract_only:
            before = len(jobs)
            jobs = [j for j in jobs if is_contract_job(j)]
            logger.info("[contract] %d -> %d jobs", before, len(jobs))

        before = len(jobs)
        jobs = deduplicate_jobs(jobs)
        logger.info("[dedup] removed %d duplicates: %d -> %d jobs", before - len(jobs), before, len(jobs))

        if request.location:
            jobs = filter_by_location(jobs, request.location, filters.remote_type)
        jobs = filter_by_remote_type(jobs, filters.remote_type)
        jobs = filter_by_employment_type(jobs, filters.employment_type)

        # session work is blocking; keep it off the event loop
        if request.user_id:
            jobs = await asyncio.to_thread(self._score, jobs, request.user_id)

        jobs = sort_jobs(jobs)
        await asyncio.to_thread(self._store, jobs)

        elapsed_ms = int((time.monotonic() - started) * 1000)
        logger.info("[search] final results: %d jobs in %dms", len(jobs), elapsed_ms)
        return SearchResponse(
            jobs=jobs,
            total=len(jobs),
            search_params={
                "query": query,
                "location": request.location,
                "radiusMiles": filters.radius_miles,
                "filters": filters.model_dump(by_alias=True, mode="json"),
            },
            sources=stats,
            execution_time=elapsed_ms,
            next_page_token=cursor,
            date_filter=date_outcome,
        )


def build_aggregator(settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> JobAggregator:
    init_engine(settings.DB_URL)
    return JobAggregator(
        build_adapters(settings, transport),
        session_factory=get_session,
        weights=ScoringWeights.from_settings(settings),
    )
