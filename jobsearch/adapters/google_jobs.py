import asyncio
import logging
import uuid
from datetime import timedelta
from typing import Optional

import httpx

from jobsearch.adapters.base import BaseAdapter, SourcePage
from jobsearch.errors import SourceError
from jobsearch.models.job import GOOGLE_JOBS, JobResult, PageCursor, SearchFilters
from jobsearch.pipeline.boolean_query import apply_boolean_filters, parse_boolean_string
from jobsearch.pipeline.filters import deduplicate_jobs
from jobsearch.pipeline.normalize import infer_remote_type, parse_relative_date, parse_salary, to_iso, utcnow

logger = logging.getLogger(__name__)

SEARCH_URL = "https://www.searchapi.io/api/v1/search"
DEFAULT_LOCATION = "United States"
KM_PER_MILE = 1.609344

DATE_CHIPS = {
    "24h": "today",
    "3d": "3days",
    "7d": "week",
    "14d": "month",
    "30d": "month",
}
EMPLOYMENT_CHIPS = {
    "full-time": "FULLTIME",
    "contract": "CONTRACTOR",
    "freelance": "CONTRACTOR",
    "part-time": "PARTTIME",
    "internship": "INTERN",
}


class GoogleJobsAdapter(BaseAdapter):
    """
    Google Jobs through the searchapi.io proxy.

    Pages are fetched one after another (each page's token comes from the
    previous response) up to ``max_pages``, with a per-page timeout and an
    overall budget. A boolean search string with several alternate titles
    turns into one paged search per title, run concurrently.
    """
    name = GOOGLE_JOBS
    label = "Google Jobs"

    def __init__(
        self,
        api_key: Optional[str],
        page_timeout: float = 30.0,
        total_timeout: float = 60.0,
        max_pages: int = 5,
        results_per_page: int = 100,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(page_timeout, transport)
        self.api_key = api_key
        self.total_timeout = total_timeout
        self.max_pages = max_pages
        self.results_per_page = results_per_page

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def build_params(self, query: str, location: Optional[str], filters: SearchFilters, token: Optional[str] = None) -> dict:
        params = {
            "engine": "google_jobs",
            "q": query,
            "location": location or DEFAULT_LOCATION,
            "api_key": self.api_key,
            "num": str(self.results_per_page),
        }
        chips = []
        if filters.date_posted and filters.date_posted != "any":
            chips.append(f"date_posted:{DATE_CHIPS.get(filters.date_posted, 'month')}")
        employment_chip = EMPLOYMENT_CHIPS.get(filters.employment_type or "")
        if employment_chip:
            chips.append(f"employment_type:{employment_chip}")
        if chips:
            params["chips"] = ",".join(chips)
        if filters.radius_miles:
            params["lrad"] = str(round(filters.radius_miles * KM_PER_MILE))
        if token:
            params["next_page_token"] = token
        return params

    def map_job(self, job: dict, now=None) -> JobResult:
        now = now or utcnow()
        ext = job.get("detected_extensions") or {}
        if ext.get("posted_at"):
            posted = parse_relative_date(ext["posted_at"], now)
        else:
            posted = to_iso(now - timedelta(days=7))
        salary = parse_salary(ext.get("salary"))
        apply_options = job.get("apply_options") or []
        location = job.get("location")
        description = job.get("description")
        return JobResult(
            id=f"google_{job.get('job_id') or uuid.uuid4().hex[:9]}",
            title=job.get("title") or "",
            company=job.get("company_name") or "",
            location=location,
            description=description,
            posted_date=posted,
            apply_url=job.get("share_url") or (apply_options[0].get("link") if apply_options else None),
            source=self.label,
            remote_type="remote" if ext.get("work_from_home") else infer_remote_type(location, description),
            employment_type=ext.get("schedule_type") or ext.get("schedule"),
            salary_min=salary[0] if salary else None,
            salary_max=salary[1] if salary else None,
        )

    async def _fetch_page(self, client: httpx.AsyncClient, params: dict) -> tuple[list[JobResult], Optional[str]]:
        r = await client.get(SEARCH_URL, params=params)
        if r.status_code != 200:
            logger.error("[google_jobs] API error %s: %s", r.status_code, r.text[:500])
            raise SourceError(self.name, f"Google Jobs API failed: {r.status_code}")
        try:
            data = r.json()
        except ValueError as e:
            raise SourceError(self.name, f"malformed JSON: {e}") from e
        now = utcnow()
        jobs = [self.map_job(j, now) for j in data.get("jobs") or data.get("jobs_results") or []]
        token = (data.get("pagination") or {}).get("next_page_token")
        return jobs, token

    async def search_title(
        self, query: str, location: Optional[str], filters: SearchFilters, start_token: Optional[str] = None
    ) -> SourcePage:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.total_timeout
        jobs: list[JobResult] = []
        token = start_token
        async with self.client() as client:
            for page in range(self.max_pages):
                remaining = deadline - loop.time()
                if remaining <= 0:
                    logger.warning("[google_jobs] %r: %.0fs budget exhausted after %d pages", query, self.total_timeout, page)
                    break
                params = self.build_params(query, location, filters, token)
                try:
                    page_jobs, next_token = await asyncio.wait_for(
                        self._fetch_page(client, params), timeout=min(self.timeout, remaining)
                    )
                except (asyncio.TimeoutError, httpx.HTTPError, SourceError) as e:
                    if page == 0:
                        if isinstance(e, SourceError):
                            raise
                        raise SourceError(self.name, f"request failed: {e!r}") from e
                    logger.warning("[google_jobs] %r: page %d failed (%r), keeping %d jobs", query, page + 1, e, len(jobs))
                    break
                jobs.extend(page_jobs)
                logger.info("[google_jobs] %r page %d: %d jobs", query, page + 1, len(page_jobs))
                token = next_token
                if not page_jobs or not next_token:
                    token = None
                    break
        cursor = PageCursor(source=self.name, token=token) if token else None
        return SourcePage(jobs, cursor)

    async def search(self, query: str, location: Optional[str], filters: SearchFilters) -> SourcePage:
        cursor = filters.next_page_token
        start_token = cursor.token if cursor and cursor.source == self.name else None

        if not (filters.boolean_string and filters.boolean_string.strip()):
            return await self.search_title(query, location, filters, start_token)

        parsed = parse_boolean_string(filters.boolean_string)
        if len(parsed.titles) > 1:
            logger.info("[google_jobs] running %d title searches in parallel", len(parsed.titles))
            results = await asyncio.gather(
                *(self.search_title(t, location, filters) for t in parsed.titles), return_exceptions=True
            )
            failures = [r for r in results if isinstance(r, BaseException)]
            pages = [r for r in results if not isinstance(r, BaseException)]
            for err in failures:
                logger.warning("[google_jobs] title search failed: %s", err)
            if not pages:
                raise failures[0]
            combined = deduplicate_jobs([j for p in pages for j in p.jobs])
            logger.info("[google_jobs] %d titles -> %d unique jobs", len(parsed.titles), len(combined))
            # several cursors cannot be resumed as one
            return SourcePage(apply_boolean_filters(combined, parsed))

        if parsed.titles:
            query = parsed.titles[0]
        page = await self.search_title(query, location, filters, start_token)
        return SourcePage(apply_boolean_filters(page.jobs, parsed), page.next_cursor)
