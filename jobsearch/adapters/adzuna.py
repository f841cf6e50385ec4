from typing import Optional

import httpx

from jobsearch.adapters.base import BaseAdapter, SourcePage
from jobsearch.errors import SourceError
from jobsearch.models.job import JobResult, SearchFilters
from jobsearch.pipeline.filters import DATE_WINDOWS
from jobsearch.pipeline.normalize import infer_remote_type, iso_or_now

KM_PER_MILE = 1.609344

# Adzuna flags one of these per contract kind
EMPLOYMENT_FLAGS = {
    "full-time": "full_time",
    "part-time": "part_time",
    "contract": "contract",
    "freelance": "contract",
}


def _search_url(country: str, page: int) -> str:
    """Adzuna paginates with integer pages: /search/1, /search/2, ..."""
    return f"https://api.adzuna.com/v1/api/jobs/{country}/search/{page}"


class AdzunaAdapter(BaseAdapter):
    name = "adzuna"
    label = "Adzuna"

    def __init__(self, app_id: Optional[str], app_key: Optional[str], country: str = "us",
                 timeout: float = 15.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__(timeout, transport)
        self.app_id = app_id
        self.app_key = app_key
        self.country = country

    def is_configured(self) -> bool:
        return bool(self.app_id and self.app_key)

    def build_params(self, query: str, location: Optional[str], filters: SearchFilters) -> dict:
        params = {
            "app_id": self.app_id,
            "app_key": self.app_key,
            "what": query,
            "results_per_page": "50",
            "content-type": "application/json",
        }
        if location:
            params["where"] = location
            if filters.radius_miles:
                params["distance"] = str(round(filters.radius_miles * KM_PER_MILE))
        days = DATE_WINDOWS.get(filters.date_posted)
        if days:
            params["max_days_old"] = str(days)
        if filters.salary_min:
            params["salary_min"] = str(int(filters.salary_min))
        if filters.salary_max:
            params["salary_max"] = str(int(filters.salary_max))
        flag = EMPLOYMENT_FLAGS.get(filters.employment_type or "")
        if flag:
            params[flag] = "1"
        return params

    def map_job(self, x: dict) -> JobResult:
        location = (x.get("location") or {}).get("display_name")
        description = x.get("description")
        return JobResult(
            id=f"adzuna_{x.get('id')}",
            title=(x.get("title") or "").strip(),
            company=(x.get("company") or {}).get("display_name") or "",
            location=location,
            salary_min=x.get("salary_min"),
            salary_max=x.get("salary_max"),
            description=description,
            posted_date=iso_or_now(x.get("created")),
            apply_url=x.get("redirect_url"),
            source=self.label,
            remote_type=infer_remote_type(location, description),
            employment_type=x.get("contract_time") or x.get("contract_type"),
        )

    async def search(self, query: str, location: Optional[str], filters: SearchFilters) -> SourcePage:
        async with self.client() as client:
            r = await client.get(_search_url(self.country, 1), params=self.build_params(query, location, filters))
        if r.status_code != 200:
            raise SourceError(self.name, f"Adzuna API failed: {r.status_code}")
        data = r.json()
        return SourcePage([self.map_job(x) for x in data.get("results") or []])
