from typing import Optional

import httpx

from jobsearch.adapters.base import BaseAdapter, SourcePage
from jobsearch.errors import SourceError
from jobsearch.models.job import JobResult, SearchFilters
from jobsearch.pipeline.filters import DATE_WINDOWS
from jobsearch.pipeline.normalize import annualize, infer_remote_type, iso_or_now, utcnow

# Docs: https://developer.usajobs.gov/api-reference/get-api-search
SEARCH_URL = "https://data.usajobs.gov/api/search"


class USAJobsAdapter(BaseAdapter):
    """USAJobs.gov search API. Needs an API key and the e-mail it was registered with."""
    name = "usajobs"
    label = "USAJobs.gov"

    def __init__(self, api_key: Optional[str], email: Optional[str], timeout: float = 10.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__(timeout, transport)
        self.api_key = api_key
        self.email = email

    def is_configured(self) -> bool:
        return bool(self.api_key and self.email)

    def build_params(self, query: str, location: Optional[str], filters: SearchFilters) -> dict:
        params = {"Keyword": query, "ResultsPerPage": "100"}
        if location:
            params["LocationName"] = location
            if filters.radius_miles:
                params["Radius"] = str(int(filters.radius_miles))
        days = DATE_WINDOWS.get(filters.date_posted)
        if days:
            params["DatePosted"] = str(days)
        if filters.remote_type == "remote":
            params["RemoteIndicator"] = "True"
        return params

    def map_job(self, item: dict) -> JobResult:
        j = item.get("MatchedObjectDescriptor") or {}
        details = (j.get("UserArea") or {}).get("Details") or {}
        pay = (j.get("PositionRemuneration") or [{}])[0]
        period = pay.get("RateIntervalCode")
        salary_min = float(pay["MinimumRange"]) if pay.get("MinimumRange") else None
        salary_max = float(pay["MaximumRange"]) if pay.get("MaximumRange") else None
        schedule = (j.get("PositionSchedule") or [{}])[0]
        apply_uris = j.get("ApplyURI") or []
        location = j.get("PositionLocationDisplay")
        description = details.get("JobSummary") or j.get("QualificationSummary")
        remote = details.get("RemoteIndicator") in (True, "true", "True")
        return JobResult(
            id=f"usajobs_{j.get('PositionID') or item.get('MatchedObjectId')}",
            title=j.get("PositionTitle") or "",
            company=j.get("OrganizationName") or j.get("DepartmentName") or "",
            location=location,
            salary_min=annualize(salary_min, period),
            salary_max=annualize(salary_max, period),
            description=description,
            posted_date=iso_or_now(j.get("PublicationStartDate")),
            apply_url=apply_uris[0] if apply_uris else j.get("PositionURI"),
            source=self.label,
            remote_type="remote" if remote else infer_remote_type(location, description),
            employment_type=schedule.get("Name"),
        )

    async def search(self, query: str, location: Optional[str], filters: SearchFilters) -> SourcePage:
        headers = {
            "Host": "data.usajobs.gov",
            "User-Agent": self.email,
            "Authorization-Key": self.api_key,
        }
        async with self.client() as client:
            r = await client.get(SEARCH_URL, params=self.build_params(query, location, filters), headers=headers)
        if r.status_code != 200:
            raise SourceError(self.name, f"USAJobs API failed: {r.status_code}")
        data = r.json()
        items = (data.get("SearchResult") or {}).get("SearchResultItems") or []
        return SourcePage([self.map_job(item) for item in items])
