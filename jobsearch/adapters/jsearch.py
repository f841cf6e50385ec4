from typing import Optional

import httpx

from jobsearch.adapters.base import BaseAdapter, SourcePage
from jobsearch.errors import SourceError
from jobsearch.models.job import JobResult, SearchFilters
from jobsearch.pipeline.normalize import annualize, infer_remote_type, iso_or_now

SEARCH_URL = "https://jsearch.p.rapidapi.com/search"
RAPIDAPI_HOST = "jsearch.p.rapidapi.com"
KM_PER_MILE = 1.609344

DATE_POSTED = {
    "24h": "today",
    "3d": "3days",
    "7d": "week",
    "14d": "month",
    "30d": "month",
    "any": "all",
}
EMPLOYMENT_TYPES = {
    "full-time": "FULLTIME",
    "part-time": "PARTTIME",
    "contract": "CONTRACTOR",
    "freelance": "CONTRACTOR",
    "internship": "INTERN",
}
EXPERIENCE_REQUIREMENTS = {
    "entry": "no_experience",
    "junior": "under_3_years_experience",
    "mid": "more_than_3_years_experience",
    "senior": "more_than_3_years_experience",
    "executive": "more_than_3_years_experience",
}


class JSearchAdapter(BaseAdapter):
    """JSearch on RapidAPI; a meta-aggregator over LinkedIn, Indeed, Glassdoor and others."""
    name = "jsearch"
    label = "JSearch"

    def __init__(self, api_key: Optional[str], timeout: float = 15.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__(timeout, transport)
        self.api_key = api_key

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def build_params(self, query: str, location: Optional[str], filters: SearchFilters) -> dict:
        params = {
            "query": f"{query} in {location}" if location else query,
            "page": "1",
            "num_pages": "1",
            "date_posted": DATE_POSTED.get(filters.date_posted, "all"),
        }
        employment = EMPLOYMENT_TYPES.get(filters.employment_type or "")
        if employment:
            params["employment_types"] = employment
        if filters.remote_type == "remote":
            params["remote_jobs_only"] = "true"
        if filters.radius_miles and location:
            params["radius"] = str(round(filters.radius_miles * KM_PER_MILE))
        level = (filters.experience_level or "").lower()
        for key, requirement in EXPERIENCE_REQUIREMENTS.items():
            if key in level:
                params["job_requirements"] = requirement
                break
        return params

    def map_job(self, job: dict) -> JobResult:
        location = ", ".join(x for x in [job.get("job_city"), job.get("job_state"), job.get("job_country")] if x) or None
        description = job.get("job_description")
        period = job.get("job_salary_period")
        posted = job.get("job_posted_at_datetime_utc")
        if not posted and job.get("job_posted_at_timestamp"):
            posted = job["job_posted_at_timestamp"] * 1000
        skills = job.get("job_required_skills")
        return JobResult(
            id=f"jsearch_{job.get('job_id')}",
            title=job.get("job_title") or "",
            company=job.get("employer_name") or "",
            location=location,
            salary_min=annualize(job.get("job_min_salary"), period),
            salary_max=annualize(job.get("job_max_salary"), period),
            description=description,
            posted_date=iso_or_now(posted),
            apply_url=job.get("job_apply_link"),
            source=self.label,
            remote_type="remote" if job.get("job_is_remote") else infer_remote_type(location, description),
            employment_type=job.get("job_employment_type"),
            required_skills=list(skills) if skills else None,
        )

    async def search(self, query: str, location: Optional[str], filters: SearchFilters) -> SourcePage:
        headers = {"X-RapidAPI-Key": self.api_key, "X-RapidAPI-Host": RAPIDAPI_HOST}
        async with self.client() as client:
            r = await client.get(SEARCH_URL, params=self.build_params(query, location, filters), headers=headers)
        if r.status_code != 200:
            raise SourceError(self.name, f"JSearch API failed: {r.status_code}")
        data = r.json()
        return SourcePage([self.map_job(j) for j in data.get("data") or []])
