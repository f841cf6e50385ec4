import asyncio

import httpx
import pytest

from jobsearch.adapters.adzuna import AdzunaAdapter
from jobsearch.adapters.jsearch import JSearchAdapter
from jobsearch.adapters.usajobs import USAJobsAdapter
from jobsearch.errors import SourceError
from jobsearch.models.job import SearchFilters


def run(adapter, query="Software Engineer", location=None, filters=None):
    return asyncio.run(adapter.search(query, location, filters or SearchFilters()))


USAJOBS_RESPONSE = {
    "SearchResult": {
        "SearchResultItems": [
            {
                "MatchedObjectId": "555",
                "MatchedObjectDescriptor": {
                    "PositionID": "VA-123",
                    "PositionTitle": "Software Engineer",
                    "OrganizationName": "Veterans Affairs",
                    "PositionLocationDisplay": "Washington, DC",
                    "PositionRemuneration": [{"MinimumRange": "30", "MaximumRange": "40", "RateIntervalCode": "PH"}],
                    "PositionSchedule": [{"Name": "Full-Time"}],
                    "PublicationStartDate": "2025-03-01T00:00:00",
                    "ApplyURI": ["https://www.usajobs.gov/job/555"],
                    "UserArea": {"Details": {"JobSummary": "Build systems", "RemoteIndicator": True}},
                },
            }
        ]
    }
}


def test_usajobs_request_and_mapping():
    def handler(request):
        assert request.headers["Authorization-Key"] == "key"
        assert request.headers["User-Agent"] == "me@example.com"
        assert request.url.params["Keyword"] == "Software Engineer"
        assert request.url.params["LocationName"] == "Denver, CO"
        assert request.url.params["Radius"] == "25"
        assert request.url.params["DatePosted"] == "7"
        return httpx.Response(200, json=USAJOBS_RESPONSE)

    adapter = USAJobsAdapter("key", "me@example.com", transport=httpx.MockTransport(handler))
    page = run(adapter, location="Denver, CO", filters=SearchFilters(date_posted="7d", radius_miles=25))
    job = page.jobs[0]
    assert job.id == "usajobs_VA-123"
    assert job.source == "USAJobs.gov"
    assert (job.salary_min, job.salary_max) == (62400, 83200)
    assert job.remote_type == "remote"
    assert job.employment_type == "Full-Time"
    assert job.apply_url == "https://www.usajobs.gov/job/555"
    assert job.posted_date == "2025-03-01T00:00:00+00:00"


def test_usajobs_requires_key_and_email():
    assert not USAJobsAdapter("key", None).is_configured()
    assert not USAJobsAdapter(None, "me@example.com").is_configured()
    assert USAJobsAdapter("key", "me@example.com").is_configured()


def test_usajobs_error_status_raises_source_error():
    adapter = USAJobsAdapter("key", "me@example.com", transport=httpx.MockTransport(lambda r: httpx.Response(401)))
    with pytest.raises(SourceError) as exc:
        run(adapter)
    assert exc.value.source == "usajobs"
    assert "401" in str(exc.value)


def test_adzuna_request_and_mapping():
    payload = {
        "results": [
            {
                "id": "9",
                "title": " Python Engineer ",
                "company": {"display_name": "Initech"},
                "location": {"display_name": "Austin, Texas"},
                "description": "Remote friendly team",
                "salary_min": 100000,
                "salary_max": 130000,
                "created": "2025-03-01T00:00:00Z",
                "redirect_url": "https://www.adzuna.com/details/9",
                "contract_time": "full_time",
            }
        ]
    }

    def handler(request):
        assert request.url.path == "/v1/api/jobs/gb/search/1"
        params = request.url.params
        assert params["app_id"] == "id"
        assert params["what"] == "Python Engineer"
        assert params["where"] == "Austin, TX"
        assert params["max_days_old"] == "3"
        assert params["full_time"] == "1"
        assert params["salary_min"] == "90000"
        return httpx.Response(200, json=payload)

    adapter = AdzunaAdapter("id", "key", country="gb", transport=httpx.MockTransport(handler))
    filters = SearchFilters(date_posted="3d", employment_type="full-time", salary_min=90000)
    page = run(adapter, "Python Engineer", "Austin, TX", filters)
    job = page.jobs[0]
    assert job.id == "adzuna_9"
    assert job.title == "Python Engineer"
    assert job.company == "Initech"
    assert job.employment_type == "full_time"
    assert job.salary_min == 100000


def test_adzuna_error_status_raises_source_error():
    adapter = AdzunaAdapter("id", "key", transport=httpx.MockTransport(lambda r: httpx.Response(503)))
    with pytest.raises(SourceError):
        run(adapter)


def test_jsearch_request_and_mapping():
    payload = {
        "data": [
            {
                "job_id": "abc==",
                "job_title": "Data Engineer",
                "employer_name": "Globex",
                "job_city": "Austin",
                "job_state": "TX",
                "job_country": "US",
                "job_description": "Spark and Python",
                "job_min_salary": 50,
                "job_max_salary": 60,
                "job_salary_period": "HOUR",
                "job_posted_at_timestamp": 1740787200,
                "job_apply_link": "https://globex.example/apply",
                "job_is_remote": False,
                "job_employment_type": "FULLTIME",
                "job_required_skills": ["Python", "Spark"],
            }
        ]
    }

    def handler(request):
        assert request.headers["X-RapidAPI-Key"] == "rapid"
        assert request.headers["X-RapidAPI-Host"] == "jsearch.p.rapidapi.com"
        params = request.url.params
        assert params["query"] == "Data Engineer in Austin, TX"
        assert params["date_posted"] == "week"
        assert params["employment_types"] == "FULLTIME"
        assert params["remote_jobs_only"] == "true"
        assert params["job_requirements"] == "more_than_3_years_experience"
        return httpx.Response(200, json=payload)

    filters = SearchFilters(date_posted="7d", employment_type="full-time", remote_type="remote",
                            experience_level="Senior")
    adapter = JSearchAdapter("rapid", transport=httpx.MockTransport(handler))
    page = run(adapter, "Data Engineer", "Austin, TX", filters)
    job = page.jobs[0]
    assert job.id == "jsearch_abc=="
    assert job.location == "Austin, TX, US"
    assert (job.salary_min, job.salary_max) == (104000, 124800)
    assert job.posted_date == "2025-03-01T00:00:00+00:00"
    assert job.required_skills == ["Python", "Spark"]
    assert job.source == "JSearch"


def test_jsearch_omits_required_skills_when_absent():
    payload = {"data": [{"job_id": "1", "job_title": "Engineer", "employer_name": "X"}]}
    adapter = JSearchAdapter("rapid", transport=httpx.MockTransport(lambda r: httpx.Response(200, json=payload)))
    job = run(adapter).jobs[0]
    assert job.required_skills is None
    assert "required_skills" not in job.model_dump()
