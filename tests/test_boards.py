import asyncio
import json

import httpx

from jobsearch.adapters.ashby import AshbyAdapter
from jobsearch.adapters.greenhouse import GreenhouseAdapter
from jobsearch.adapters.lever import LeverAdapter
from jobsearch.adapters.recruitee import RecruiteeAdapter
from jobsearch.adapters.workable import WorkableAdapter
from jobsearch.adapters.workday import WorkdayAdapter
from jobsearch.models.job import SearchFilters


def search(adapter, query="python engineer"):
    return asyncio.run(adapter.search(query, None, SearchFilters()))


GREENHOUSE_JOBS = {
    "jobs": [
        {
            "id": 1,
            "title": "Senior Python Engineer",
            "content": "&lt;p&gt;Build APIs&lt;/p&gt;",
            "updated_at": "2025-03-01T00:00:00-05:00",
            "location": {"name": "Remote - US"},
            "absolute_url": "https://boards.greenhouse.io/acme/jobs/1",
        },
        {
            "id": 2,
            "title": "Engineer",
            "content": "Go services",
            "updated_at": "2025-03-01T00:00:00Z",
            "location": {"name": "Austin, TX"},
        },
        {"id": 3, "title": "Python Engineer", "content": "no date", "location": {"name": "Austin, TX"}},
    ]
}


def test_greenhouse_matches_every_query_word():
    def handler(request):
        assert request.url.path == "/v1/boards/acme/jobs"
        assert request.url.params["content"] == "true"
        return httpx.Response(200, json=GREENHOUSE_JOBS)

    page = search(GreenhouseAdapter(["acme"], 3, httpx.MockTransport(handler)))
    assert len(page.jobs) == 1
    job = page.jobs[0]
    assert job.id == "greenhouse_acme_1"
    assert job.company == "Acme"
    assert job.description == "Build APIs"
    assert job.remote_type == "remote"
    assert job.source == "Greenhouse"
    assert job.posted_date == "2025-03-01T05:00:00+00:00"
    assert page.next_cursor is None


def test_failing_boards_contribute_nothing():
    def handler(request):
        if "/boards/acme/" in request.url.path:
            return httpx.Response(200, json=GREENHOUSE_JOBS)
        if "/boards/slow/" in request.url.path:
            raise httpx.ReadTimeout("timed out", request=request)
        if "/boards/broken/" in request.url.path:
            return httpx.Response(200, text="<html>maintenance</html>")
        return httpx.Response(404)

    adapter = GreenhouseAdapter(["gone", "slow", "acme", "broken"], 3, httpx.MockTransport(handler))
    page = search(adapter)
    assert [j.id for j in page.jobs] == ["greenhouse_acme_1"]


def test_board_adapter_without_boards_is_not_configured():
    assert not GreenhouseAdapter([], 3).is_configured()
    assert LeverAdapter(["acme"], 3).is_configured()


def test_lever_mapping():
    postings = [
        {
            "id": "abc",
            "text": "Python Engineer",
            "descriptionPlain": "Work on data pipelines",
            "categories": {"location": "Toronto", "commitment": "Contract"},
            "workplaceType": "remote",
            "createdAt": 1740787200000,
            "hostedUrl": "https://jobs.lever.co/acme/abc",
        },
        {"id": "zzz", "text": "Designer", "descriptionPlain": "Figma", "createdAt": 1740787200000},
    ]

    def handler(request):
        assert request.url.host == "api.lever.co"
        assert request.url.path == "/v0/postings/acme"
        return httpx.Response(200, json=postings)

    page = search(LeverAdapter(["acme"], 3, httpx.MockTransport(handler)))
    assert len(page.jobs) == 1
    job = page.jobs[0]
    assert job.id == "lever_acme_abc"
    assert job.posted_date == "2025-03-01T00:00:00+00:00"
    assert job.remote_type == "remote"
    assert job.employment_type == "Contract"
    assert job.location == "Toronto"


WORKDAY_BOARD = {"tenant": "acme", "site": "External", "wd": "5"}
WORKDAY_POSTINGS = {
    "jobPostings": [
        {
            "title": "Python Engineer",
            "externalPath": "/job/Austin/Python-Engineer_R123",
            "locationsText": "Austin, TX",
            "postedOn": "Posted 3 Days Ago",
            "bulletFields": ["R123"],
        },
        {"title": "Accountant", "externalPath": "/job/Austin/Accountant_R9", "bulletFields": ["R9"]},
    ]
}


def test_workday_uses_cxs_endpoint():
    seen = []

    def handler(request):
        seen.append(request)
        assert request.url.host == "acme.wd5.myworkdayjobs.com"
        if request.url.path == "/wday/cxs/acme/External/jobs":
            return httpx.Response(200, json=WORKDAY_POSTINGS)
        return httpx.Response(404)

    page = search(WorkdayAdapter([WORKDAY_BOARD], 5, httpx.MockTransport(handler)))
    assert len(seen) == 1
    body = json.loads(seen[0].content)
    assert body["searchText"] == "python engineer"
    assert body["limit"] == 20

    assert len(page.jobs) == 1
    job = page.jobs[0]
    assert job.id == "workday_acme_R123"
    assert job.apply_url == "https://acme.wd5.myworkdayjobs.com/en-US/External/job/Austin/Python-Engineer_R123"
    assert job.location == "Austin, TX"
    assert job.company == "Acme"


def test_workday_falls_back_to_legacy_search():
    def handler(request):
        if request.url.path == "/External/search":
            return httpx.Response(200, json=WORKDAY_POSTINGS)
        return httpx.Response(200, text="<html>login</html>", headers={"Content-Type": "text/html"})

    page = search(WorkdayAdapter([WORKDAY_BOARD], 5, httpx.MockTransport(handler)))
    assert [j.id for j in page.jobs] == ["workday_acme_R123"]


def test_recruitee_mapping():
    offers = {
        "offers": [
            {
                "id": 7,
                "slug": "python-engineer",
                "title": "Python Engineer",
                "description": "<p>Django and Postgres</p>",
                "city": "Berlin",
                "country": "Germany",
                "remote": True,
                "created_at": "2025-03-01T10:00:00Z",
                "careers_url": "https://acme.recruitee.com/o/python-engineer",
            }
        ]
    }

    def handler(request):
        assert request.url.host == "acme.recruitee.com"
        assert request.url.path == "/api/offers/"
        return httpx.Response(200, json=offers)

    page = search(RecruiteeAdapter(["acme"], 3, httpx.MockTransport(handler)))
    job = page.jobs[0]
    assert job.id == "recruitee_acme_7"
    assert job.location == "Berlin, Germany"
    assert job.description == "Django and Postgres"
    assert job.remote_type == "remote"


def test_workable_mapping():
    payload = {
        "jobs": [
            {
                "shortcode": "AB12",
                "title": "Python Engineer",
                "city": "London",
                "country": "United Kingdom",
                "telecommuting": True,
                "published_on": "2025-03-01",
            }
        ]
    }

    def handler(request):
        assert request.url.path == "/api/v1/widget/accounts/acme"
        return httpx.Response(200, json=payload)

    page = search(WorkableAdapter(["acme"], 3, httpx.MockTransport(handler)))
    job = page.jobs[0]
    assert job.id == "workable_acme_AB12"
    assert job.apply_url == "https://apply.workable.com/acme/j/AB12/"
    assert job.remote_type == "remote"
    assert job.posted_date == "2025-03-01T00:00:00+00:00"


def test_ashby_posting_api():
    payload = {
        "jobs": [
            {
                "id": "j1",
                "title": "Python Engineer",
                "location": "Remote",
                "isRemote": True,
                "descriptionPlain": "APIs",
                "publishedAt": "2025-03-01T00:00:00Z",
                "jobUrl": "https://jobs.ashbyhq.com/acme/j1",
            }
        ]
    }

    def handler(request):
        assert request.url.host == "api.ashbyhq.com"
        return httpx.Response(200, json=payload)

    page = search(AshbyAdapter(["acme"], 3, httpx.MockTransport(handler)))
    job = page.jobs[0]
    assert job.id == "ashby_acme_j1"
    assert job.apply_url == "https://jobs.ashbyhq.com/acme/j1"
    assert job.remote_type == "remote"


def test_ashby_falls_back_to_board_page():
    next_data = {
        "props": {
            "pageProps": {
                "sections": [
                    {"jobs": [{"id": "abc", "title": "Python Engineer", "locationName": "New York, NY"}]}
                ]
            }
        }
    }
    page_html = (
        "<html><body><script id=\"__NEXT_DATA__\" type=\"application/json\">"
        + json.dumps(next_data)
        + "</script></body></html>"
    )

    def handler(request):
        if request.url.host == "api.ashbyhq.com":
            return httpx.Response(404)
        assert request.url.host == "jobs.ashbyhq.com"
        return httpx.Response(200, text=page_html, headers={"Content-Type": "text/html"})

    page = search(AshbyAdapter(["acme"], 3, httpx.MockTransport(handler)))
    job = page.jobs[0]
    assert job.id == "ashby_acme_abc"
    assert job.location == "New York, NY"
    assert job.apply_url == "https://jobs.ashbyhq.com/acme/abc"
    assert job.remote_type == "onsite"
