import httpx
from jobsearch.adapters.base import BoardAdapter
from jobsearch.models.job import JobResult
from jobsearch.pipeline.normalize import company_from_slug, infer_remote_type, iso_or_now, matches_all_terms, strip_html


API_BASE = "https://boards-api.greenhouse.io/v1/boards"


class GreenhouseAdapter(BoardAdapter):
    name = "greenhouse"
    label = "Greenhouse"

    async def fetch_board(self, client: httpx.AsyncClient, board: str, query: str) -> list[JobResult]:
        r = await client.get(f"{API_BASE}/{board}/jobs", params={"content": "true"})
        r.raise_for_status()
        data = r.json()
        out = []
        for j in data.get("jobs", []):
            if not j.get("updated_at"):
                continue
            title = (j.get("title") or "").strip()
            desc = strip_html(j.get("content"))
            if not matches_all_terms(query, f"{title} {desc or ''}"):
                continue
            loc = (j.get("location") or {}).get("name")
            out.append(JobResult(
                id=f"greenhouse_{board}_{j.get('id')}",
                title=title,
                company=company_from_slug(board),
                location=loc,
                description=desc,
                posted_date=iso_or_now(j.get("updated_at")),
                apply_url=j.get("absolute_url"),
                source=self.label,
                remote_type=infer_remote_type(loc, desc),
                employment_type="full-time",
            ))
        return out
