import httpx
from jobsearch.adapters.base import BoardAdapter
from jobsearch.models.job import JobResult
from jobsearch.pipeline.normalize import company_from_slug, infer_remote_type, iso_or_now, matches_all_terms


class LeverAdapter(BoardAdapter):
    name = "lever"
    label = "Lever"

    async def fetch_board(self, client: httpx.AsyncClient, board: str, query: str) -> list[JobResult]:
        r = await client.get(f"https://api.lever.co/v0/postings/{board}", params={"mode": "json"})
        r.raise_for_status()
        data = r.json()
        out = []
        for j in data or []:
            title = (j.get("text") or "").strip()
            desc = j.get("descriptionPlain") or j.get("description")
            if not matches_all_terms(query, f"{title} {desc or ''}"):
                continue
            categories = j.get("categories") or {}
            loc = categories.get("location") or j.get("workplaceType")
            remote = "remote" if j.get("workplaceType") == "remote" else infer_remote_type(loc, desc)
            out.append(JobResult(
                id=f"lever_{board}_{j.get('id')}",
                title=title,
                company=company_from_slug(board),
                location=loc,
                description=desc,
                # Lever uses epoch milliseconds
                posted_date=iso_or_now(j.get("createdAt") or j.get("updatedAt")),
                apply_url=j.get("hostedUrl") or j.get("applyUrl"),
                source=self.label,
                remote_type=remote,
                employment_type=categories.get("commitment") or "full-time",
            ))
        return out
