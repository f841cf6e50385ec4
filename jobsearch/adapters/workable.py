import httpx
from jobsearch.adapters.base import BoardAdapter
from jobsearch.models.job import JobResult
from jobsearch.pipeline.normalize import company_from_slug, infer_remote_type, iso_or_now, matches_all_terms, strip_html


class WorkableAdapter(BoardAdapter):
    """
    Workable public widget API.
    API: https://apply.workable.com/api/v1/widget/accounts/{account}
    """
    name = "workable"
    label = "Workable"

    async def fetch_board(self, client: httpx.AsyncClient, board: str, query: str) -> list[JobResult]:
        r = await client.get(f"https://apply.workable.com/api/v1/widget/accounts/{board}")
        r.raise_for_status()
        data = r.json() or {}
        out = []
        for it in data.get("jobs") or []:
            title = (it.get("title") or "").strip()
            desc = strip_html(it.get("description"))
            if not matches_all_terms(query, f"{title} {desc or ''}"):
                continue

            loc_obj = it.get("location") if isinstance(it.get("location"), dict) else {}
            city = it.get("city") or loc_obj.get("city")
            country = it.get("country") or loc_obj.get("country")
            loc = ", ".join(x for x in [city, country] if x) or None
            if it.get("telecommuting") or loc_obj.get("telecommuting"):
                remote = "remote"
            else:
                remote = infer_remote_type(loc, desc)

            shortcode = it.get("shortcode")
            out.append(JobResult(
                id=f"workable_{board}_{shortcode}",
                title=title,
                company=company_from_slug(board),
                location=loc,
                description=desc,
                posted_date=iso_or_now(it.get("published_on") or it.get("created_at")),
                apply_url=it.get("url") or f"https://apply.workable.com/{board}/j/{shortcode}/",
                source=self.label,
                remote_type=remote,
                employment_type=it.get("employment_type") or "full-time",
            ))
        return out
