import httpx
from jobsearch.adapters.base import BoardAdapter
from jobsearch.models.job import JobResult
from jobsearch.pipeline.normalize import company_from_slug, infer_remote_type, iso_or_now, matches_all_terms, strip_html


class RecruiteeAdapter(BoardAdapter):
    """
    Public Recruitee offers JSON.
    Typical endpoint: https://<company>.recruitee.com/api/offers/
    """
    name = "recruitee"
    label = "Recruitee"

    async def fetch_board(self, client: httpx.AsyncClient, board: str, query: str) -> list[JobResult]:
        base = f"https://{board}.recruitee.com/"
        r = await client.get(f"{base}api/offers/")
        r.raise_for_status()
        data = r.json() or {}
        out = []
        for o in data.get("offers") or []:
            title = (o.get("title") or "").strip()
            desc = strip_html(o.get("description"))
            if not matches_all_terms(query, f"{title} {desc or ''}"):
                continue

            loc = o.get("location")
            if not loc:
                loc = ", ".join(x for x in [o.get("city"), o.get("country")] if x) or None
            remote = "remote" if o.get("remote") else infer_remote_type(loc, desc)

            out.append(JobResult(
                id=f"recruitee_{board}_{o.get('id')}",
                title=title,
                company=company_from_slug(board),
                location=loc,
                description=desc,
                posted_date=iso_or_now(o.get("created_at") or o.get("published_at")),
                apply_url=o.get("careers_url") or f"{base}o/{o.get('slug') or o.get('id')}",
                source=self.label,
                remote_type=remote,
                employment_type=o.get("employment_type_code") or o.get("employment_type") or "full-time",
            ))
        return out
