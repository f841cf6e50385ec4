import json
import logging

import httpx
from bs4 import BeautifulSoup

from jobsearch.adapters.base import BoardAdapter
from jobsearch.models.job import JobResult
from jobsearch.pipeline.normalize import company_from_slug, infer_remote_type, iso_or_now, matches_all_terms, strip_html

logger = logging.getLogger(__name__)

POSTING_API = "https://api.ashbyhq.com/posting-api/job-board/{org}"
BOARD_PAGE = "https://jobs.ashbyhq.com/{org}"


class AshbyAdapter(BoardAdapter):
    """
    Ashby adapter:
      1) Public posting API (preferred)
      2) Fallback: __NEXT_DATA__ JSON embedded in the hosted job board page
    """
    name = "ashby"
    label = "Ashby"

    async def _from_posting_api(self, client: httpx.AsyncClient, org: str) -> list[dict]:
        r = await client.get(POSTING_API.format(org=org))
        r.raise_for_status()
        data = r.json() or {}
        return data.get("jobs") or []

    async def _from_next_data(self, client: httpx.AsyncClient, org: str) -> list[dict]:
        r = await client.get(BOARD_PAGE.format(org=org), headers={"Accept": "text/html"})
        r.raise_for_status()
        soup = BeautifulSoup(r.text, "lxml")
        script = soup.find("script", id="__NEXT_DATA__")
        if not script or not script.string:
            return []
        pp = json.loads(script.string).get("props", {}).get("pageProps", {})
        jobs = list(pp.get("jobs") or [])
        for sec in pp.get("sections") or []:
            jobs.extend(sec.get("jobs") or [])
        return jobs

    async def fetch_board(self, client: httpx.AsyncClient, board: str, query: str) -> list[JobResult]:
        try:
            postings = await self._from_posting_api(client, board)
        except (httpx.HTTPStatusError, ValueError) as e:
            logger.info("[ashby] %s posting API failed (%s), trying board page", board, e)
            postings = await self._from_next_data(client, board)

        out = []
        for j in postings:
            title = (j.get("title") or j.get("name") or "").strip()
            desc = j.get("descriptionPlain") or strip_html(j.get("descriptionHtml") or j.get("description"))
            if not matches_all_terms(query, f"{title} {desc or ''}"):
                continue
            loc = j.get("location") or j.get("locationName")
            if isinstance(loc, dict):
                loc = loc.get("name")
            remote = "remote" if j.get("isRemote") else infer_remote_type(loc, desc)
            jid = j.get("id")
            out.append(JobResult(
                id=f"ashby_{board}_{jid}",
                title=title,
                company=company_from_slug(board),
                location=loc,
                description=desc,
                posted_date=iso_or_now(j.get("publishedAt") or j.get("publishedDate")),
                apply_url=j.get("jobUrl") or j.get("applyUrl") or f"{BOARD_PAGE.format(org=board)}/{jid}",
                source=self.label,
                remote_type=remote,
                employment_type=j.get("employmentType") or "full-time",
            ))
        return out
