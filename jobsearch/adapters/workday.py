from typing import Optional
from urllib.parse import urljoin
import logging

import httpx

from jobsearch.adapters.base import BoardAdapter
from jobsearch.models.job import JobResult
from jobsearch.pipeline.normalize import company_from_slug, infer_remote_type, matches_all_terms, parse_relative_date

logger = logging.getLogger(__name__)

PAGE_LIMIT = 20


class WorkdayAdapter(BoardAdapter):
    """
    Generic Workday adapter.

    Each board is a dict: {"tenant": "...", "site": "CareersSiteName", "wd": "1"}.

    Strategy:
      1) Candidate Experience Service (CXS):
         POST https://{tenant}.wd{N}.myworkdayjobs.com/wday/cxs/{tenant}/{site}/jobs
      2) Fallback to legacy:
         POST https://{tenant}.wd{N}.myworkdayjobs.com/{site}/search

    Both take the query as ``searchText``; results are still AND-matched
    locally like every other board.
    """
    name = "workday"
    label = "Workday"

    _HDRS = {
        "Accept": "application/json, text/plain, */*",
        "Content-Type": "application/json",
    }

    def board_label(self, board: dict) -> str:
        return f"{board.get('tenant')}/{board.get('site')}"

    @staticmethod
    def _host_for(board: dict) -> str:
        suffix = board.get("wd")
        if not suffix:
            return f"https://{board['tenant']}.myworkdayjobs.com/"
        return f"https://{board['tenant']}.wd{suffix}.myworkdayjobs.com/"

    async def _post_json(self, client: httpx.AsyncClient, url: str, payload: dict) -> Optional[dict]:
        r = await client.post(url, json=payload, headers=self._HDRS)
        if r.status_code != 200:
            logger.debug("[workday] %s returned %s", url, r.status_code)
            return None
        # some tenants return HTML with 200
        if "json" not in r.headers.get("Content-Type", "").lower():
            return None
        try:
            return r.json()
        except ValueError:
            return None

    async def fetch_board(self, client: httpx.AsyncClient, board: dict, query: str) -> list[JobResult]:
        host = self._host_for(board)
        tenant, site = board["tenant"], board["site"]
        payload = {"appliedFacets": {}, "limit": PAGE_LIMIT, "offset": 0, "searchText": query}

        data = await self._post_json(client, f"{host}wday/cxs/{tenant}/{site}/jobs", payload)
        if data is None:
            data = await self._post_json(client, urljoin(host, f"{site}/search"), payload)
        if data is None:
            logger.info("[workday] %s/%s: no JSON from CXS or legacy endpoint", tenant, site)
            return []

        items = data.get("jobPostings") or data.get("items") or []
        base = urljoin(host, f"en-US/{site}")
        out = []
        for it in items:
            title = (it.get("title") or it.get("title_friendly") or "").strip()
            bullets = [str(b) for b in (it.get("bulletFields") or [])]
            desc = "\n".join(bullets) or it.get("shortDescription")
            if not matches_all_terms(query, f"{title} {' '.join(bullets)}"):
                continue
            loc = it.get("locationsText") or it.get("location") or "Multiple Locations"
            path = it.get("externalPath") or ""
            jid = bullets[0] if bullets else (path.rsplit("/", 1)[-1] or title)
            out.append(JobResult(
                id=f"workday_{tenant}_{jid}",
                title=title,
                company=company_from_slug(tenant),
                location=loc,
                description=desc,
                # "Posted 3 Days Ago", "Posted Today", "Posted 30+ Days Ago"
                posted_date=parse_relative_date(it.get("postedOn") or ""),
                apply_url=f"{base}{path}" if path else base,
                source=self.label,
                remote_type=infer_remote_type(loc, desc),
                employment_type="full-time",
            ))
        return out
