from typing import Optional

import httpx
from jobsearch.settings import settings


_headers = {"User-Agent": settings.USER_AGENT, "Accept": "application/json"}


def get_client(timeout: float, transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    return httpx.AsyncClient(headers=_headers, timeout=timeout, follow_redirects=True, transport=transport)
