import asyncio
import logging
from typing import Any, NamedTuple, Optional, Sequence

import httpx
from jobsearch.client.http import get_client
from jobsearch.models.job import JobResult, PageCursor, SearchFilters

logger = logging.getLogger(__name__)


class SourcePage(NamedTuple):
    jobs: list[JobResult]
    next_cursor: Optional[PageCursor] = None


class BaseAdapter:
    name: str     # key in the per-source stats
    label: str    # value of JobResult.source

    def __init__(self, timeout: float, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.timeout = timeout
        self.transport = transport

    def is_configured(self) -> bool:
        return True

    def client(self, timeout: Optional[float] = None) -> httpx.AsyncClient:
        return get_client(timeout or self.timeout, transport=self.transport)

    async def search(self, query: str, location: Optional[str], filters: SearchFilters) -> SourcePage:
        raise NotImplementedError


class BoardAdapter(BaseAdapter):
    """
    An ATS provider searched across a configured list of company boards.

    Subclasses implement ``fetch_board``; ``search`` fans out over every board
    concurrently. A failing board (timeout, non-2xx, bad JSON) is logged and
    contributes nothing.
    """

    def __init__(self, boards: Sequence[Any], timeout: float, transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__(timeout, transport)
        self.boards = list(boards)

    def is_configured(self) -> bool:
        return bool(self.boards)

    def board_label(self, board: Any) -> str:
        return str(board)

    async def fetch_board(self, client: httpx.AsyncClient, board: Any, query: str) -> list[JobResult]:
        raise NotImplementedError

    async def _safe_fetch(self, client: httpx.AsyncClient, board: Any, query: str) -> list[JobResult]:
        label = self.board_label(board)
        try:
            jobs = await self.fetch_board(client, board, query)
        except httpx.HTTPStatusError as e:
            logger.warning("[%s] %s returned HTTP %s", self.name, label, e.response.status_code)
            return []
        except httpx.TimeoutException:
            logger.warning("[%s] %s timed out after %.1fs", self.name, label, self.timeout)
            return []
        except Exception as e:
            logger.warning("[%s] %s error: %s", self.name, label, e)
            return []
        if jobs:
            logger.debug("[%s] %s contributed %d matching jobs", self.name, label, len(jobs))
        return jobs

    async def search(self, query: str, location: Optional[str], filters: SearchFilters) -> SourcePage:
        logger.info("[%s] searching %d boards for %r", self.name, len(self.boards), query)
        async with self.client() as client:
            results = await asyncio.gather(*(self._safe_fetch(client, b, query) for b in self.boards))
        jobs = [job for batch in results for job in batch]
        logger.info("[%s] search complete: %d matching jobs", self.name, len(jobs))
        return SourcePage(jobs)
