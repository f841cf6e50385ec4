# scripts/run_search_once.py
import asyncio
import logging
import sys

from jobsearch.models.job import SearchRequest
from jobsearch.pipeline.orchestrator import build_aggregator
from jobsearch.settings import settings

logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def main(argv: list[str]) -> int:
    if not argv:
        print('usage: python scripts/run_search_once.py "<query>" [location]')
        return 2
    request = SearchRequest(query=argv[0], location=argv[1] if len(argv) > 1 else None)
    result = asyncio.run(build_aggregator(settings).search(request))

    print("-" * 60)
    for name, st in result.sources.items():
        print(f"[done] {name:14s} count={st.count:4d}  {st.status}")
    print("-" * 60)
    for job in result.jobs[:20]:
        print(f"{job.source:12s} {job.title} @ {job.company} ({job.location or '-'})")
    print(f"{result.total} jobs in {result.execution_time}ms -> DB: {settings.DB_URL}")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
