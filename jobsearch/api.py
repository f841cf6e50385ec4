"""
Unified job search - FastAPI entry point.
"""
import logging
from functools import lru_cache

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from jobsearch.models.job import SearchRequest
from jobsearch.pipeline.orchestrator import JobAggregator, build_aggregator
from jobsearch.settings import settings

logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

ALLOWED_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]
CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": ", ".join(ALLOWED_HEADERS),
}

app = FastAPI(
    title="Unified Job Search API",
    description="Aggregates job listings from job boards, public APIs and ATS company boards",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["POST", "GET", "OPTIONS"],
    allow_headers=ALLOWED_HEADERS,
)


@lru_cache(maxsize=1)
def get_aggregator() -> JobAggregator:
    return build_aggregator(settings)


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "unified-job-search"}


@app.post("/unified-job-search")
@app.post("/search")
async def unified_job_search(request: Request, aggregator: JobAggregator = Depends(get_aggregator)):
    """Search every enabled source and return the merged, filtered listings."""
    try:
        payload = await request.json()
        search = SearchRequest.model_validate(payload or {})
        result = await aggregator.search(search)
    except Exception as e:
        logger.exception("Unified search error")
        return JSONResponse({"error": str(e) or "Unknown error"}, status_code=500, headers=CORS_HEADERS)
    return JSONResponse(result.model_dump(by_alias=True, mode="json"), headers=CORS_HEADERS)


if __name__ == "__main__":
    uvicorn.run("jobsearch.api:app", host="0.0.0.0", port=8000, log_level=settings.LOG_LEVEL.lower())
