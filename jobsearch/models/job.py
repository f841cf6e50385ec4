import logging
from typing import Any, Literal, Optional, get_args

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_serializer
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)


GOOGLE_JOBS = "google_jobs"

DatePosted = Literal["24h", "3d", "7d", "14d", "30d", "any"]


class JobResult(BaseModel):
    id: str
    title: str
    company: str
    location: Optional[str] = None
    salary_min: Optional[float] = None
    salary_max: Optional[float] = None
    description: Optional[str] = None
    posted_date: str
    apply_url: Optional[str] = None
    source: str
    remote_type: Optional[str] = None
    employment_type: Optional[str] = None
    match_score: Optional[int] = None
    required_skills: Optional[list[str]] = None

    @model_serializer(mode="wrap")
    def omit_unset_enrichment(self, handler):
        # match_score / required_skills are absent, not null, when not computed
        data = handler(self)
        for key in ("match_score", "required_skills"):
            if data.get(key) is None:
                data.pop(key, None)
        return data


class PageCursor(BaseModel):
    """Pagination cursor tagged with the source that issued it."""
    source: str
    token: str


def _coerce_cursor(value: Any) -> Any:
    # bare strings predate source tagging; only Google Jobs ever issued them
    if isinstance(value, str):
        return PageCursor(source=GOOGLE_JOBS, token=value) if value else None
    return value


class SearchFilters(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    date_posted: DatePosted = "any"
    contract_only: bool = False
    remote_type: Optional[str] = None
    employment_type: Optional[str] = None
    salary_min: Optional[float] = None
    salary_max: Optional[float] = None
    experience_level: Optional[str] = None
    boolean_string: Optional[str] = None
    next_page_token: Optional[PageCursor] = None
    radius_miles: Optional[float] = None

    @field_validator("date_posted", mode="before")
    @classmethod
    def unknown_window_means_any(cls, value):
        if value is None:
            return "any"
        if value not in get_args(DatePosted):
            logger.warning("[filters] unknown datePosted %r, not filtering by date", value)
            return "any"
        return value

    @field_validator("next_page_token", mode="before")
    @classmethod
    def tag_bare_cursor(cls, value):
        return _coerce_cursor(value)


def default_filters() -> SearchFilters:
    return SearchFilters(date_posted="30d", contract_only=False, remote_type="any", employment_type="any")


class SearchRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    query: Optional[str] = None
    location: Optional[str] = None
    radius_miles: Optional[float] = None
    filters: SearchFilters = Field(default_factory=default_filters)
    user_id: Optional[str] = None
    sources: Optional[list[str]] = None
    next_page_token: Optional[PageCursor] = None

    @field_validator("next_page_token", mode="before")
    @classmethod
    def tag_bare_cursor(cls, value):
        return _coerce_cursor(value)

    @field_validator("filters", mode="before")
    @classmethod
    def null_filters(cls, value):
        return default_filters() if value is None else value


class SourceStatus(BaseModel):
    count: int = 0
    status: str = "success"


class DateFilterOutcome(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    requested: str
    strict_count: int
    relaxed: bool = False


class SearchResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    jobs: list[JobResult]
    total: int
    search_params: dict[str, Any]
    sources: dict[str, SourceStatus]
    execution_time: int
    next_page_token: Optional[PageCursor] = None
    date_filter: Optional[DateFilterOutcome] = None

    @model_serializer(mode="wrap")
    def omit_missing_cursor(self, handler):
        data = handler(self)
        for key in ("next_page_token", "nextPageToken"):
            if key in data and data[key] is None:
                data.pop(key)
        return data
