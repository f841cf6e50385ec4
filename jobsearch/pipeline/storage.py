from contextlib import contextmanager
from typing import Iterable

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from db.base import Base
from db.schemas import JobListing
from jobsearch.models.job import JobResult

DESCRIPTION_LIMIT = 5000

_engine = None
_Session = None


def init_engine(db_url: str):
    global _engine, _Session
    connect_args = {"check_same_thread": False} if db_url.startswith("sqlite") else {}
    _engine = create_engine(db_url, future=True, connect_args=connect_args)
    Base.metadata.create_all(_engine)
    _Session = sessionmaker(bind=_engine, expire_on_commit=False)
    return _engine


@contextmanager
def get_session():
    if _Session is None:
        raise RuntimeError("storage not initialised; call init_engine() first")
    sess = _Session()
    try:
        yield sess
        sess.commit()
    except Exception:
        sess.rollback()
        raise
    finally:
        sess.close()


def _listing_values(job: JobResult) -> dict:
    return dict(
        job_title=job.title,
        company_name=job.company,
        company_logo_url=None,
        location=job.location,
        remote_type=job.remote_type,
        employment_type=job.employment_type,
        salary_min=job.salary_min,
        salary_max=job.salary_max,
        salary_currency="USD",
        salary_period="year",
        job_description=job.description[:DESCRIPTION_LIMIT] if job.description else None,
        posted_date=job.posted_date,
        apply_url=job.apply_url,
        is_active=True,
        match_score=job.match_score,
        raw_data={},
    )


def upsert_listings(sess, jobs: Iterable[JobResult]) -> int:
    """Insert or overwrite listings keyed on (external_id, source). Last writer wins."""
    n = 0
    for job in jobs:
        values = _listing_values(job)
        existing = (
            sess.query(JobListing)
            .filter(JobListing.external_id == job.id, JobListing.source == job.source)
            .one_or_none()
        )
        if existing:
            for key, value in values.items():
                setattr(existing, key, value)
        else:
            sess.add(JobListing(external_id=job.id, source=job.source, **values))
        n += 1
    return n
