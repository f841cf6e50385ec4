from fakes import make_job

from db.schemas import JobListing
from jobsearch.pipeline.storage import DESCRIPTION_LIMIT, upsert_listings


def all_listings(session_factory):
    with session_factory() as s:
        return s.query(JobListing).order_by(JobListing.id).all()


def test_upsert_overwrites_same_id_and_source(session_factory):
    with session_factory() as s:
        upsert_listings(s, [make_job(id="adzuna_1", source="Adzuna", title="Old title")])
    with session_factory() as s:
        upsert_listings(s, [make_job(id="adzuna_1", source="Adzuna", title="New title", match_score=42)])

    rows = all_listings(session_factory)
    assert len(rows) == 1
    assert rows[0].job_title == "New title"
    assert rows[0].match_score == 42
    assert rows[0].is_active is True


def test_same_id_different_source_are_separate_rows(session_factory):
    with session_factory() as s:
        n = upsert_listings(s, [make_job(id="x_1", source="Adzuna"), make_job(id="x_1", source="JSearch")])
    assert n == 2
    assert len(all_listings(session_factory)) == 2


def test_descriptions_are_truncated(session_factory):
    with session_factory() as s:
        upsert_listings(s, [make_job(description="a" * (DESCRIPTION_LIMIT + 100))])
    row = all_listings(session_factory)[0]
    assert len(row.job_description) == DESCRIPTION_LIMIT
    assert row.salary_currency == "USD"
