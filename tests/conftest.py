import pytest

from jobsearch.pipeline import storage


@pytest.fixture
def session_factory(tmp_path):
    """Fresh SQLite database per test; yields the storage session context manager."""
    storage.init_engine(f"sqlite:///{tmp_path / 'jobs.db'}")
    yield storage.get_session
    storage._engine.dispose()
