"""Pytest fixtures for collection store tests."""

import pytest

from collection_store import Collection, InMemoryBlobStore, Session, log


@pytest.fixture(autouse=True)
def isolated_log(tmp_path, monkeypatch):
    """Redirect the store log into the test's tmp dir."""
    log_file = tmp_path / "store.log"
    monkeypatch.setattr(log, "LOG", True)
    monkeypatch.setattr(log, "LOG_TO_STDERR", False)
    monkeypatch.setattr(log, "LOG_FILE", log_file)
    yield log_file


@pytest.fixture
def session():
    return Session(identity="alice.id", app_domain="https://app.example", encrypt=False)


@pytest.fixture
def memory_store(session):
    """An in-memory blob store wired into every collection type."""
    store = InMemoryBlobStore(page_size=2)
    Collection.configure(store=store, session=session)
    yield store
    Collection.configure()
