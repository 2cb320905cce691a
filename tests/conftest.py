import pytest
from fastapi.testclient import TestClient

from library_api.app.core.config import Settings
from library_api.app.core.db import DocumentStore
from library_api.app.core.notifications import Notifier
from library_api.app.main import create_app
from library_api.app.repositories.library_repository import LibraryRepository
from library_api.app.services.library_app import build_library_app


@pytest.fixture
def settings(tmp_path):
    # Unique database file per test
    return Settings(database_url=str(tmp_path / "library_test.db"))


@pytest.fixture
def store(settings):
    store = DocumentStore(settings.database_url)
    store.init_db()
    return store


@pytest.fixture
def notifier():
    return Notifier(display_seconds=3)


@pytest.fixture
def repository(store, notifier):
    return LibraryRepository(store, notifier=notifier)


@pytest.fixture
def library(settings, store, notifier):
    return build_library_app(settings, store=store, notifier=notifier)


@pytest.fixture
def client(settings):
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client
