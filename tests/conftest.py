"""
Global fixtures for the Tintern client tests.

Environment is pinned BEFORE any tintern import so the cached settings never
pick up a developer's .env (real backend URL, production mode, session file
in the home directory).
"""

import os

import pytest

os.environ["ENVIRONMENT"] = "development"
os.environ["API_BASE_URL"] = "https://api.test"
os.environ["API_PREFIX"] = "/api/v1"
os.environ["TRANSPORT_RETRY_MAX_WAIT"] = "0"
os.environ["FLASK_SECRET_KEY"] = "test-secret-key"
os.environ["DEBUG_MODE"] = "false"

from tintern.common.config import ClientSettings, get_settings  # noqa: E402
from tintern.navigation.navigator import HistoryNavigator  # noqa: E402
from tintern.session.storage import MemoryStorage  # noqa: E402
from tintern.session.store import SessionStore  # noqa: E402

from tests.helpers.stub_backend import StubBackend  # noqa: E402

TEST_TOKEN = "tok123"
TEST_USER = {"id": "u1", "name": "Jo Tester", "email": "jo@example.com"}


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch, tmp_path):
    """Keep file-backed sessions out of the home directory."""
    monkeypatch.setenv("SESSION_FILE", str(tmp_path / "session.json"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings(tmp_path):
    return ClientSettings(
        api_base_url="https://api.test",
        transport_retry_max_wait=0,
        session_file=str(tmp_path / "session.json"),
    )


@pytest.fixture
def backend():
    """Scripted backend; register answers with backend.on(...)."""
    return StubBackend()


@pytest.fixture
def store():
    """Empty in-memory session store."""
    return SessionStore(MemoryStorage())


@pytest.fixture
def authed_store(store):
    """Session store holding TEST_TOKEN / TEST_USER."""
    store.write(TEST_TOKEN, TEST_USER)
    return store


@pytest.fixture
def navigator():
    return HistoryNavigator()
