"""
Test configuration and fixtures for the Social Identity Map tests.
"""
import pytest
from fastapi.testclient import TestClient

from simap.main import app
from simap.dependencies import get_store
from simap.application.diagram_state import DiagramState
from simap.domain.entities import Session
from simap.domain.events import DomainEventPublisher
from simap.storage.filesystem import FilesystemSessionStore
from simap.services.sync import LocalSessionCache, RemoteSessionClient, SessionSync


class ManualTimer:
    """Stand-in for threading.Timer that only fires when told to."""

    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if not self.cancelled:
            self.callback()


@pytest.fixture
def timers():
    """Collects every ManualTimer a debouncer creates."""
    created = []

    def factory(delay, callback):
        timer = ManualTimer(delay, callback)
        created.append(timer)
        return timer

    factory.created = created
    return factory


@pytest.fixture
def session_store(tmp_path):
    """Filesystem store rooted in a temporary directory."""
    return FilesystemSessionStore(base_dir=str(tmp_path / "sessions"))


@pytest.fixture
def client(session_store):
    """Create test client backed by the temporary store."""
    app.dependency_overrides[get_store] = lambda: session_store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def local_cache(tmp_path):
    return LocalSessionCache(tmp_path / "client-cache")


@pytest.fixture
def make_sync(client, local_cache, timers):
    """Build a SessionSync that talks to the test API through the TestClient."""

    def _make(session_id="sim_test", cache=None):
        return SessionSync(
            session_id=session_id,
            local_cache=cache or local_cache,
            remote=RemoteSessionClient(client),
            timer_factory=timers,
        )

    return _make


@pytest.fixture
def publisher():
    return DomainEventPublisher()


@pytest.fixture
def state(publisher):
    """Empty diagram for a fresh session."""
    return DiagramState(Session(session_id="sim_test"), publisher=publisher)


@pytest.fixture
def three_communities(state):
    """Diagram holding Family, Work and Church."""
    family = state.add_entity("Family")
    work = state.add_entity("Work")
    church = state.add_entity("Church")
    return family, work, church
