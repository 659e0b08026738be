"""
Test configuration and fixtures for the Actions monitor.

Provides in-memory GitHub clients, state stores rooted in a temporary
directory, and event sinks that collect lines instead of printing them.
"""

from pathlib import Path

import pytest

from gha_monitor.models import RepositoryRef
from gha_monitor.state import RepositoryState, RepositoryStateStore
from gha_monitor.workers.monitor.watermark import WatermarkTracker
from tests.fixtures.actions import T0, CollectingEventSink, FakeActionsClient


@pytest.fixture
def repository() -> RepositoryRef:
    return RepositoryRef(owner="octo", name="hello")


@pytest.fixture
def fake_client() -> FakeActionsClient:
    """
    Why: Lets monitor tests control exactly what each poll observes
    What: Provides an empty FakeActionsClient
    How: Tests call set_state() between polls to change the hierarchy
    """
    return FakeActionsClient()


@pytest.fixture
def sink() -> CollectingEventSink:
    return CollectingEventSink()


@pytest.fixture
def watermark() -> WatermarkTracker:
    return WatermarkTracker(T0)


@pytest.fixture
def state_dir(tmp_path: Path) -> Path:
    return tmp_path / "state"


@pytest.fixture
def state_store(state_dir: Path) -> RepositoryStateStore:
    """
    Why: Keeps persistence tests away from the real home directory
    What: Provides a RepositoryStateStore under pytest's tmp_path
    How: Points base_dir at a not-yet-existing subdirectory
    """
    return RepositoryStateStore(state_dir)


@pytest.fixture
def initialized_state(repository: RepositoryRef) -> RepositoryState:
    """State of a repository seen in a previous lifetime, watermark T0."""
    return RepositoryState(
        repo=repository.full_name, last_completion_time=T0, initialized=True
    )
