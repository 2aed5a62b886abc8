"""Shared pytest fixtures for termlog tests."""

import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from termlog.api import create_app
from termlog.client import LogClient
from termlog.config import TermlogConfig
from termlog.service import LogService
from termlog.store import EntryStore


class FakeClock:
    """Deterministic clock; advances by `step` on every call."""

    def __init__(self, start=None, step=timedelta(seconds=1)):
        self.now = start or datetime(2026, 1, 17, 9, 0, 0, tzinfo=timezone.utc)
        self.step = step

    def __call__(self):
        current = self.now
        self.now = self.now + self.step
        return current


@pytest.fixture
def temp_dir():
    """Create a temporary working directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(temp_dir, clock):
    """Create a store with a fake clock and proper cleanup."""
    st = EntryStore(temp_dir / "logs.db", clock=clock)
    yield st
    st.close()


@pytest.fixture
def service(store):
    return LogService(store)


@pytest.fixture
def config(temp_dir):
    """Create a test configuration."""
    cfg = TermlogConfig(base_dir=temp_dir)
    cfg.client.exit_delay = 0
    return cfg


@pytest.fixture
def app(config, store):
    return create_app(config, store=store)


@pytest.fixture
def http(app):
    """FastAPI test client; entering it runs the app lifespan."""
    with TestClient(app) as client:
        yield client


@pytest.fixture
def log_client(http):
    """LogClient talking to the in-process app."""
    return LogClient(str(http.base_url), http=http)
