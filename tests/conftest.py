"""
Shared fixtures: an in-memory data source, in-memory storage, and a workspace
wired against both.
"""
import os
import pytest

from orgdesk.cache import CacheStore, MemoryStorage
from orgdesk.config import OrgDeskConfig
from orgdesk.data import MemoryDataAdapter
from orgdesk.workspace import Workspace


class FakeClock:
    """Settable clock in seconds since the epoch."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, minutes: float):
        self.now += minutes * 60


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def adapter():
    return MemoryDataAdapter()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def cache_store(storage, clock):
    return CacheStore(storage, clock=clock)


@pytest.fixture
def config(monkeypatch):
    for name in list(os.environ):
        if name.startswith('ORGDESK_'):
            monkeypatch.delenv(name)
    return OrgDeskConfig()


@pytest.fixture
def workspace(adapter, storage, config):
    ws = Workspace(adapter, storage, config=config)
    yield ws
    ws.close()


@pytest.fixture
def seed(adapter):
    """Inserts a row straight into the data source, bypassing accessors and caches."""
    async def _seed(table, **data):
        return await adapter.insert(table, data)
    return _seed


@pytest.fixture
def start(workspace, seed):
    """Seeds organizations (``Acme`` by default) and starts the workspace."""
    async def _start(*names):
        organizations = [await seed('organizations', name=name) for name in names or ('Acme',)]
        await workspace.start()
        return organizations
    return _start
