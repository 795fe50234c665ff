"""
Shared fixtures: an in-memory document service and a store wired to it
"""
import copy

import pytest

from evalmate.core.document import default_document
from evalmate.core.remote import LocalShadowStore, RemoteStoreError
from evalmate.core.store import DataStore


class FakeRemote:
    """In-memory stand-in for RemoteStoreClient; set online=False to simulate an outage"""

    def __init__(self):
        self.document = default_document()
        self.online = True
        self.puts = []

    def _check(self):
        if not self.online:
            raise RemoteStoreError("service unreachable")

    async def fetch_document(self):
        self._check()
        return copy.deepcopy(self.document)

    async def fetch_collection(self, name):
        self._check()
        if name not in self.document:
            return None
        return copy.deepcopy(self.document[name])

    async def put_collection(self, name, value):
        if not self.online:
            return False
        self.puts.append(name)
        self.document[name] = copy.deepcopy(value)
        return True

    async def reset_all(self):
        if not self.online:
            return False
        self.document = default_document()
        return True

    async def aclose(self):
        pass


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


@pytest.fixture
def remote():
    return FakeRemote()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def shadow(tmp_path):
    return LocalShadowStore(tmp_path / "shadow")


@pytest.fixture
def store(remote, shadow, clock):
    return DataStore(remote, shadow, cache_ttl=0.5, poll_interval=0.01, clock=clock)
