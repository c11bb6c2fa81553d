from __future__ import annotations

import pytest

from db.repo_json import JsonBlobStore, MemoryBlobStore
from services.config import PresenceConfig
from services.presence import PresenceRegistry


class FakeClock:
    """Reloj manual en segundos epoch."""

    def __init__(self, start: int = 1_700_000_000):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_store() -> MemoryBlobStore:
    return MemoryBlobStore()


@pytest.fixture
def file_store(tmp_path) -> JsonBlobStore:
    return JsonBlobStore(str(tmp_path / "data"), lock_timeout=2.0)


@pytest.fixture(params=["memory", "file"])
def store(request, tmp_path):
    if request.param == "memory":
        return MemoryBlobStore()
    return JsonBlobStore(str(tmp_path / "data"), lock_timeout=2.0)


@pytest.fixture
def registry(store, clock) -> PresenceRegistry:
    return PresenceRegistry(store, PresenceConfig(inactivity_threshold=600), clock=clock)
