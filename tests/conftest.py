from datetime import datetime, timedelta, timezone

import pytest

from civicflow.models.report import Location
from civicflow.services.blob_store import MemoryBlobStore
from civicflow.services.profile_cache import ProfileCache
from civicflow.services.report_store import ReportStore


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def blob_store():
    return MemoryBlobStore()


@pytest.fixture
def store(blob_store, clock):
    report_store = ReportStore(blob_store, clock=clock)
    report_store.load()
    return report_store


@pytest.fixture
def profiles(blob_store):
    cache = ProfileCache(blob_store)
    cache.load()
    return cache


@pytest.fixture
def here():
    return Location(latitude=44.4268, longitude=26.1025)
