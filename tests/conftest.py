import os

# Keep tests off the developer database, Redis and the hosted backend
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.pop("REDIS_URL", None)
os.environ.pop("SUPABASE_URL", None)
os.environ.pop("SUPABASE_ANON_KEY", None)

from datetime import date  # noqa: E402

import pytest  # noqa: E402

from app.domain.scheduling.schemas import OrderDraft, TimeSlot  # noqa: E402

TODAY = date(2025, 3, 10)


def make_slot(slot_id, start, end, enabled=True, label=None) -> TimeSlot:
    return TimeSlot(
        id=slot_id,
        label=label or f"{start} - {end}",
        start_time=start,
        end_time=end,
        enabled=enabled,
    )


SLOT_RECORDS = [
    {"id": "1", "label": "9:00 AM - 11:00 AM", "start_time": "09:00", "end_time": "11:00", "enabled": True},
    {"id": "2", "label": "11:00 AM - 1:00 PM", "start_time": "11:00", "end_time": "13:00", "enabled": True},
    {"id": "3", "label": "1:00 PM - 3:00 PM", "start_time": "13:00", "end_time": "15:00", "enabled": False},
    {"id": "4", "label": "6:00 PM - 8:00 PM", "start_time": "18:00", "end_time": "20:00", "enabled": False},
]


class FakeSlotSource:
    def __init__(self, records=None):
        self.records = SLOT_RECORDS if records is None else records
        self.calls = 0

    async def fetch(self) -> list[dict]:
        self.calls += 1
        return [dict(record) for record in self.records]


class FailingSlotSource:
    def __init__(self, error: Exception = None):
        self.error = error or ConnectionError("backend unreachable")
        self.calls = 0

    async def fetch(self) -> list[dict]:
        self.calls += 1
        raise self.error


class FakeCache:
    def __init__(self):
        self.store: dict = {}

    def get(self, key):
        return self.store.get(key)

    def set(self, key, value, ttl=300):
        self.store[key] = value
        return True

    def delete(self, key):
        return self.store.pop(key, None) is not None


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def catalogue() -> list[TimeSlot]:
    return [TimeSlot.model_validate(record) for record in SLOT_RECORDS]


@pytest.fixture
def empty_draft() -> OrderDraft:
    return OrderDraft()


@pytest.fixture
def fake_source():
    return FakeSlotSource()


@pytest.fixture
def fake_cache():
    return FakeCache()
