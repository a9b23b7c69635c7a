import asyncio
from datetime import date

import pytest

from app.domain.scheduling.publisher import DebouncedPublisher
from app.domain.scheduling.schemas import OrderDraft


def _draft(day: int) -> OrderDraft:
    return OrderDraft(pickup_date=date(2025, 3, day))


def test_publishes_immediately_without_event_loop():
    published = []
    publisher = DebouncedPublisher(published.append, wait_ms=100)

    publisher.submit(_draft(10))
    publisher.submit(_draft(11))

    assert [d.pickup_date.day for d in published] == [10, 11]
    assert publisher.pending is False


@pytest.mark.asyncio
async def test_burst_is_coalesced_into_latest_snapshot():
    published = []
    publisher = DebouncedPublisher(published.append, wait_ms=20)

    for day in (10, 11, 12):
        publisher.submit(_draft(day))
    assert published == []
    assert publisher.pending is True

    await asyncio.sleep(0.06)

    assert [d.pickup_date.day for d in published] == [12]
    assert publisher.published_count == 1
    assert publisher.pending is False


@pytest.mark.asyncio
async def test_flush_publishes_pending_snapshot_now():
    published = []
    publisher = DebouncedPublisher(published.append, wait_ms=1000)

    publisher.submit(_draft(10))
    publisher.flush()

    assert [d.pickup_date.day for d in published] == [10]
    publisher.flush()
    assert len(published) == 1


@pytest.mark.asyncio
async def test_cancel_drops_pending_snapshot():
    published = []
    publisher = DebouncedPublisher(published.append, wait_ms=20)

    publisher.submit(_draft(10))
    publisher.cancel()
    await asyncio.sleep(0.05)

    assert published == []
    assert publisher.pending is False


@pytest.mark.asyncio
async def test_zero_wait_publishes_immediately():
    published = []
    publisher = DebouncedPublisher(published.append, wait_ms=0)

    publisher.submit(_draft(10))

    assert len(published) == 1


@pytest.mark.asyncio
async def test_async_callback_is_awaited():
    published = []

    async def callback(draft):
        await asyncio.sleep(0)
        published.append(draft)

    publisher = DebouncedPublisher(callback, wait_ms=0)
    publisher.submit(_draft(10))
    await publisher.wait_idle()

    assert len(published) == 1


@pytest.mark.asyncio
async def test_callback_errors_are_logged_not_raised(caplog):
    def callback(draft):
        raise RuntimeError("sink down")

    publisher = DebouncedPublisher(callback, wait_ms=0)
    publisher.submit(_draft(10))

    assert publisher.published_count == 1
    assert "sink down" in caplog.text
