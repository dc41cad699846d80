"""
Tests for the background reminder worker (start / stop / poll loop).

The job itself is replaced by a stub: these tests only check the worker's
lifecycle and that a failed run is logged without ending the loop.
"""

import asyncio
import logging

import pytest
from unittest.mock import AsyncMock

from mespronos.models.schemas import ReminderRunSummary
from mespronos.services import reminder_service
from mespronos.services.reminder_service import ReminderService


@pytest.fixture
def fast_polling(monkeypatch):
    """Shrink the poll interval so the loop turns over quickly."""
    monkeypatch.setattr(reminder_service, "POLL_INTERVAL_SECONDS", 0.01)


async def _wait_until(predicate, timeout=2.0):
    """Yield to the event loop until predicate() holds or the timeout expires."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate() and loop.time() < deadline:
        await asyncio.sleep(0.01)


@pytest.mark.asyncio
async def test_start_creates_worker_task(fast_polling):
    service = ReminderService()
    service.run = AsyncMock(return_value=ReminderRunSummary(enabled=False))

    service.start()
    task = service._worker_task
    try:
        assert task is not None
        assert not task.done()

        # Starting again while running keeps the same task
        service.start()
        assert service._worker_task is task

        await _wait_until(lambda: service.run.await_count >= 1)
        assert service.run.await_count >= 1
    finally:
        service.stop()
        await asyncio.gather(task, return_exceptions=True)


@pytest.mark.asyncio
async def test_stop_sets_event_and_cancels_task(monkeypatch):
    monkeypatch.setattr(reminder_service, "POLL_INTERVAL_SECONDS", 60)
    service = ReminderService()
    service.run = AsyncMock(return_value=ReminderRunSummary(enabled=False))

    service.start()
    task = service._worker_task
    await _wait_until(lambda: service.run.await_count >= 1)

    service.stop()
    await asyncio.gather(task, return_exceptions=True)

    assert service._stop_event.is_set()
    assert task.done()
    assert service.run.await_count == 1


@pytest.mark.asyncio
async def test_poll_loop_exits_once_stop_is_signalled():
    service = ReminderService()

    async def run_then_stop():
        service._stop_event.set()
        return ReminderRunSummary(enabled=False)

    service.run = AsyncMock(side_effect=run_then_stop)

    await asyncio.wait_for(service._poll_loop(), timeout=2)

    service.run.assert_awaited_once()


@pytest.mark.asyncio
async def test_failed_run_is_logged_and_polling_continues(fast_polling, caplog):
    service = ReminderService()
    service.run = AsyncMock(
        side_effect=[RuntimeError("database unavailable")]
        + [ReminderRunSummary(enabled=False)] * 50
    )

    with caplog.at_level(logging.ERROR, logger="mespronos.services.reminder_service"):
        service.start()
        task = service._worker_task
        try:
            await _wait_until(lambda: service.run.await_count >= 2)
        finally:
            service.stop()
            await asyncio.gather(task, return_exceptions=True)

    assert service.run.await_count >= 2
    assert "Error in reminder worker: database unavailable" in caplog.text


@pytest.mark.asyncio
async def test_worker_can_restart_after_stop(fast_polling):
    service = ReminderService()
    service.run = AsyncMock(return_value=ReminderRunSummary(enabled=False))

    service.start()
    first = service._worker_task
    service.stop()
    await asyncio.gather(first, return_exceptions=True)

    service.start()
    second = service._worker_task
    try:
        assert second is not first
        assert not service._stop_event.is_set()
        await _wait_until(lambda: service.run.await_count >= 1)
        assert service.run.await_count >= 1
    finally:
        service.stop()
        await asyncio.gather(second, return_exceptions=True)
