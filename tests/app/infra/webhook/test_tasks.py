"""Testes do BackgroundTaskTracker."""

from __future__ import annotations

import asyncio

from app.infra.webhook import BackgroundTaskTracker


async def test_schedule_tracks_until_done() -> None:
    tracker = BackgroundTaskTracker(max_concurrency=2)
    release = asyncio.Event()

    async def job() -> None:
        await release.wait()

    assert tracker.schedule(job(), tenant_id="acme") == 1
    await asyncio.sleep(0)
    assert tracker.active_count == 1

    release.set()
    await tracker.drain(1.0)
    assert tracker.active_count == 0


async def test_concurrency_limit() -> None:
    tracker = BackgroundTaskTracker(max_concurrency=1)
    running = 0
    peak = 0

    async def job() -> None:
        nonlocal running, peak
        running += 1
        peak = max(peak, running)
        await asyncio.sleep(0.01)
        running -= 1

    for _ in range(3):
        tracker.schedule(job())
    await tracker.drain(1.0)

    assert peak == 1


async def test_failure_is_logged(caplog) -> None:
    tracker = BackgroundTaskTracker()

    async def job() -> None:
        raise RuntimeError("boom")

    tracker.schedule(job())
    await tracker.drain(1.0)
    await asyncio.sleep(0)

    assert "background_task_failed" in caplog.text


async def test_drain_cancels_slow_tasks(caplog) -> None:
    tracker = BackgroundTaskTracker()
    cancelled = asyncio.Event()

    async def job() -> None:
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.set()
            raise

    tracker.schedule(job())
    await tracker.drain(0.01)

    assert cancelled.is_set()
    assert "background_tasks_shutdown_cancelled" in caplog.text


async def test_join_waits_for_tasks_scheduled_while_waiting() -> None:
    tracker = BackgroundTaskTracker()
    done: list[str] = []

    async def second() -> None:
        await asyncio.sleep(0.01)
        done.append("second")

    async def first() -> None:
        await asyncio.sleep(0.01)
        tracker.schedule(second())
        done.append("first")

    tracker.schedule(first())
    await tracker.join()

    assert done == ["first", "second"]
    assert tracker.active_count == 0
