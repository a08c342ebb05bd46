"""Tests for DebouncedTask timing semantics."""

import asyncio

import pytest

from pivot_workflow.services.debounce import DebouncedTask

pytestmark = pytest.mark.unit

DELAY = 0.05


@pytest.fixture
def calls():
    return []


@pytest.fixture
def task(calls):
    async def callback():
        calls.append(asyncio.get_running_loop().time())

    return DebouncedTask(DELAY, callback)


async def test_burst_coalesces_into_one_call(task, calls):
    for _ in range(5):
        task.schedule()
        await asyncio.sleep(DELAY / 10)

    assert calls == []
    await asyncio.sleep(DELAY * 3)
    await task.wait_idle()

    assert len(calls) == 1
    assert task.pending is False


async def test_separate_windows_fire_separately(task, calls):
    task.schedule()
    await asyncio.sleep(DELAY * 3)
    task.schedule()
    await asyncio.sleep(DELAY * 3)
    await task.wait_idle()

    assert len(calls) == 2


async def test_cancel_prevents_call(task, calls):
    task.schedule()
    assert task.pending is True
    assert task.cancel() is True
    assert task.cancel() is False

    await asyncio.sleep(DELAY * 3)
    assert calls == []


async def test_cancel_does_not_stop_started_call():
    started = asyncio.Event()
    release = asyncio.Event()
    finished = []

    async def slow():
        started.set()
        await release.wait()
        finished.append(True)

    task = DebouncedTask(0, slow)
    task.schedule()
    await started.wait()

    task.cancel()
    assert task.in_flight == 1
    release.set()
    await task.wait_idle()

    assert finished == [True]
    assert task.in_flight == 0


async def test_failing_callback_is_contained():
    async def boom():
        raise RuntimeError("write failed")

    task = DebouncedTask(0, boom)
    task.schedule()
    await asyncio.sleep(0.01)
    await task.wait_idle()

    assert task.in_flight == 0
