"""Tests for the extraction worker pool."""

import asyncio
import os
import threading
import time

import pytest

from dictionary_lookup.worker_pool import ExtractionPool


def test_default_size_follows_cpu_count():
    pool = ExtractionPool()
    try:
        assert pool.max_workers == (os.cpu_count() or 1)
    finally:
        pool.shutdown()


def test_zero_means_default_size():
    pool = ExtractionPool(0)
    try:
        assert pool.max_workers == (os.cpu_count() or 1)
    finally:
        pool.shutdown()


def test_submit_wait_returns_result():
    pool = ExtractionPool(2)

    async def main():
        return await pool.submit_wait(sum, [1, 2, 3])

    try:
        assert asyncio.run(main()) == 6
    finally:
        pool.shutdown()


def test_errors_reach_the_caller():
    pool = ExtractionPool(1)

    def boom():
        raise ValueError("bad page")

    async def main():
        await pool.submit_wait(boom)

    try:
        with pytest.raises(ValueError, match="bad page"):
            asyncio.run(main())
    finally:
        pool.shutdown()


def test_concurrency_is_bounded():
    pool = ExtractionPool(2)
    lock = threading.Lock()
    state = {"running": 0, "peak": 0}

    def work():
        with lock:
            state["running"] += 1
            state["peak"] = max(state["peak"], state["running"])
        time.sleep(0.05)
        with lock:
            state["running"] -= 1

    async def main():
        await asyncio.gather(*(pool.submit_wait(work) for _ in range(8)))

    try:
        asyncio.run(main())
    finally:
        pool.shutdown()

    assert state["peak"] == 2


def test_shutdown_waits_and_rejects_new_work():
    pool = ExtractionPool(1)
    finished = []

    def work():
        time.sleep(0.05)
        finished.append(True)

    async def main():
        task = asyncio.ensure_future(pool.submit_wait(work))
        await asyncio.sleep(0.01)
        await asyncio.get_running_loop().run_in_executor(None, pool.shutdown)
        assert finished == [True]
        await task
        with pytest.raises(RuntimeError):
            await pool.submit_wait(work)

    asyncio.run(main())
    assert pool.closed

    pool.shutdown()
