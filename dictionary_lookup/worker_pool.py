#!/usr/bin/env python3
"""
Bounded worker pool for CPU-heavy page parsing
Requests hand parsing work to the pool and wait for the result
"""

import asyncio
import functools
import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


class ExtractionPool:
    """Fixed-size pool shared by every in-flight request of a querier.

    Work submitted beyond ``max_workers`` waits in the executor queue.
    """

    def __init__(self, max_workers: Optional[int] = None):
        if not max_workers or max_workers < 1:
            max_workers = os.cpu_count() or 1
        self.max_workers = max_workers
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix='extraction',
        )
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def submit_wait(self, fn: Callable[..., T], *args: Any) -> T:
        """Run ``fn(*args)`` on the pool and wait for its result"""
        with self._lock:
            if self._closed:
                raise RuntimeError("extraction pool is shut down")
            loop = asyncio.get_running_loop()
            future = loop.run_in_executor(self._executor, functools.partial(fn, *args))
        return await future

    def shutdown(self):
        """Stop accepting work and wait for in-flight work to finish"""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        logger.debug("Shutting down extraction pool")
        self._executor.shutdown(wait=True)
