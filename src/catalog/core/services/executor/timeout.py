"""Timeout-guarded execution of blocking calls.

A blocking callable runs on a worker thread while an asyncio timer races it.
Whichever finishes first decides the single outcome delivered to the caller.
A call that loses the race is abandoned, not cancelled: the worker keeps
running until the callable returns, and its late result is discarded.
"""

from __future__ import annotations

import asyncio
import contextvars
import functools
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, TypeVar

from loguru import logger

R = TypeVar("R")

TIMEOUT_MESSAGE = "This operation timed out"


class OperationTimeoutError(TimeoutError):
    """Raised when a guarded call does not finish before its deadline."""

    def __init__(self, timeout_seconds: float, message: str = TIMEOUT_MESSAGE):
        super().__init__(message)
        self.timeout_seconds = timeout_seconds


def _discard_late_result(name: str, future: Future) -> None:
    if future.cancelled():
        return
    error = future.exception()
    if error is not None:
        logger.debug("Abandoned call {} failed after its deadline: {!r}", name, error)
    else:
        logger.debug("Abandoned call {} finished after its deadline", name)


class TimeoutExecutor:
    """Runs blocking callables on a thread pool against a fixed deadline."""

    def __init__(self, timeout_seconds: float, max_workers: int = 8):
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")
        self._timeout_seconds = timeout_seconds
        self._pool = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="catalog-store"
        )

    @property
    def timeout_seconds(self) -> float:
        return self._timeout_seconds

    async def run(
        self,
        fn: Callable[..., R],
        *args: Any,
        timeout_seconds: float | None = None,
        **kwargs: Any,
    ) -> R:
        """Run ``fn(*args, **kwargs)`` on a worker and await it against the deadline.

        Raises:
            OperationTimeoutError: the deadline passed first; ``fn`` keeps running.
            Exception: whatever ``fn`` raised, when it finished first.
        """
        deadline = timeout_seconds if timeout_seconds is not None else self._timeout_seconds
        name = getattr(fn, "__qualname__", repr(fn))

        # Workers see the caller's context variables, including config overrides
        context = contextvars.copy_context()
        work = self._pool.submit(context.run, functools.partial(fn, *args, **kwargs))
        waiter = asyncio.wrap_future(work)

        # asyncio.wait never cancels what it waits on
        done, _ = await asyncio.wait({waiter}, timeout=deadline)
        if waiter in done:
            return waiter.result()

        work.add_done_callback(functools.partial(_discard_late_result, name))
        # Retrieve the wrapper's outcome too so asyncio never reports it as unhandled
        waiter.add_done_callback(lambda f: f.cancelled() or f.exception())
        logger.warning("Call {} exceeded its {}s deadline", name, deadline)
        raise OperationTimeoutError(deadline)

    def shutdown(self) -> None:
        """Release the worker pool without waiting for abandoned calls."""
        self._pool.shutdown(wait=False, cancel_futures=True)
