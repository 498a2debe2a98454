"""FIFO queue for deferred (run-after-current-unit) delivery."""

from __future__ import annotations

import asyncio
from collections import deque
from collections.abc import Callable
import logging
from typing import Any

LOGGER = logging.getLogger(__name__)


class DeferredQueue:
    """Schedule callables to run after the current synchronous unit of work.

    Inside a running asyncio loop, tasks go to ``loop.call_soon`` so they run
    on the next loop iteration in scheduling order.  Without a running loop
    they wait in a pending deque until :meth:`flush` is called.
    Tasks left pending from before a loop started are drained on that loop
    ahead of anything scheduled after them.
    """

    def __init__(self) -> None:
        self._pending: deque[tuple[Callable[..., Any], tuple[Any, ...]]] = deque()
        self._drain_loop: asyncio.AbstractEventLoop | None = None

    @property
    def pending(self) -> int:
        """Number of tasks waiting for :meth:`flush`."""
        return len(self._pending)

    def schedule(self, fn: Callable[..., Any], *args: Any) -> None:
        """Queue ``fn(*args)`` for deferred execution."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._pending.append((fn, args))
            return
        if not self._pending:
            loop.call_soon(fn, *args)
            return
        # Keep FIFO order behind tasks queued before the loop was running.
        self._pending.append((fn, args))
        if self._drain_loop is not loop:
            self._drain_loop = loop
            loop.call_soon(self._drain)

    def _drain(self) -> None:
        try:
            self.flush()
        finally:
            self._drain_loop = None

    def flush(self) -> int:
        """Run every pending task in FIFO order and return how many ran.

        Tasks scheduled while flushing are run in the same pass.  A failing
        task is logged and does not stop the ones queued after it.
        """
        ran = 0
        while self._pending:
            fn, args = self._pending.popleft()
            ran += 1
            try:
                fn(*args)
            except Exception as exc:
                LOGGER.error(
                    "deferred.task.failed",
                    exc_info=True,
                    extra={
                        "event": "deferred.task.failed",
                        "error_type": type(exc).__name__,
                        "error": str(exc),
                    },
                )
        return ran
