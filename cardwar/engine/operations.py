"""
Tracking of in-flight asynchronous operations for one session.

Every long-running orchestrator call runs as a task registered here, so that
tearing the session down can cancel whatever is currently waiting (network
latency, a simulated timeout, a backoff sleep or a settle window).
"""

import asyncio
import logging
from typing import Awaitable, Set, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class OperationManagerClosedError(RuntimeError):
    """Raised when an operation is started after shutdown."""

    pass


class AsyncOperationManager:
    """
    Runs coroutines as tracked tasks and cancels them on demand.

    Cancellation is a hard abort: the awaiting caller receives
    ``asyncio.CancelledError`` and nothing is rolled back.
    """

    def __init__(self):
        self._tasks: Set[asyncio.Task] = set()
        self._closed = False

    @property
    def active_count(self) -> int:
        return sum(1 for task in self._tasks if not task.done())

    @property
    def is_closed(self) -> bool:
        return self._closed

    async def run(self, coro: Awaitable[T], operation_name: str = "operation") -> T:
        """
        Run ``coro`` as a tracked task and wait for its result.

        Raises:
            OperationManagerClosedError: If the manager was shut down
            asyncio.CancelledError: If the task or the caller is cancelled
        """
        if self._closed:
            # Close the coroutine so it is not reported as never awaited
            if asyncio.iscoroutine(coro):
                coro.close()
            raise OperationManagerClosedError(
                f"Cannot run '{operation_name}' after shutdown"
            )

        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

        try:
            return await task
        except asyncio.CancelledError:
            logger.info("Operation '%s' was cancelled", operation_name)
            raise
        except Exception as e:
            logger.error("Operation '%s' failed: %s", operation_name, e)
            raise

    def cancel_all(self) -> int:
        """Cancel every tracked task. Returns how many were still running."""
        pending = [task for task in self._tasks if not task.done()]
        if pending:
            logger.info("Cancelling %d async operation(s)", len(pending))
        for task in pending:
            task.cancel()
        return len(pending)

    async def shutdown(self) -> None:
        """Refuse new work, cancel running work and wait for it to unwind."""
        self._closed = True
        pending = [task for task in self._tasks if not task.done()]
        self.cancel_all()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
