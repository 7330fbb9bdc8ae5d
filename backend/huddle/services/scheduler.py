"""Timed work items that run under the store lock.

Deferred sends and standup endings are not detached timers mutating the
store: they are work items queued here. A wake-up task per item sleeps
until the due time, takes ``store.lock`` like any request handler, and
then runs every item that has come due.
"""
import asyncio
import heapq
import itertools
import logging
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from huddle.services.store import WorkspaceStore

logger = logging.getLogger(__name__)

WorkItem = Callable[[], None]


class DeliveryScheduler:
    def __init__(self, store: "WorkspaceStore"):
        self._store = store
        self._queue: list[tuple[int, int, str, WorkItem]] = []
        self._seq = itertools.count()
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._queue)

    def submit(self, due_at: int, work: WorkItem, label: str = "work item") -> None:
        """Queue ``work`` to run at ``due_at`` (epoch seconds).

        Must be called with the store lock held, from inside a running
        event loop.
        """
        heapq.heappush(self._queue, (due_at, next(self._seq), label, work))
        task = asyncio.get_running_loop().create_task(self._wake_at(due_at))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        logger.debug("Scheduled %s for %d", label, due_at)

    def run_due(self) -> int:
        """Run every queued item whose time has come. Caller holds the lock.

        A failing item is logged and the remaining items still run.
        """
        now = self._store.now()
        ran = 0
        while self._queue and self._queue[0][0] <= now:
            _, _, label, work = heapq.heappop(self._queue)
            logger.debug("Running %s", label)
            try:
                work()
            except Exception:
                logger.exception("Scheduled %s failed", label)
            ran += 1
        return ran

    async def _wake_at(self, due_at: int) -> None:
        # The store clock can still read before due_at after the sleep
        while True:
            delay = due_at - self._store.clock()
            if delay > 0:
                await asyncio.sleep(delay)
            async with self._store.lock:
                if self._store.now() >= due_at:
                    self.run_due()
                    return

    def cancel_all(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()
        self._queue.clear()

    async def shutdown(self) -> None:
        tasks = list(self._tasks)
        self.cancel_all()
        await asyncio.gather(*tasks, return_exceptions=True)
