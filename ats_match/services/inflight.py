import asyncio
from typing import Any, Awaitable, Callable, Dict, Hashable

from ats_match.utils.logging_config import get_logger

logger = get_logger(__name__)


class InFlightRequests:
    """Share one running computation between concurrent callers with the same key.

    The first caller starts the work; later callers with the same key await the
    same task and get the same result object (or the same exception). Each
    waiter is shielded, so a caller that goes away does not cancel the work
    for the others. The key is released as soon as the task finishes.
    """

    def __init__(self):
        self._pending: Dict[Hashable, asyncio.Task] = {}

    def __len__(self):
        return len(self._pending)

    async def run(self, key: Hashable, factory: Callable[[], Awaitable[Any]]) -> Any:
        task = self._pending.get(key)
        if task is None:
            task = asyncio.ensure_future(factory())
            self._pending[key] = task
            task.add_done_callback(lambda t, k=key: self._release(k, t))
        else:
            logger.debug(f"Joining in-flight request for {key}")
        return await asyncio.shield(task)

    def _release(self, key: Hashable, task: asyncio.Task) -> None:
        if self._pending.get(key) is task:
            del self._pending[key]
        # mark the outcome as observed even if every waiter went away
        if not task.cancelled():
            task.exception()
