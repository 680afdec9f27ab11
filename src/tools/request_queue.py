import asyncio
from typing import Awaitable, Callable, TypeVar

T = TypeVar("T")


class RequestQueue:
    """
    One-at-a-time admission for async tasks.

    Tasks run strictly in submission order; the next task starts only after
    the previous one has finished, whether it returned or raised. Owned by a
    single client instance.

    Example:
        >>> queue = RequestQueue()
        >>> await queue.submit(lambda: client_call(prompt))
    """

    def __init__(self):
        # asyncio.Lock wakes waiters first-in, first-out.
        self._lock = asyncio.Lock()
        self._pending = 0

    @property
    def pending(self) -> int:
        """Tasks submitted and not yet finished, including the running one."""
        return self._pending

    async def submit(self, task_fn: Callable[[], Awaitable[T]]) -> T:
        self._pending += 1
        try:
            async with self._lock:
                return await task_fn()
        finally:
            self._pending -= 1
