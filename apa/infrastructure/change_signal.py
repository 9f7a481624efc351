"""Per-collection change counter that live queries wait on."""

import asyncio


class ChangeSignal:
    """Monotonic version bumped after every committed write in this process.

    Waiters compare against the version they last saw, so a write that lands
    between a read and the wait is never missed.
    """

    def __init__(self) -> None:
        self._version = 0
        self._condition = asyncio.Condition()

    @property
    def version(self) -> int:
        return self._version

    async def notify(self) -> None:
        async with self._condition:
            self._version += 1
            self._condition.notify_all()

    async def wait(self, since: int, timeout: float) -> None:
        """Return once version != since, or after timeout seconds."""
        async with self._condition:
            try:
                await asyncio.wait_for(
                    self._condition.wait_for(lambda: self._version != since),
                    timeout,
                )
            except TimeoutError:
                pass
