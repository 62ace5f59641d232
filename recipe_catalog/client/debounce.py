import asyncio
from typing import Any, Awaitable, Callable, Optional, Set


class Debouncer:
    """Run ``callback`` once input has been quiet for ``delay`` seconds.

    Each ``trigger`` cancels the pending timer and starts a new one, so
    only the last call in a burst fires. ``cancel`` (also run on leaving an
    ``async with`` block) drops a pending call; a callback that already
    fired is left to finish.
    """

    def __init__(self, callback: Callable[..., Awaitable[Any]], delay: float = 0.3):
        self.callback = callback
        self.delay = delay
        self._timer: Optional[asyncio.TimerHandle] = None
        self._running: Set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def trigger(self, *args: Any) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.delay, self._fire, args)

    def cancel(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def wait(self) -> None:
        """Wait for callbacks that have already fired."""
        if self._running:
            await asyncio.gather(*self._running)

    def _fire(self, args: tuple) -> None:
        self._timer = None
        task = asyncio.ensure_future(self.callback(*args))
        self._running.add(task)
        task.add_done_callback(self._running.discard)

    async def __aenter__(self) -> "Debouncer":
        return self

    async def __aexit__(self, *args: Any) -> None:
        self.cancel()
