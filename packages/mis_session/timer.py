import asyncio
import inspect
import logging
from typing import Awaitable, Callable, Optional, Union

from .domain import Section

logger = logging.getLogger("mis.timer")

ExpiryCallback = Callable[[], Union[None, Awaitable[None]]]


class SectionTimer:
    """
    Countdown for one rendered section.

    Counts down `duration_minutes * 60` steps and fires `on_expire` exactly
    once when the remaining time reaches zero. A new instance is created for
    every section entry; the previous one must be cancelled first.
    """

    def __init__(
        self,
        duration_minutes: int,
        on_expire: ExpiryCallback,
        tick_seconds: float = 1.0,
        label: str = ""
    ):
        if duration_minutes <= 0:
            raise ValueError("SectionTimer requires a positive duration")
        self.duration_minutes = duration_minutes
        self.on_expire = on_expire
        self.tick_seconds = tick_seconds
        self.label = label
        self._remaining = duration_minutes * 60
        self._fired = False
        self._cancelled = False
        self._task: Optional[asyncio.Task] = None

    @classmethod
    def for_section(
        cls,
        section: Section,
        on_expire: ExpiryCallback,
        tick_seconds: float = 1.0
    ) -> Optional["SectionTimer"]:
        """Untimed sections get no timer at all."""
        if not section.is_timed:
            return None
        return cls(section.time_limit_minutes, on_expire, tick_seconds=tick_seconds, label=section.name)

    @property
    def remaining_seconds(self) -> int:
        return self._remaining

    @property
    def expired(self) -> bool:
        return self._fired

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def remaining_display(self) -> str:
        minutes, seconds = divmod(self._remaining, 60)
        return f"{minutes}:{seconds:02d}"

    def start(self) -> None:
        """Schedule the countdown on the running event loop."""
        if self._task is not None or self._fired or self._cancelled:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    def cancel(self) -> None:
        """
        Stop counting immediately. Safe to call from inside the expiry
        callback, where the countdown task is already finishing.
        """
        self._cancelled = True
        task = self._task
        if task is None or task.done():
            return
        try:
            current = asyncio.current_task()
        except RuntimeError:
            current = None
        if task is not current:
            task.cancel()

    def tick(self) -> bool:
        """
        Advance one step. Returns True when this step expired the timer.
        The caller is responsible for invoking the expiry callback.
        """
        if self._fired or self._cancelled:
            return False
        if self._remaining > 0:
            self._remaining -= 1
        if self._remaining <= 0:
            self._fired = True
            return True
        return False

    async def _run(self) -> None:
        try:
            while not self._fired and not self._cancelled:
                await asyncio.sleep(self.tick_seconds)
                if self.tick():
                    logger.info(f"Section timer expired: {self.label}")
                    await self._fire()
        except asyncio.CancelledError:
            logger.debug(f"Section timer cancelled: {self.label} ({self._remaining}s left)")
            raise

    async def _fire(self) -> None:
        result = self.on_expire()
        if inspect.isawaitable(result):
            await result
