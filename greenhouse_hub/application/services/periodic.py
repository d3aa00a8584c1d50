"""
Base class for always-on background monitors.
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Optional

logger = logging.getLogger(__name__)


class PeriodicMonitor(ABC):
    """
    Runs ``check_all`` now and then every ``interval`` seconds.

    The loop waits on a shutdown event with a timeout, so ``stop`` ends
    it without waiting out the interval. A failing sweep is logged and
    the loop carries on.
    """

    name = "monitor"
    default_interval: float = 60.0

    def __init__(self) -> None:
        self.interval: Optional[float] = None
        self._task: Optional[asyncio.Task] = None
        self._running = False
        self._stopped = False
        self._shutdown_event = asyncio.Event()

    @abstractmethod
    async def check_all(self) -> None:
        """Run one sweep."""
        pass

    async def start(self, interval_seconds: Optional[float] = None) -> None:
        """Start the sweep loop, replacing a loop that is already running."""
        if self._task is not None:
            await self.stop()

        if interval_seconds is None:
            interval_seconds = self.default_interval

        logger.info(f"Starting {self.name} (every {interval_seconds}s)")
        self.interval = interval_seconds
        self._running = True
        self._stopped = False
        self._shutdown_event = asyncio.Event()
        self._task = asyncio.create_task(self._loop(), name=f"{self.name}_loop")

    async def stop(self) -> None:
        """Stop the sweep loop. Nothing is emitted afterwards."""
        self._running = False
        self._stopped = True
        self._shutdown_event.set()

        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
            logger.info(f"{self.name} stopped")

    @property
    def is_running(self) -> bool:
        return self._running and self._task is not None and not self._task.done()

    async def _loop(self) -> None:
        while self._running:
            try:
                await self.check_all()
            except Exception as e:
                logger.error(f"Unexpected error in {self.name} sweep: {e}")

            try:
                await asyncio.wait_for(
                    self._shutdown_event.wait(),
                    timeout=self.interval,
                )
                # Shutdown event was set
                break
            except asyncio.TimeoutError:
                # Normal timeout, run the next sweep
                pass
