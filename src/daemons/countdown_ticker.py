"""Countdown ticker daemon: recomputes the auction clock on a fixed cadence."""

import asyncio
import logging
from typing import Callable, Optional

from auction.clock import AuctionClock, ClockReading

logger = logging.getLogger(__name__)


class CountdownTicker:
    """
    Background daemon that ticks an AuctionClock.

    The loop ends on its own after the first ENDED reading since the
    clock can no longer change.
    """

    def __init__(
        self,
        clock: AuctionClock,
        tick_interval_seconds: float = 1.0,
        on_tick: Optional[Callable[[ClockReading], None]] = None,
    ):
        """
        Initialize countdown ticker.

        Args:
            clock: Clock to recompute
            tick_interval_seconds: Delay between ticks
            on_tick: Called with every reading (e.g. to re-render)
        """
        self.clock = clock
        self.tick_interval_seconds = tick_interval_seconds
        self.on_tick = on_tick
        self.running = False
        self._task: Optional[asyncio.Task] = None

    async def start(self):
        """Start the ticker daemon."""
        if self.running:
            logger.warning("[COUNTDOWN] Ticker already running")
            return

        self.running = True
        self._task = asyncio.create_task(self._tick_loop())
        logger.debug(f"[COUNTDOWN] Started with {self.tick_interval_seconds}s interval")

    async def stop(self):
        """Stop the ticker daemon."""
        self.running = False

        task, self._task = self._task, None
        if task:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def _tick_loop(self):
        """Main tick loop."""
        try:
            while self.running:
                reading = self.clock.tick()
                if self.on_tick is not None:
                    self.on_tick(reading)
                if reading.ended:
                    break
                await asyncio.sleep(self.tick_interval_seconds)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"[COUNTDOWN] Error in tick loop: {e}", exc_info=True)
        finally:
            self.running = False
