"""
Rate keeping for the control tick.

Schedules ticks against a monotonic clock so the period does not drift
with the time spent inside each tick, and waits with asyncio.sleep
instead of spinning.
"""

import asyncio
import logging
import time
from typing import Callable, Optional


logger = logging.getLogger(__name__)


class RateKeeper:
    """
    Maintain a fixed loop period.

    - monitor_time(): advance the schedule, return remaining time (negative if late)
    - keep_time(): monitor_time() then sleep for the remaining time, if positive
    """

    def __init__(
        self,
        period: float,
        clock: Callable[[], float] = time.monotonic,
        lag_warning: Optional[float] = 0.005,
    ) -> None:
        if period <= 0.0:
            raise ValueError("period must be positive")
        self.period = period
        self.clock = clock
        self.lag_warning = lag_warning
        self.frame = 0
        self._next = self.clock() + self.period

    def monitor_time(self) -> float:
        """
        Advance to the next frame.

        Returns:
            Seconds left before the next frame is due (negative if lagging)
        """
        now = self.clock()
        remaining = self._next - now
        if self.lag_warning is not None and remaining < -self.lag_warning:
            logger.warning(f"Control tick lagging by {-remaining * 1000:.1f} ms (frame {self.frame})")
        if remaining < 0.0:
            # Re-anchor instead of firing a burst of catch-up ticks
            self._next = now

        self._next += self.period
        self.frame += 1
        return remaining

    async def keep_time(self) -> None:
        """Wait until the next frame is due"""
        remaining = self.monitor_time()
        if remaining > 0.0:
            await asyncio.sleep(remaining)
        else:
            # Still yield so other tasks (input reader) get to run
            await asyncio.sleep(0)
