"""
Feedback Sampler - Latest-sample slot shared between threads.

The transport delivers pose samples from its own thread; the control
loop reads them once per tick. Only the most recent sample is kept.
"""

import asyncio
import logging
import threading
import time
from typing import Generic, Optional, TypeVar

from .errors import NotReadyError
from .types import PoseSample


logger = logging.getLogger(__name__)

T = TypeVar("T")


class SharedCell(Generic[T]):
    """
    Single value shared between execution contexts.

    Writers replace the value atomically; readers always observe either
    the previous or the new value, never a mix.
    """

    def __init__(self, value: T) -> None:
        self._lock = threading.Lock()
        self._value = value

    def get(self) -> T:
        with self._lock:
            return self._value

    def set(self, value: T) -> None:
        with self._lock:
            self._value = value

    def swap(self, value: T) -> T:
        """Replace the value and return the previous one"""
        with self._lock:
            previous = self._value
            self._value = value
            return previous

    def compare_and_set(self, expected: T, value: T) -> bool:
        """Replace the value only if it still equals expected"""
        with self._lock:
            if self._value != expected:
                return False
            self._value = value
            return True


class FeedbackSampler:
    """
    Holds the most recent PoseSample.

    update() is meant to be registered as the transport's pose callback.
    """

    def __init__(self) -> None:
        self._slot: SharedCell[Optional[PoseSample]] = SharedCell(None)
        self._count = 0
        self._count_lock = threading.Lock()

    def update(self, sample: PoseSample) -> None:
        """
        Replace the stored sample.

        Called by the transport callback. Never raises.

        Args:
            sample: Newest pose sample
        """
        with self._count_lock:
            self._slot.set(sample)
            self._count += 1
            first = self._count == 1
        if first:
            logger.info(f"First pose sample: yaw={sample.yaw:+.3f} rad")

    def latest(self) -> PoseSample:
        """
        Get the most recent sample.

        Returns:
            Latest PoseSample

        Raises:
            NotReadyError: If no sample has arrived yet
        """
        sample = self._slot.get()
        if sample is None:
            raise NotReadyError("No pose sample received yet")
        return sample

    @property
    def is_ready(self) -> bool:
        """Check if at least one sample has arrived"""
        return self._slot.get() is not None

    @property
    def sample_count(self) -> int:
        """Number of samples received so far"""
        return self._count

    async def wait_ready(self, timeout: float, poll_interval: float = 0.05) -> PoseSample:
        """
        Wait for the first sample.

        Args:
            timeout: Max seconds to wait
            poll_interval: Seconds between checks

        Returns:
            The first available sample

        Raises:
            NotReadyError: If nothing arrived within timeout
        """
        deadline = time.monotonic() + timeout
        while not self.is_ready:
            if time.monotonic() >= deadline:
                raise NotReadyError(f"No pose sample within {timeout:.1f}s")
            await asyncio.sleep(poll_interval)
        return self.latest()
