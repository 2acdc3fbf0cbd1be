"""Tests for the feedback sampler and shared cell"""

import asyncio
import threading

import pytest
from motion_core.errors import NotReadyError
from motion_core.feedback import FeedbackSampler, SharedCell
from motion_core.types import PoseSample


def test_latest_before_first_sample():
    """Test NotReadyError until the first update"""
    sampler = FeedbackSampler()
    assert not sampler.is_ready

    with pytest.raises(NotReadyError):
        sampler.latest()


def test_keeps_only_latest():
    """Test each update replaces the stored sample"""
    sampler = FeedbackSampler()
    sampler.update(PoseSample(yaw=0.1, timestamp=1.0))
    sampler.update(PoseSample(yaw=0.2, timestamp=2.0))

    assert sampler.is_ready
    assert sampler.latest().yaw == 0.2
    assert sampler.sample_count == 2


def test_update_from_other_thread():
    """Test samples from a transport thread are visible to the reader"""
    sampler = FeedbackSampler()

    def producer():
        for i in range(1000):
            sampler.update(PoseSample(x=float(i), yaw=float(i) / 1000.0, timestamp=float(i)))

    thread = threading.Thread(target=producer)
    thread.start()
    while thread.is_alive():
        if sampler.is_ready:
            sample = sampler.latest()
            # Never torn: fields always belong to the same update
            assert sample.yaw == pytest.approx(sample.x / 1000.0)
    thread.join()

    assert sampler.latest().x == 999.0


def test_wait_ready_returns_first_sample():
    """Test wait_ready resolves once a sample arrives"""
    sampler = FeedbackSampler()

    async def scenario():
        loop = asyncio.get_running_loop()
        loop.call_later(0.05, sampler.update, PoseSample(yaw=1.0))
        return await sampler.wait_ready(timeout=1.0, poll_interval=0.01)

    sample = asyncio.run(scenario())
    assert sample.yaw == 1.0


def test_wait_ready_timeout():
    """Test wait_ready raises when nothing arrives"""
    sampler = FeedbackSampler()

    with pytest.raises(NotReadyError):
        asyncio.run(sampler.wait_ready(timeout=0.05, poll_interval=0.01))


def test_shared_cell_operations():
    """Test get/set/swap/compare_and_set"""
    cell = SharedCell("a")
    assert cell.get() == "a"

    cell.set("b")
    assert cell.swap("c") == "b"
    assert cell.get() == "c"

    assert not cell.compare_and_set("x", "d")
    assert cell.get() == "c"
    assert cell.compare_and_set("c", "d")
    assert cell.get() == "d"


def test_concurrent_updates_counted(caplog):
    """Test no sample is lost from the count and the first is logged once"""
    sampler = FeedbackSampler()

    def writer():
        for i in range(2000):
            sampler.update(PoseSample(yaw=0.001 * i))

    with caplog.at_level("INFO", logger="motion_core.feedback"):
        threads = [threading.Thread(target=writer) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

    assert sampler.sample_count == 8000
    assert caplog.text.count("First pose sample") == 1
