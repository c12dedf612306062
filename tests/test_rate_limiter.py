"""Tests for the rate gate."""

import asyncio
import time

import pytest

from arena_research.core.rate_limiter import (
    DEFAULT_MIN_INTERVAL,
    RateGate,
    get_rate_gate,
    set_rate_gate,
)


class TestRateGate:
    """Tests for RateGate class."""

    def test_defaults(self):
        """Test default spacing."""
        gate = RateGate()
        assert gate.min_interval == DEFAULT_MIN_INTERVAL
        assert gate.last_send is None

    def test_negative_interval_clamped(self):
        """Test that a negative interval behaves like no spacing."""
        assert RateGate(min_interval=-1).min_interval == 0.0

    @pytest.mark.asyncio
    async def test_first_acquire_is_immediate(self):
        """Test that the first grant does not wait."""
        gate = RateGate(min_interval=0.5)

        start = time.monotonic()
        waited = await gate.acquire()

        assert waited == 0.0
        assert time.monotonic() - start < 0.1
        assert gate.last_send is not None

    @pytest.mark.asyncio
    async def test_second_acquire_waits(self):
        """Test that back-to-back grants are spaced by the interval."""
        gate = RateGate(min_interval=0.05)

        await gate.acquire()
        start = time.monotonic()
        waited = await gate.acquire()
        elapsed = time.monotonic() - start

        assert waited > 0
        assert elapsed >= 0.04

    @pytest.mark.asyncio
    async def test_no_wait_after_interval_elapsed(self):
        """Test that a grant after the interval has passed is immediate."""
        gate = RateGate(min_interval=0.02)

        await gate.acquire()
        await asyncio.sleep(0.05)
        waited = await gate.acquire()

        assert waited == 0.0

    @pytest.mark.asyncio
    async def test_concurrent_callers_are_serialized_in_order(self):
        """Test that concurrent callers are granted one at a time, first come first served."""
        gate = RateGate(min_interval=0.03)
        grants = []

        async def caller(n: int) -> None:
            await gate.acquire()
            grants.append((n, time.monotonic()))

        await asyncio.gather(*(caller(n) for n in range(3)))

        assert [n for n, _ in grants] == [0, 1, 2]
        for (_, earlier), (_, later) in zip(grants, grants[1:]):
            assert later - earlier >= 0.025

    @pytest.mark.asyncio
    async def test_stats_and_reset(self):
        """Test grant statistics and reset."""
        gate = RateGate(min_interval=0)
        await gate.acquire()
        await gate.acquire()

        assert gate.stats["grants"] == 2

        gate.reset()
        assert gate.stats["grants"] == 0
        assert gate.last_send is None


class TestGlobalRateGate:
    """Tests for the process-wide gate."""

    def test_get_rate_gate_is_singleton(self):
        """Test that the global gate is shared."""
        assert get_rate_gate() is get_rate_gate()

    def test_set_rate_gate(self):
        """Test replacing the global gate."""
        original = get_rate_gate()
        replacement = RateGate(min_interval=1.0)
        try:
            set_rate_gate(replacement)
            assert get_rate_gate() is replacement
        finally:
            set_rate_gate(original)
