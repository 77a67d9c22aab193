"""Tests for the system clock."""

from __future__ import annotations

import pytest

from mobiq.core.clock import Clock, SystemClock


class TestSystemClock:
    def test_is_clock(self) -> None:
        assert isinstance(SystemClock(), Clock)

    def test_now_is_monotonic(self) -> None:
        clock = SystemClock()
        first = clock.now()
        assert clock.now() >= first

    @pytest.mark.asyncio
    async def test_sleep_advances(self) -> None:
        clock = SystemClock()
        start = clock.now()
        await clock.sleep(0.01)
        assert clock.now() - start >= 0.005

    @pytest.mark.asyncio
    async def test_negative_sleep_returns(self) -> None:
        await SystemClock().sleep(-1)
