"""Tests for the poll scheduler, driven by a virtual clock."""

import asyncio
from datetime import timedelta

import pytest

from cropalert.models.common import TickResult
from cropalert.sources.base import EventSource
from cropalert.workers.scheduler import PollScheduler


class _CountingSource(EventSource):
    def __init__(self, source_type: str, fail_on: set[int] | None = None):
        self.source_type = source_type
        self.calls = 0
        self._fail_on = fail_on or set()

    async def poll(self):
        self.calls += 1
        if self.calls in self._fail_on:
            raise ConnectionError(f"{self.source_type} feed unreachable")
        return []


async def _handler(source_type, events):
    return len(events)


# ===========================================================================
# Registration
# ===========================================================================


class TestRegistration:
    def test_first_tick_after_one_period(self, clock):
        scheduler = PollScheduler(clock)
        job = scheduler.add_source(_CountingSource("weather"), 300, _handler)
        assert job.next_due == clock.now() + timedelta(seconds=300)

    def test_run_immediately(self, clock):
        scheduler = PollScheduler(clock)
        job = scheduler.add_source(_CountingSource("weather"), 300, _handler, run_immediately=True)
        assert job.is_due(clock.now())

    def test_rejects_bad_registrations(self, clock):
        scheduler = PollScheduler(clock)
        scheduler.add_source(_CountingSource("weather"), 300, _handler)
        with pytest.raises(ValueError):
            scheduler.add_source(_CountingSource("weather"), 300, _handler)
        with pytest.raises(ValueError):
            scheduler.add_source(_CountingSource("price"), 0, _handler)


# ===========================================================================
# Ticks
# ===========================================================================


class TestTicks:
    @pytest.mark.asyncio
    async def test_each_source_keeps_its_own_period(self, clock):
        scheduler = PollScheduler(clock)
        weather = _CountingSource("weather")
        price = _CountingSource("price")
        scheduler.add_source(weather, 300, _handler)
        scheduler.add_source(price, 600, _handler)

        for _ in range(12):
            clock.advance(seconds=300)
            await scheduler.run_due()

        assert weather.calls == 12
        assert price.calls == 6

    @pytest.mark.asyncio
    async def test_failure_does_not_affect_other_sources_or_next_tick(self, clock):
        scheduler = PollScheduler(clock)
        weather = _CountingSource("weather", fail_on={1})
        price = _CountingSource("price")
        scheduler.add_source(weather, 300, _handler)
        scheduler.add_source(price, 300, _handler)

        clock.advance(seconds=300)
        first = {r.source_type: r for r in await scheduler.run_due()}
        assert first["weather"].ok is False
        assert "unreachable" in first["weather"].error
        assert first["price"].ok is True

        clock.advance(seconds=300)
        second = {r.source_type: r for r in await scheduler.run_due()}
        assert second["weather"].ok is True
        assert weather.calls == 2
        assert scheduler.jobs["weather"].failures == 1

    @pytest.mark.asyncio
    async def test_missed_ticks_are_not_replayed(self, clock):
        scheduler = PollScheduler(clock)
        source = _CountingSource("seasonal")
        job = scheduler.add_source(source, 3600, _handler)

        clock.advance(hours=5)
        await scheduler.run_due()

        assert source.calls == 1
        assert job.next_due > clock.now()
        assert await scheduler.run_due() == []

    @pytest.mark.asyncio
    async def test_results_recorded_in_history(self, clock):
        scheduler = PollScheduler(clock)

        async def _job():
            return TickResult(source_type="cleanup", started_at=clock.now(), ok=True, events=3)

        scheduler.add_job("cleanup", 60, _job)
        clock.advance(seconds=60)
        await scheduler.run_due()

        assert scheduler.history[-1].events == 3
        assert scheduler.jobs["cleanup"].last_result.ok is True

    @pytest.mark.asyncio
    async def test_slow_poll_does_not_block_other_jobs(self, clock):
        scheduler = PollScheduler(clock)
        release = asyncio.Event()

        class _Slow(_CountingSource):
            async def poll(self):
                self.calls += 1
                await release.wait()
                return []

        slow = _Slow("government")
        fast = _CountingSource("price")
        scheduler.add_source(slow, 60, _handler)
        scheduler.add_source(fast, 60, _handler)

        clock.advance(seconds=60)
        scheduler._start_due(clock.now())
        await asyncio.sleep(0)

        clock.advance(seconds=60)
        await scheduler.run_due()
        assert fast.calls == 2
        assert slow.calls == 1
        assert scheduler.jobs["government"].running is True

        release.set()
        await scheduler.stop()
        assert scheduler.jobs["government"].running is False


# ===========================================================================
# Driving loop
# ===========================================================================


class TestLoop:
    @pytest.mark.asyncio
    async def test_start_and_stop(self, clock):
        scheduler = PollScheduler(clock)
        source = _CountingSource("weather")
        scheduler.add_source(source, 300, _handler)

        scheduler.start()
        for _ in range(50):
            await asyncio.sleep(0)
        await scheduler.stop()

        assert source.calls >= 1

    def test_idle_sleep_capped(self, clock):
        scheduler = PollScheduler(clock)
        scheduler.add_source(_CountingSource("seasonal"), 3600, _handler)
        assert scheduler.seconds_until_next(clock.now()) == 60.0
