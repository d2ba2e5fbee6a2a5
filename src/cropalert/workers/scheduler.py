"""Background scheduler for periodic event source polling.

Each registered job (one per event source, plus housekeeping such as expiry
cleanup) has its own period. Due jobs run as independent tasks: a slow or
failing poll never delays another job, and a failed poll never stops that
job's future ticks.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Protocol

from cropalert.models.common import TickResult
from cropalert.models.events import DomainEvent
from cropalert.sources.base import EventSource

logger = logging.getLogger(__name__)

# Upper bound on a single sleep of the driving loop, in seconds
_MAX_IDLE_SLEEP = 60.0

EventHandler = Callable[[str, list[DomainEvent]], Awaitable[int]]


class Clock(Protocol):
    def now(self) -> datetime: ...

    async def sleep(self, seconds: float) -> None: ...


class SystemClock:
    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


@dataclass
class ScheduledJob:
    """One periodic job. ``running`` is the Polling state; otherwise the job is Idle."""

    name: str
    period: timedelta
    run: Callable[[], Awaitable[TickResult]]
    next_due: datetime
    last_run: datetime | None = None
    running: bool = False
    last_result: TickResult | None = None
    failures: int = 0

    def is_due(self, now: datetime) -> bool:
        return not self.running and now >= self.next_due

    def advance(self, now: datetime) -> None:
        """Move ``next_due`` past ``now`` without bursting through missed ticks."""
        while self.next_due <= now:
            self.next_due += self.period


class PollScheduler:
    def __init__(self, clock: Clock | None = None, history: int = 200):
        self.clock = clock or SystemClock()
        self.jobs: dict[str, ScheduledJob] = {}
        self.history: deque[TickResult] = deque(maxlen=history)
        self._in_flight: set[asyncio.Task] = set()
        self._loop_task: asyncio.Task | None = None

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def add_job(
        self,
        name: str,
        period_seconds: float,
        run: Callable[[], Awaitable[TickResult]],
        run_immediately: bool = False,
    ) -> ScheduledJob:
        if period_seconds <= 0:
            raise ValueError(f"Period for {name} must be positive")
        if name in self.jobs:
            raise ValueError(f"Job already registered: {name}")
        period = timedelta(seconds=period_seconds)
        now = self.clock.now()
        job = ScheduledJob(
            name=name,
            period=period,
            run=run,
            next_due=now if run_immediately else now + period,
        )
        self.jobs[name] = job
        logger.info("Scheduled %s every %ss", name, period_seconds)
        return job

    def add_source(
        self,
        source: EventSource,
        period_seconds: float,
        handler: EventHandler,
        run_immediately: bool = False,
    ) -> ScheduledJob:
        """Poll ``source`` every ``period_seconds`` and pass its events to ``handler``."""

        async def _poll() -> TickResult:
            started_at = self.clock.now()
            events = await source.poll()
            created = await handler(source.source_type, events)
            return TickResult(
                source_type=source.source_type,
                started_at=started_at,
                ok=True,
                events=len(events),
                notifications=created,
            )

        return self.add_job(source.source_type, period_seconds, _poll, run_immediately)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def _execute(self, job: ScheduledJob, started_at: datetime) -> TickResult:
        try:
            result = await job.run()
        except Exception as exc:
            job.failures += 1
            logger.exception("Poll of %s failed: %s", job.name, exc)
            result = TickResult(source_type=job.name, started_at=started_at, ok=False, error=str(exc))
        finally:
            job.running = False
        job.last_result = result
        self.history.append(result)
        return result

    def _start_due(self, now: datetime) -> list[asyncio.Task]:
        started = []
        for job in self.jobs.values():
            if not job.is_due(now):
                continue
            job.running = True
            job.last_run = now
            job.advance(now)
            task = asyncio.create_task(self._execute(job, now), name=f"poll:{job.name}")
            self._in_flight.add(task)
            task.add_done_callback(self._in_flight.discard)
            started.append(task)
        return started

    async def run_due(self, now: datetime | None = None) -> list[TickResult]:
        """Start every due job and wait for those ticks to finish."""
        tasks = self._start_due(now or self.clock.now())
        if not tasks:
            return []
        return list(await asyncio.gather(*tasks))

    def seconds_until_next(self, now: datetime) -> float:
        idle = [job.next_due for job in self.jobs.values() if not job.running]
        if not idle:
            return _MAX_IDLE_SLEEP
        wait = (min(idle) - now).total_seconds()
        return max(0.0, min(wait, _MAX_IDLE_SLEEP))

    async def run(self) -> None:
        """Driving loop: start due jobs without waiting on them, then sleep until the next one."""
        logger.info("Poll scheduler started (%d jobs)", len(self.jobs))
        while True:
            try:
                now = self.clock.now()
                self._start_due(now)
                await self.clock.sleep(self.seconds_until_next(self.clock.now()) or 0.01)
            except asyncio.CancelledError:
                logger.info("Poll scheduler stopped")
                raise
            except Exception as exc:
                logger.exception("Scheduler error: %s", exc)
                # Continue running despite errors
                await self.clock.sleep(1.0)

    def start(self) -> asyncio.Task:
        if self._loop_task is None or self._loop_task.done():
            self._loop_task = asyncio.create_task(self.run(), name="poll-scheduler")
        return self._loop_task

    async def stop(self) -> None:
        """Stop the loop and let in-flight ticks finish."""
        if self._loop_task is not None:
            self._loop_task.cancel()
            try:
                await self._loop_task
            except asyncio.CancelledError:
                pass
            self._loop_task = None
        if self._in_flight:
            await asyncio.gather(*list(self._in_flight), return_exceptions=True)
