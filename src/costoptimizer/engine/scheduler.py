# src/costoptimizer/engine/scheduler.py
"""
Single-flight refresh scheduler.

One worker task runs cycles on a fixed interval and on demand. Triggers set a
wake flag; while a cycle runs, any number of triggers collapse into at most one
follow-up cycle. Cycles never overlap, including cycles started via run_cycle().
"""

import asyncio
import contextlib
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Optional
import structlog

from costoptimizer.models.resources import utc_now

logger = structlog.get_logger(__name__)


class SchedulerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"


class TriggerOutcome(str, Enum):
    """How an on-demand trigger was absorbed."""
    SCHEDULED = "scheduled"    # scheduler idle; a cycle starts now
    QUEUED = "queued"          # a cycle is running; one re-run will follow it
    COALESCED = "coalesced"    # a run is already pending; nothing added


class RefreshScheduler:
    """Drives an async cycle function; call its methods from the event loop."""
    
    def __init__(self, cycle: Callable[[], Awaitable[Any]], interval_seconds: float = 300.0):
        self._cycle = cycle
        self.interval_seconds = interval_seconds
        self._lock = asyncio.Lock()
        self._wake = asyncio.Event()
        self._task: Optional[asyncio.Task] = None
        self._on_demand: Optional[asyncio.Task] = None
        self._state = SchedulerState.IDLE
        
        self.cycles_completed = 0
        self.cycles_failed = 0
        self.last_cycle_at: Optional[datetime] = None
        self.logger = logger.bind(component="refresh_scheduler")
    
    @property
    def state(self) -> SchedulerState:
        return self._state
    
    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()
    
    def start(self) -> None:
        if self.is_running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run(), name="cost-refresh")
        self.logger.info("Refresh scheduler started", interval_seconds=self.interval_seconds)
    
    async def stop(self) -> None:
        """Stop the timer; an in-flight cycle is cancelled."""
        await self._cancel(self._on_demand)
        self._on_demand = None
        if self._task is None:
            return
        await self._cancel(self._task)
        self._task = None
        self.logger.info("Refresh scheduler stopped")
    
    @staticmethod
    async def _cancel(task: Optional[asyncio.Task]) -> None:
        if task is None or task.done():
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
    
    def trigger(self) -> TriggerOutcome:
        """Request a cycle without waiting for it.

        Works whether or not the periodic worker was started.
        """
        if self._wake.is_set():
            outcome = TriggerOutcome.COALESCED
        elif self._state is SchedulerState.RUNNING:
            outcome = TriggerOutcome.QUEUED
        else:
            outcome = TriggerOutcome.SCHEDULED
        self._wake.set()
        # without the periodic worker, a one-shot task drains the request
        if not self.is_running and (self._on_demand is None or self._on_demand.done()):
            self._on_demand = asyncio.get_running_loop().create_task(
                self._drain(), name="cost-refresh-on-demand"
            )
        self.logger.info("On-demand refresh requested", outcome=outcome.value)
        return outcome
    
    async def run_cycle(self) -> bool:
        """Run one cycle now, waiting for any in-flight cycle first.

        Returns False when the cycle raised; the error is logged, never propagated.
        """
        async with self._lock:
            self._state = SchedulerState.RUNNING
            try:
                await self._cycle()
                self.cycles_completed += 1
                return True
            except Exception as e:
                self.cycles_failed += 1
                self.logger.error("Refresh cycle failed", error=str(e), exc_info=True)
                return False
            finally:
                self._state = SchedulerState.IDLE
                self.last_cycle_at = utc_now()
    
    async def _drain(self) -> None:
        while self._wake.is_set():
            self._wake.clear()
            await self.run_cycle()
    
    async def _run(self) -> None:
        while True:
            self._wake.clear()
            await self.run_cycle()
            try:
                await asyncio.wait_for(self._wake.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                pass
