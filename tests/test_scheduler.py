import asyncio

from costoptimizer.engine.scheduler import RefreshScheduler, SchedulerState, TriggerOutcome


class CountingCycle:
    """Async cycle that records concurrency and can be held open."""
    
    def __init__(self, fail_first=False):
        self.runs = 0
        self.active = 0
        self.max_active = 0
        self.fail_first = fail_first
        self.release = None
        self.started = None
    
    async def __call__(self):
        self.runs += 1
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.started is not None:
                self.started.set()
            if self.release is not None:
                await self.release.wait()
            else:
                await asyncio.sleep(0)
            if self.fail_first and self.runs == 1:
                raise RuntimeError("collaborator exploded")
        finally:
            self.active -= 1


def test_first_cycle_runs_on_start_and_interval_repeats():
    async def scenario():
        cycle = CountingCycle()
        scheduler = RefreshScheduler(cycle, interval_seconds=0.05)
        scheduler.start()
        await asyncio.sleep(0.18)
        await scheduler.stop()
        return cycle, scheduler
    
    cycle, scheduler = asyncio.run(scenario())
    assert cycle.runs >= 3
    assert scheduler.cycles_completed == cycle.runs
    assert not scheduler.is_running


def test_triggers_during_a_cycle_coalesce_into_one_rerun():
    async def scenario():
        cycle = CountingCycle()
        cycle.release = asyncio.Event()
        cycle.started = asyncio.Event()
        scheduler = RefreshScheduler(cycle, interval_seconds=60)
        scheduler.start()
        await cycle.started.wait()
        
        assert scheduler.state is SchedulerState.RUNNING
        outcomes = [scheduler.trigger() for _ in range(5)]
        
        cycle.started.clear()
        cycle.release.set()
        await cycle.started.wait()
        await asyncio.sleep(0.05)
        await scheduler.stop()
        return cycle, outcomes
    
    cycle, outcomes = asyncio.run(scenario())
    assert outcomes[0] is TriggerOutcome.QUEUED
    assert set(outcomes[1:]) == {TriggerOutcome.COALESCED}
    assert cycle.runs == 2
    assert cycle.max_active == 1


def test_trigger_while_idle_starts_a_cycle_immediately():
    async def scenario():
        cycle = CountingCycle()
        scheduler = RefreshScheduler(cycle, interval_seconds=60)
        scheduler.start()
        await asyncio.sleep(0.02)
        assert cycle.runs == 1
        assert scheduler.state is SchedulerState.IDLE
        
        outcome = scheduler.trigger()
        await asyncio.sleep(0.02)
        await scheduler.stop()
        return cycle, outcome
    
    cycle, outcome = asyncio.run(scenario())
    assert outcome is TriggerOutcome.SCHEDULED
    assert cycle.runs == 2


def test_manual_cycles_never_overlap_scheduled_ones():
    async def scenario():
        cycle = CountingCycle()
        scheduler = RefreshScheduler(cycle, interval_seconds=0.01)
        scheduler.start()
        await asyncio.gather(*(scheduler.run_cycle() for _ in range(5)))
        await scheduler.stop()
        return cycle
    
    cycle = asyncio.run(scenario())
    assert cycle.max_active == 1
    assert cycle.runs >= 5


def test_failed_cycle_does_not_stop_the_timer():
    async def scenario():
        cycle = CountingCycle(fail_first=True)
        scheduler = RefreshScheduler(cycle, interval_seconds=0.02)
        scheduler.start()
        await asyncio.sleep(0.1)
        await scheduler.stop()
        return cycle, scheduler
    
    cycle, scheduler = asyncio.run(scenario())
    assert scheduler.cycles_failed == 1
    assert scheduler.cycles_completed >= 1
    assert scheduler.last_cycle_at is not None


def test_run_cycle_reports_failure():
    async def scenario():
        scheduler = RefreshScheduler(CountingCycle(fail_first=True))
        return await scheduler.run_cycle(), await scheduler.run_cycle()
    
    assert asyncio.run(scenario()) == (False, True)


def test_stop_without_start_is_a_no_op():
    async def scenario():
        scheduler = RefreshScheduler(CountingCycle())
        await scheduler.stop()
        return scheduler
    
    assert not asyncio.run(scenario()).is_running


def test_trigger_without_worker_runs_a_one_shot_cycle():
    async def scenario():
        cycle = CountingCycle()
        scheduler = RefreshScheduler(cycle, interval_seconds=60)
        outcome = scheduler.trigger()
        await asyncio.sleep(0.02)
        return cycle, scheduler, outcome
    
    cycle, scheduler, outcome = asyncio.run(scenario())
    assert outcome is TriggerOutcome.SCHEDULED
    assert cycle.runs == 1
    assert scheduler.cycles_completed == 1
    assert not scheduler.is_running


def test_one_shot_triggers_coalesce_like_the_worker():
    async def scenario():
        cycle = CountingCycle()
        cycle.release = asyncio.Event()
        cycle.started = asyncio.Event()
        scheduler = RefreshScheduler(cycle, interval_seconds=60)
        
        first = scheduler.trigger()
        await cycle.started.wait()
        later = [scheduler.trigger() for _ in range(3)]
        
        cycle.release.set()
        await asyncio.sleep(0.05)
        return cycle, first, later
    
    cycle, first, later = asyncio.run(scenario())
    assert first is TriggerOutcome.SCHEDULED
    assert later[0] is TriggerOutcome.QUEUED
    assert set(later[1:]) == {TriggerOutcome.COALESCED}
    assert cycle.runs == 2
    assert cycle.max_active == 1


def test_trigger_after_stop_still_runs():
    async def scenario():
        cycle = CountingCycle()
        scheduler = RefreshScheduler(cycle, interval_seconds=60)
        scheduler.start()
        await asyncio.sleep(0.02)
        await scheduler.stop()
        runs_before = cycle.runs
        scheduler.trigger()
        await asyncio.sleep(0.02)
        return cycle.runs - runs_before
    
    assert asyncio.run(scenario()) == 1
