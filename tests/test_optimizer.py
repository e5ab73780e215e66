import asyncio
import time

import pytest

from costoptimizer.core.exceptions import ActionNotFoundException
from costoptimizer.engine.optimizer import CostOptimizer
from costoptimizer.engine.scheduler import TriggerOutcome
from costoptimizer.models.resources import ActionStatus
from fakes import RecordingExecutor

CONFIG = {
    "scheduler": {"interval_seconds": 60, "collaborator_timeout_seconds": 1},
}


def test_queries_before_first_cycle_return_empty_result(sample_cluster):
    optimizer = CostOptimizer(sample_cluster, sample_cluster, CONFIG)
    assert optimizer.get_recommendations() == []
    assert optimizer.get_node_metrics() == []
    assert optimizer.get_pod_metrics() == []
    assert optimizer.get_cost_summary().recommendation_count == 0
    assert optimizer.get_status()["last_result_cycle"] == 0


def test_refresh_publishes_consistent_result(sample_cluster):
    optimizer = CostOptimizer(sample_cluster, sample_cluster, CONFIG)
    result = asyncio.run(optimizer.refresh())
    
    assert result.cycle == 1
    assert len(optimizer.get_recommendations()) == 5
    assert optimizer.get_cost_summary().recommendation_count == len(optimizer.get_recommendations())
    assert [n.name for n in optimizer.get_node_metrics()] == ["ip-10-0-1-5", "worker-m5.xlarge-b"]
    assert {p.name for p in optimizer.get_pod_metrics()} == {"api-7d9f", "worker-1"}
    assert optimizer.get_result() == result


def test_each_cycle_replaces_the_recommendation_list(sample_cluster):
    optimizer = CostOptimizer(sample_cluster, sample_cluster, CONFIG)
    
    async def scenario():
        await optimizer.refresh()
        sample_cluster.deployments = []
        return await optimizer.refresh()
    
    result = asyncio.run(scenario())
    assert result.cycle == 2
    assert len(result.recommendations) == 3
    assert result.summary.recommendation_count == 3


def test_query_lists_are_copies(sample_cluster):
    optimizer = CostOptimizer(sample_cluster, sample_cluster, CONFIG)
    asyncio.run(optimizer.refresh())
    optimizer.get_recommendations().clear()
    assert len(optimizer.get_recommendations()) == 5


def test_published_summary_cannot_be_changed_by_callers(sample_cluster):
    optimizer = CostOptimizer(sample_cluster, sample_cluster, CONFIG)
    asyncio.run(optimizer.refresh())
    
    optimizer.get_cost_summary().namespace_costs["shop"] = 1e9
    optimizer.get_result().summary.namespace_costs.clear()
    
    assert optimizer.get_cost_summary().namespace_costs["shop"] == pytest.approx(25.2)
    assert optimizer.get_result().summary.namespace_costs["batch"] == pytest.approx(14.4)
    assert isinstance(optimizer.get_pod_metrics()[0].containers, tuple)


def test_reads_during_a_cycle_see_the_previous_result(sample_cluster):
    optimizer = CostOptimizer(sample_cluster, sample_cluster, CONFIG)
    
    async def scenario():
        await optimizer.refresh()
        sample_cluster.deployments = []
        sample_cluster.delays = {"nodes": 0.2}
        
        outcome = optimizer.trigger_optimize()
        await asyncio.sleep(0.05)
        
        started = time.monotonic()
        during = {
            "status": optimizer.get_status(),
            "recommendations": optimizer.get_recommendations(),
            "summary": optimizer.get_cost_summary(),
            "cycle": optimizer.get_result().cycle,
        }
        elapsed = time.monotonic() - started
        
        await asyncio.sleep(0.3)
        return outcome, during, elapsed
    
    outcome, during, elapsed = asyncio.run(scenario())
    assert outcome is TriggerOutcome.SCHEDULED
    assert elapsed < 0.1
    assert during["status"]["state"] == "running"
    assert during["cycle"] == 1
    assert len(during["recommendations"]) == 5
    assert during["summary"].recommendation_count == len(during["recommendations"])
    
    after = optimizer.get_result()
    assert after.cycle == 2
    assert len(after.recommendations) == 3
    assert after.summary.recommendation_count == 3


def test_trigger_before_start_runs_a_cycle(sample_cluster):
    optimizer = CostOptimizer(sample_cluster, sample_cluster, CONFIG)
    
    async def scenario():
        outcome = optimizer.trigger_optimize()
        await asyncio.sleep(0.1)
        return outcome
    
    assert asyncio.run(scenario()) is TriggerOutcome.SCHEDULED
    assert optimizer.get_result().cycle == 1
    assert "nodes" in sample_cluster.calls
    assert optimizer.get_status()["scheduler_running"] is False


def test_trigger_runs_a_cycle_in_the_background(sample_cluster):
    async def scenario():
        async with CostOptimizer(sample_cluster, sample_cluster, CONFIG) as optimizer:
            await asyncio.sleep(0.05)
            outcome = optimizer.trigger_optimize()
            await asyncio.sleep(0.05)
            return optimizer, outcome
    
    optimizer, outcome = asyncio.run(scenario())
    assert outcome is TriggerOutcome.SCHEDULED
    assert optimizer.get_result().cycle == 2
    status = optimizer.get_status()
    assert status["cycles_completed"] == 2
    assert status["scheduler_running"] is False


def test_provider_outage_is_reported_in_status(sample_cluster):
    sample_cluster.failing = {"pods"}
    optimizer = CostOptimizer(sample_cluster, sample_cluster, CONFIG)
    asyncio.run(optimizer.refresh())
    
    assert optimizer.get_status()["unavailable"] == ["pods"]
    assert optimizer.get_pod_metrics() == []
    assert optimizer.get_cost_summary().namespace_costs == {}
    assert optimizer.get_cost_summary().node_count == 2


def test_actions_through_facade(sample_cluster):
    executor = RecordingExecutor()
    optimizer = CostOptimizer(sample_cluster, sample_cluster, CONFIG, action_executor=executor)
    
    [action] = optimizer.list_actions()
    assert action.status == ActionStatus.PENDING
    
    executed = asyncio.run(optimizer.execute_action("1"))
    assert executed.status == ActionStatus.EXECUTED
    assert executor.executed == ["1"]
    
    with pytest.raises(ActionNotFoundException):
        asyncio.run(optimizer.execute_action("42"))


def test_pricing_config_reaches_cost_model(sample_cluster):
    config = {**CONFIG, "pricing": {"storage_placeholder_monthly_cost": 0.0}}
    optimizer = CostOptimizer(sample_cluster, sample_cluster, config)
    summary = asyncio.run(optimizer.refresh()).summary
    assert summary.storage_cost == 0.0
    assert summary.total_monthly_cost == pytest.approx(summary.compute_cost)
