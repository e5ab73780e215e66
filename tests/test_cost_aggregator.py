import pytest

from costoptimizer.models.resources import NodeResourceRecord, PodResourceRecord, Recommendation


def _node(name, cost, cpu, memory):
    return NodeResourceRecord(name=name, estimated_cost=cost, cpu_utilization=cpu, memory_utilization=memory)


def _pod(name, namespace, cost):
    return PodResourceRecord(name=name, namespace=namespace, estimated_cost=cost)


def _rec(savings):
    return Recommendation(type="node_scaling", resource="n", description="d", impact="i",
                          potential_savings=savings, priority="high")


def test_summary_totals(aggregator):
    nodes = [_node("a", 100.0, 10.0, 80.0), _node("b", 200.0, 70.0, 60.0)]
    pods = [_pod("p1", "shop", 12.5), _pod("p2", "shop", 7.5), _pod("p3", "batch", 3.0)]
    summary = aggregator.summarize(nodes, pods, [_rec(41.93), _rec(-50.0)])
    
    assert summary.compute_cost == pytest.approx(300.0)
    assert summary.storage_cost == 100.0
    assert summary.total_monthly_cost == pytest.approx(400.0)
    assert summary.wasted_resources == pytest.approx(30.0)
    assert summary.potential_savings == pytest.approx(-8.07)
    assert summary.node_count == 2
    assert summary.pod_count == 3
    assert summary.namespace_costs == pytest.approx({"shop": 20.0, "batch": 3.0})
    assert summary.recommendation_count == 2


def test_namespace_costs_sum_to_pod_costs(aggregator):
    pods = [_pod(f"p{i}", f"ns{i % 3}", 1.5 * i) for i in range(10)]
    costs = aggregator.namespace_costs(pods)
    assert sum(costs.values()) == pytest.approx(sum(p.estimated_cost for p in pods))


def test_waste_ignores_unmeasured_dimension(aggregator):
    assert aggregator.wasted_cost([_node("a", 100.0, None, 80.0)]) == 0.0
    assert aggregator.wasted_cost([_node("a", 100.0, None, 20.0)]) == pytest.approx(30.0)
    assert aggregator.wasted_cost([_node("a", 100.0, 50.0, 50.0)]) == 0.0


def test_empty_inputs(aggregator):
    summary = aggregator.summarize([], [], [])
    assert summary.compute_cost == 0
    assert summary.total_monthly_cost == 100.0
    assert summary.namespace_costs == {}
    assert summary.recommendation_count == 0
