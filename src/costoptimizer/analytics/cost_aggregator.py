# src/costoptimizer/analytics/cost_aggregator.py
"""Cluster cost rollup: compute, storage, waste, namespace and savings totals."""

from collections import defaultdict
from datetime import datetime
from typing import Any, Dict, Optional, Sequence
import structlog

from costoptimizer.models.resources import (
    ClusterCostSummary,
    NodeResourceRecord,
    PodResourceRecord,
    Recommendation,
    utc_now,
)
from costoptimizer.pricing.cost_model import CostModel

logger = structlog.get_logger(__name__)

WASTE_FACTOR = 0.3


class CostAggregator:
    """Folds node/pod records and recommendations into a ClusterCostSummary."""
    
    def __init__(self, cost_model: CostModel, config: Optional[Dict[str, Any]] = None):
        config = config or {}
        self.cost_model = cost_model
        self.waste_utilization_threshold = config.get('waste_utilization_threshold', 50.0)
        self.logger = logger.bind(analytics="cost_aggregation")
    
    def summarize(self,
                  nodes: Sequence[NodeResourceRecord],
                  pods: Sequence[PodResourceRecord],
                  recommendations: Sequence[Recommendation],
                  now: Optional[datetime] = None) -> ClusterCostSummary:
        compute_cost = sum(node.estimated_cost for node in nodes)
        # storage is a flat placeholder, not derived from volume inventory
        storage_cost = self.cost_model.storage_placeholder_monthly_cost
        
        summary = ClusterCostSummary(
            total_monthly_cost=compute_cost + storage_cost,
            compute_cost=compute_cost,
            storage_cost=storage_cost,
            wasted_resources=self.wasted_cost(nodes),
            potential_savings=sum(rec.potential_savings for rec in recommendations),
            node_count=len(nodes),
            pod_count=len(pods),
            namespace_costs=self.namespace_costs(pods),
            recommendation_count=len(recommendations),
            last_updated=now or utc_now(),
        )
        
        self.logger.debug(
            "Cost summary computed",
            compute_cost=round(compute_cost, 2),
            wasted=round(summary.wasted_resources, 2),
            namespaces=len(summary.namespace_costs)
        )
        return summary
    
    def wasted_cost(self, nodes: Sequence[NodeResourceRecord]) -> float:
        """WASTE_FACTOR of the monthly cost of every node under the waste threshold."""
        threshold = self.waste_utilization_threshold
        wasted = 0.0
        for node in nodes:
            utilizations = (node.cpu_utilization, node.memory_utilization)
            if any(value is not None and value < threshold for value in utilizations):
                wasted += node.estimated_cost * WASTE_FACTOR
        return wasted
    
    @staticmethod
    def namespace_costs(pods: Sequence[PodResourceRecord]) -> Dict[str, float]:
        costs: Dict[str, float] = defaultdict(float)
        for pod in pods:
            costs[pod.namespace] += pod.estimated_cost
        return dict(costs)
