# src/costoptimizer/engine/optimizer.py
"""
CostOptimizer: the engine's query surface.

Owns the refresh scheduler and the published result. Queries return the last
published AnalysisResult and never wait on a running cycle.
"""

import dataclasses
from typing import Any, Dict, List, Optional
import structlog

from costoptimizer.actions.catalog import ActionCatalog
from costoptimizer.analytics.cost_aggregator import CostAggregator
from costoptimizer.analytics.recommendation_rules import RecommendationRules
from costoptimizer.analytics.utilization_analytics import UtilizationAnalyzer
from costoptimizer.core.providers import ActionExecutor, InventoryProvider, MetricsProvider
from costoptimizer.engine.analysis import AnalysisCycle, AnalysisResult
from costoptimizer.engine.scheduler import RefreshScheduler, TriggerOutcome
from costoptimizer.engine.snapshot import SnapshotCollector
from costoptimizer.engine.store import ResultStore
from costoptimizer.models.resources import (
    ClusterCostSummary,
    NodeResourceRecord,
    OptimizationAction,
    PodResourceRecord,
    Recommendation,
)
from costoptimizer.pricing.cost_model import CostModel

logger = structlog.get_logger(__name__)


class CostOptimizer:
    """Cost attribution and recommendation engine."""
    
    def __init__(self,
                 inventory: InventoryProvider,
                 metrics: MetricsProvider,
                 config: Optional[Dict[str, Any]] = None,
                 cost_model: Optional[CostModel] = None,
                 action_catalog: Optional[ActionCatalog] = None,
                 action_executor: Optional[ActionExecutor] = None):
        config = config or {}
        self.k8s_config = config.get("kubernetes", {})
        self.pricing_config = config.get("pricing", {})
        self.scheduler_config = config.get("scheduler", {})
        self.rules_config = config.get("rules", {})
        
        self.cost_model = cost_model or CostModel(self.pricing_config)
        self.collector = SnapshotCollector(inventory, metrics, {
            "namespace": self.k8s_config.get("namespace"),
            "collaborator_timeout_seconds": self.scheduler_config.get("collaborator_timeout_seconds", 30.0),
        })
        self.analysis = AnalysisCycle(
            UtilizationAnalyzer(self.cost_model),
            RecommendationRules(self.cost_model, self.rules_config),
            CostAggregator(self.cost_model, self.rules_config),
        )
        self.store = ResultStore(self.analysis.empty_result())
        self.scheduler = RefreshScheduler(
            self._refresh_cycle,
            interval_seconds=self.scheduler_config.get("interval_seconds", 300.0),
        )
        self.actions = action_catalog or ActionCatalog(executor=action_executor)
        self._cycle_count = 0
        self.logger = logger.bind(component="cost_optimizer")
    
    async def start(self) -> None:
        """Start periodic refresh; the first cycle runs immediately."""
        self.scheduler.start()
    
    async def stop(self) -> None:
        await self.scheduler.stop()
    
    async def __aenter__(self):
        await self.start()
        return self
    
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.stop()
    
    async def refresh(self) -> AnalysisResult:
        """Run one cycle now (serialized with scheduled cycles) and return the published result."""
        await self.scheduler.run_cycle()
        return self.get_result()
    
    async def _refresh_cycle(self) -> None:
        self._cycle_count += 1
        cycle = self._cycle_count
        self.logger.info("Running cost analysis", cycle=cycle)
        snapshot = await self.collector.collect()
        result = self.analysis.run(snapshot, cycle=cycle)
        self.store.publish(result)
        self.logger.info(
            f"Generated {len(result.recommendations)} recommendations",
            cycle=cycle,
            unavailable=list(result.unavailable)
        )
    
    # Queries
    
    def get_result(self) -> AnalysisResult:
        """The published result, with a summary the caller may modify freely."""
        result = self.store.current()
        return dataclasses.replace(result, summary=result.summary.model_copy(deep=True))
    
    def get_node_metrics(self) -> List[NodeResourceRecord]:
        return list(self.store.current().node_metrics)
    
    def get_pod_metrics(self) -> List[PodResourceRecord]:
        return list(self.store.current().pod_metrics)
    
    def get_recommendations(self) -> List[Recommendation]:
        return list(self.store.current().recommendations)
    
    def get_cost_summary(self) -> ClusterCostSummary:
        return self.store.current().summary.model_copy(deep=True)
    
    def trigger_optimize(self) -> TriggerOutcome:
        """Schedule an on-demand cycle and return immediately."""
        return self.scheduler.trigger()
    
    def get_status(self) -> Dict[str, Any]:
        result = self.store.current()
        return {
            "state": self.scheduler.state.value,
            "scheduler_running": self.scheduler.is_running,
            "cycles_completed": self.scheduler.cycles_completed,
            "cycles_failed": self.scheduler.cycles_failed,
            "last_cycle_at": self.scheduler.last_cycle_at.isoformat() if self.scheduler.last_cycle_at else None,
            "last_result_cycle": result.cycle,
            "unavailable": list(result.unavailable),
        }
    
    # Actions
    
    def list_actions(self) -> List[OptimizationAction]:
        return self.actions.list_actions()
    
    async def execute_action(self, action_id: str) -> OptimizationAction:
        return await self.actions.execute_action(action_id)
