# src/costoptimizer/engine/analysis.py
"""One analysis cycle: snapshot in, immutable AnalysisResult out."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple
import structlog

from costoptimizer.analytics.cost_aggregator import CostAggregator
from costoptimizer.analytics.recommendation_rules import RecommendationRules
from costoptimizer.analytics.utilization_analytics import UtilizationAnalyzer
from costoptimizer.engine.snapshot import ClusterSnapshot
from costoptimizer.models.resources import (
    ClusterCostSummary,
    NodeResourceRecord,
    PodResourceRecord,
    Recommendation,
    utc_now,
)

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class AnalysisResult:
    """Records, recommendations and summary derived from a single snapshot."""
    node_metrics: Tuple[NodeResourceRecord, ...]
    pod_metrics: Tuple[PodResourceRecord, ...]
    recommendations: Tuple[Recommendation, ...]
    summary: ClusterCostSummary
    generated_at: datetime = field(default_factory=utc_now)
    unavailable: Tuple[str, ...] = ()
    cycle: int = 0


class AnalysisCycle:
    """Runs the analyzer, rules and aggregator over one snapshot."""
    
    def __init__(self,
                 analyzer: UtilizationAnalyzer,
                 rules: RecommendationRules,
                 aggregator: CostAggregator):
        self.analyzer = analyzer
        self.rules = rules
        self.aggregator = aggregator
        self.logger = logger.bind(component="analysis_cycle")
    
    def run(self, snapshot: ClusterSnapshot, cycle: int = 0,
            now: Optional[datetime] = None) -> AnalysisResult:
        now = now or utc_now()
        
        # a failed inventory or metrics call drops that resource kind only
        node_utilization = []
        if snapshot.nodes is not None and snapshot.node_metrics is not None:
            node_utilization = self.analyzer.analyze_nodes(snapshot.nodes, snapshot.node_metrics)
        
        pod_utilization = []
        if snapshot.pods is not None and snapshot.pod_metrics is not None:
            pod_utilization = self.analyzer.analyze_pods(snapshot.pods, snapshot.pod_metrics)
        
        deployments = snapshot.deployments or ()
        
        recommendations = self.rules.evaluate(node_utilization, pod_utilization, deployments, now)
        node_records = [self.analyzer.node_record(u) for u in node_utilization]
        pod_records = [self.analyzer.pod_record(u) for u in pod_utilization]
        summary = self.aggregator.summarize(node_records, pod_records, recommendations, now)
        
        self.logger.info(
            "Analysis cycle completed",
            cycle=cycle,
            nodes=len(node_records),
            pods=len(pod_records),
            deployments=len(deployments),
            recommendations=len(recommendations),
            potential_savings=round(summary.potential_savings, 2)
        )
        
        return AnalysisResult(
            node_metrics=tuple(node_records),
            pod_metrics=tuple(pod_records),
            recommendations=tuple(recommendations),
            summary=summary,
            generated_at=now,
            unavailable=snapshot.unavailable,
            cycle=cycle,
        )
    
    def empty_result(self) -> AnalysisResult:
        """What queries see before the first cycle publishes."""
        now = utc_now()
        return AnalysisResult(
            node_metrics=(),
            pod_metrics=(),
            recommendations=(),
            summary=self.aggregator.summarize([], [], [], now),
            generated_at=now,
        )
