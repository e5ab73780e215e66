# src/costoptimizer/analytics/recommendation_rules.py
"""
Threshold-based recommendation rules.

Each rule looks at one entity and may emit a recommendation; several rules can
fire for the same entity. Savings for the pod and deployment rules are fixed
heuristic amounts, not derived from the cost model.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence
import structlog

from costoptimizer.analytics.utilization_analytics import NodeUtilization, PodUtilization
from costoptimizer.core.utils import format_bytes, format_cpu
from costoptimizer.models.descriptors import DeploymentDescriptor
from costoptimizer.models.resources import Priority, Recommendation, RecommendationType, utc_now
from costoptimizer.pricing.cost_model import CostModel

logger = structlog.get_logger(__name__)

NODE_CONSOLIDATION_SAVINGS_FACTOR = 0.7
NODE_SCALING_SAVINGS = -50.0
CPU_RIGHTSIZING_SAVINGS = 15.0
MEMORY_RIGHTSIZING_SAVINGS = 10.0
HORIZONTAL_SCALING_SAVINGS = 25.0
RESOURCE_GOVERNANCE_SAVINGS = 20.0


def _below(value: Optional[float], threshold: float) -> bool:
    return value is not None and value < threshold


def _above(value: Optional[float], threshold: float) -> bool:
    return value is not None and value > threshold


def _fmt_pct(value: Optional[float]) -> str:
    return "n/a" if value is None else f"{value:.1f}%"


class RecommendationRules:
    """The fixed rule set, evaluated per node, running pod and deployment."""
    
    def __init__(self, cost_model: CostModel, config: Optional[Dict[str, Any]] = None):
        config = config or {}
        self.cost_model = cost_model
        self.logger = logger.bind(analytics="recommendations")
        
        self.thresholds = {
            'node_underutilized_cpu': config.get('node_underutilized_cpu', 20.0),
            'node_underutilized_memory': config.get('node_underutilized_memory', 30.0),
            'node_overutilized': config.get('node_overutilized', 90.0),
            'min_replicas_for_autoscaling': config.get('min_replicas_for_autoscaling', 1),
        }
    
    def evaluate(self,
                 nodes: Sequence[NodeUtilization],
                 pods: Sequence[PodUtilization],
                 deployments: Sequence[DeploymentDescriptor],
                 now: Optional[datetime] = None) -> List[Recommendation]:
        """All recommendations, in node, pod, deployment order."""
        now = now or utc_now()
        recommendations = []
        recommendations.extend(self.evaluate_nodes(nodes, now))
        recommendations.extend(self.evaluate_pods(pods, now))
        recommendations.extend(self.evaluate_deployments(deployments, now))
        return recommendations
    
    def evaluate_nodes(self, nodes: Sequence[NodeUtilization], now: datetime) -> List[Recommendation]:
        recommendations = []
        for node in nodes:
            recommendations.extend(self._node_rules(node, now))
        return recommendations
    
    def _node_rules(self, node: NodeUtilization, now: datetime) -> List[Recommendation]:
        recommendations = []
        cpu, memory = node.cpu_utilization, node.memory_utilization
        usage = f"(CPU: {_fmt_pct(cpu)}, Memory: {_fmt_pct(memory)})"
        
        # both dimensions must be measurable to call a node idle
        if (_below(cpu, self.thresholds['node_underutilized_cpu'])
                and _below(memory, self.thresholds['node_underutilized_memory'])):
            instance_type = self.cost_model.resolve_instance_type(node.name, node.node.labels)
            monthly_cost = self.cost_model.node_monthly_cost(instance_type)
            recommendations.append(Recommendation(
                type=RecommendationType.NODE_OPTIMIZATION,
                resource=node.name,
                description=f"Node {node.name} is underutilized {usage}",
                impact="Consider consolidating workloads or downsizing",
                potential_savings=monthly_cost * NODE_CONSOLIDATION_SAVINGS_FACTOR,
                priority=Priority.MEDIUM,
                timestamp=now,
            ))
        
        overutilized = self.thresholds['node_overutilized']
        if _above(cpu, overutilized) or _above(memory, overutilized):
            recommendations.append(Recommendation(
                type=RecommendationType.NODE_SCALING,
                resource=node.name,
                description=f"Node {node.name} is overutilized {usage}",
                impact="Consider scaling up or adding more nodes",
                potential_savings=NODE_SCALING_SAVINGS,
                priority=Priority.HIGH,
                timestamp=now,
            ))
        
        return recommendations
    
    def evaluate_pods(self, pods: Sequence[PodUtilization], now: datetime) -> List[Recommendation]:
        """Request-vs-usage rightsizing for each container with a usage sample."""
        recommendations = []
        for pod in pods:
            resource = f"{pod.namespace}/{pod.name}"
            for container in pod.containers:
                if self._over_provisioned(container.cpu_request, container.cpu_usage):
                    recommendations.append(Recommendation(
                        type=RecommendationType.RESOURCE_RIGHTSIZING,
                        resource=resource,
                        namespace=pod.namespace,
                        description=(
                            f"Container {container.name} is over-provisioned for CPU "
                            f"(request: {format_cpu(float(container.cpu_request))}, "
                            f"usage: {format_cpu(float(container.cpu_usage))})"
                        ),
                        impact="Reduce CPU request to optimize resource allocation",
                        potential_savings=CPU_RIGHTSIZING_SAVINGS,
                        priority=Priority.LOW,
                        timestamp=now,
                    ))
                
                if self._over_provisioned(container.memory_request, container.memory_usage):
                    recommendations.append(Recommendation(
                        type=RecommendationType.RESOURCE_RIGHTSIZING,
                        resource=resource,
                        namespace=pod.namespace,
                        description=(
                            f"Container {container.name} is over-provisioned for memory "
                            f"(request: {format_bytes(float(container.memory_request))}, "
                            f"usage: {format_bytes(float(container.memory_usage))})"
                        ),
                        impact="Reduce memory request to optimize resource allocation",
                        potential_savings=MEMORY_RIGHTSIZING_SAVINGS,
                        priority=Priority.LOW,
                        timestamp=now,
                    ))
        return recommendations
    
    @staticmethod
    def _over_provisioned(request: Decimal, usage: Decimal) -> bool:
        return request > 0 and usage < request / 2
    
    def evaluate_deployments(self, deployments: Sequence[DeploymentDescriptor],
                             now: datetime) -> List[Recommendation]:
        recommendations = []
        for deployment in deployments:
            resource = deployment.key
            
            if deployment.replicas > self.thresholds['min_replicas_for_autoscaling']:
                recommendations.append(Recommendation(
                    type=RecommendationType.HORIZONTAL_SCALING,
                    resource=resource,
                    namespace=deployment.namespace,
                    description=f"Deployment {deployment.name} could benefit from auto-scaling based on metrics",
                    impact="Implement HPA to scale based on CPU/memory usage",
                    potential_savings=HORIZONTAL_SCALING_SAVINGS,
                    priority=Priority.MEDIUM,
                    timestamp=now,
                ))
            
            if not any(container.has_resources for container in deployment.containers):
                recommendations.append(Recommendation(
                    type=RecommendationType.RESOURCE_GOVERNANCE,
                    resource=resource,
                    namespace=deployment.namespace,
                    description=f"Deployment {deployment.name} lacks resource requests/limits",
                    impact="Add resource requests and limits for better scheduling and cost control",
                    potential_savings=RESOURCE_GOVERNANCE_SAVINGS,
                    priority=Priority.MEDIUM,
                    timestamp=now,
                ))
        return recommendations
