# src/costoptimizer/analytics/utilization_analytics.py
"""
Utilization analysis.

Turns raw capacity/usage/request/limit quantities into exact per-entity sums
and utilization percentages, then into the published node and pod records.
Quantities are kept as Decimal until the records are built.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Tuple
import structlog

from costoptimizer.core.utils import cores, gibibytes, percentage, resource_quantity, to_quantity
from costoptimizer.models.descriptors import (
    ContainerDescriptor,
    ContainerUsageSample,
    NodeDescriptor,
    NodeUsageSample,
    PodDescriptor,
    PodUsageSample,
)
from costoptimizer.models.resources import ContainerResourceSpec, NodeResourceRecord, PodResourceRecord
from costoptimizer.pricing.cost_model import CostModel

logger = structlog.get_logger(__name__)

CPU = "cpu"
MEMORY = "memory"
RUNNING_PHASE = "Running"


@dataclass(frozen=True)
class NodeUtilization:
    """Node capacity and usage; utilization is None for a zero-capacity dimension."""
    node: NodeDescriptor
    cpu_capacity: Decimal
    memory_capacity: Decimal
    cpu_usage: Decimal
    memory_usage: Decimal
    cpu_utilization: Optional[float]
    memory_utilization: Optional[float]
    
    @property
    def name(self) -> str:
        return self.node.name


@dataclass(frozen=True)
class ContainerUtilization:
    """A container spec paired with its usage sample."""
    name: str
    cpu_request: Decimal
    memory_request: Decimal
    cpu_usage: Decimal
    memory_usage: Decimal


@dataclass(frozen=True)
class PodUtilization:
    """Pod-level sums plus the containers that had usage samples."""
    pod: PodDescriptor
    cpu_usage: Decimal
    memory_usage: Decimal
    cpu_request: Decimal
    memory_request: Decimal
    cpu_limit: Decimal
    memory_limit: Decimal
    containers: Tuple[ContainerUtilization, ...] = field(default_factory=tuple)
    
    @property
    def name(self) -> str:
        return self.pod.name
    
    @property
    def namespace(self) -> str:
        return self.pod.namespace


class UtilizationAnalyzer:
    """Normalizes inventory + usage into utilization data and records."""
    
    def __init__(self, cost_model: CostModel):
        self.cost_model = cost_model
        self.logger = logger.bind(analytics="utilization")
    
    def analyze_nodes(self, nodes: Sequence[NodeDescriptor],
                      samples: Sequence[NodeUsageSample]) -> List[NodeUtilization]:
        """Utilization for every node that has a usage sample."""
        samples_by_name = {sample.name: sample for sample in samples}
        results = []
        
        for node in nodes:
            sample = samples_by_name.get(node.name)
            if sample is None:
                continue
            
            cpu_capacity = to_quantity(node.cpu_capacity)
            memory_capacity = to_quantity(node.memory_capacity)
            cpu_usage = resource_quantity(sample.usage, CPU)
            memory_usage = resource_quantity(sample.usage, MEMORY)
            
            results.append(NodeUtilization(
                node=node,
                cpu_capacity=cpu_capacity,
                memory_capacity=memory_capacity,
                cpu_usage=cpu_usage,
                memory_usage=memory_usage,
                cpu_utilization=percentage(cpu_usage, cpu_capacity),
                memory_utilization=percentage(memory_usage, memory_capacity),
            ))
        
        skipped = len(nodes) - len(results)
        if skipped:
            self.logger.debug("Nodes without usage samples skipped", count=skipped)
        return results
    
    def analyze_pods(self, pods: Sequence[PodDescriptor],
                     samples: Sequence[PodUsageSample]) -> List[PodUtilization]:
        """Utilization for every running pod that has a usage sample."""
        samples_by_key = {sample.key: sample for sample in samples}
        results = []
        
        for pod in pods:
            if pod.phase != RUNNING_PHASE:
                continue
            sample = samples_by_key.get(pod.key)
            if sample is None:
                continue
            results.append(self._analyze_pod(pod, sample))
        
        return results
    
    def _analyze_pod(self, pod: PodDescriptor, sample: PodUsageSample) -> PodUtilization:
        cpu_usage = Decimal(0)
        memory_usage = Decimal(0)
        usage_by_container: Dict[str, ContainerUsageSample] = {}
        for container_sample in sample.containers:
            cpu_usage += resource_quantity(container_sample.usage, CPU)
            memory_usage += resource_quantity(container_sample.usage, MEMORY)
            usage_by_container[container_sample.name] = container_sample
        
        cpu_request = memory_request = cpu_limit = memory_limit = Decimal(0)
        containers = []
        for container in pod.containers:
            cpu_request += resource_quantity(container.requests, CPU)
            memory_request += resource_quantity(container.requests, MEMORY)
            cpu_limit += resource_quantity(container.limits, CPU)
            memory_limit += resource_quantity(container.limits, MEMORY)
            
            container_sample = usage_by_container.get(container.name)
            if container_sample is None:
                continue
            containers.append(ContainerUtilization(
                name=container.name,
                cpu_request=resource_quantity(container.requests, CPU),
                memory_request=resource_quantity(container.requests, MEMORY),
                cpu_usage=resource_quantity(container_sample.usage, CPU),
                memory_usage=resource_quantity(container_sample.usage, MEMORY),
            ))
        
        return PodUtilization(
            pod=pod,
            cpu_usage=cpu_usage,
            memory_usage=memory_usage,
            cpu_request=cpu_request,
            memory_request=memory_request,
            cpu_limit=cpu_limit,
            memory_limit=memory_limit,
            containers=tuple(containers),
        )
    
    @staticmethod
    def container_spec(container: ContainerDescriptor) -> ContainerResourceSpec:
        return ContainerResourceSpec(
            name=container.name,
            cpu_request=cores(resource_quantity(container.requests, CPU)),
            memory_request=gibibytes(resource_quantity(container.requests, MEMORY)),
            cpu_limit=cores(resource_quantity(container.limits, CPU)),
            memory_limit=gibibytes(resource_quantity(container.limits, MEMORY)),
        )
    
    def node_record(self, utilization: NodeUtilization) -> NodeResourceRecord:
        node = utilization.node
        instance_type = self.cost_model.resolve_instance_type(node.name, node.labels)
        return NodeResourceRecord(
            name=node.name,
            cpu_capacity=cores(utilization.cpu_capacity),
            memory_capacity=gibibytes(utilization.memory_capacity),
            cpu_usage=cores(utilization.cpu_usage),
            memory_usage=gibibytes(utilization.memory_usage),
            cpu_utilization=utilization.cpu_utilization,
            memory_utilization=utilization.memory_utilization,
            instance_type=instance_type,
            estimated_cost=self.cost_model.node_monthly_cost(instance_type),
        )
    
    def pod_record(self, utilization: PodUtilization) -> PodResourceRecord:
        cpu_request = cores(utilization.cpu_request)
        memory_request = gibibytes(utilization.memory_request)
        return PodResourceRecord(
            name=utilization.name,
            namespace=utilization.namespace,
            cpu_usage=cores(utilization.cpu_usage),
            memory_usage=gibibytes(utilization.memory_usage),
            cpu_request=cpu_request,
            memory_request=memory_request,
            cpu_limit=cores(utilization.cpu_limit),
            memory_limit=gibibytes(utilization.memory_limit),
            estimated_cost=self.cost_model.pod_monthly_cost(cpu_request, memory_request),
            containers=tuple(self.container_spec(c) for c in utilization.pod.containers),
        )
