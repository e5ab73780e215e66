"""
Collaborator interfaces the engine consumes.

The engine never talks to a cluster directly. It pulls inventory and usage
through these providers and hands mutations to an ActionExecutor; the
Kubernetes-backed implementations live under ``costoptimizer.clients``.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from costoptimizer.models.descriptors import (
    DeploymentDescriptor,
    NodeDescriptor,
    NodeUsageSample,
    PodDescriptor,
    PodUsageSample,
)
from costoptimizer.models.resources import OptimizationAction


class InventoryProvider(ABC):
    """Source of cluster inventory. Each call may fail independently."""
    
    @abstractmethod
    async def list_nodes(self) -> List[NodeDescriptor]:
        pass
    
    @abstractmethod
    async def list_pods(self, namespace: Optional[str] = None) -> List[PodDescriptor]:
        """List pods; ``None`` means all namespaces."""
        pass
    
    @abstractmethod
    async def list_deployments(self, namespace: Optional[str] = None) -> List[DeploymentDescriptor]:
        """List deployments; ``None`` means all namespaces."""
        pass


class MetricsProvider(ABC):
    """Source of point-in-time usage samples. Each call may fail independently."""
    
    @abstractmethod
    async def list_node_metrics(self) -> List[NodeUsageSample]:
        pass
    
    @abstractmethod
    async def list_pod_metrics(self, namespace: Optional[str] = None) -> List[PodUsageSample]:
        pass


class ActionExecutor(ABC):
    """Mutation-capable collaborator that carries out an optimization action."""
    
    @abstractmethod
    async def execute(self, action: OptimizationAction) -> None:
        """Perform the action; raise on failure."""
        pass
