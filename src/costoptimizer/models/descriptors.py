"""
Collaborator payload models.

These describe what the inventory and metrics providers hand to the engine.
Quantities stay as Kubernetes quantity strings ("250m", "512Mi") until the
utilization analyzer parses them.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List, Optional


class _Descriptor(BaseModel):
    model_config = ConfigDict(frozen=True)


class NodeDescriptor(_Descriptor):
    """Inventory view of a cluster node."""
    
    name: str
    labels: Dict[str, str] = Field(default_factory=dict)
    cpu_capacity: Optional[str] = Field(None, description="CPU capacity quantity")
    memory_capacity: Optional[str] = Field(None, description="Memory capacity quantity")


class ContainerDescriptor(_Descriptor):
    """Container spec resources (requests and limits)."""
    
    name: str
    requests: Dict[str, str] = Field(default_factory=dict)
    limits: Dict[str, str] = Field(default_factory=dict)
    
    @property
    def has_resources(self) -> bool:
        return bool(self.requests) or bool(self.limits)


class PodDescriptor(_Descriptor):
    """Inventory view of a pod."""
    
    name: str
    namespace: str
    phase: str = "Unknown"
    containers: List[ContainerDescriptor] = Field(default_factory=list)
    
    @property
    def key(self) -> str:
        return f"{self.namespace}/{self.name}"


class DeploymentDescriptor(_Descriptor):
    """Inventory view of a deployment."""
    
    name: str
    namespace: str
    replicas: int = Field(0, ge=0, description="Replica count reported in deployment status")
    containers: List[ContainerDescriptor] = Field(default_factory=list)
    
    @property
    def key(self) -> str:
        return f"{self.namespace}/{self.name}"


class NodeUsageSample(_Descriptor):
    """Point-in-time node usage from the metrics provider."""
    
    name: str
    usage: Dict[str, str] = Field(default_factory=dict)


class ContainerUsageSample(_Descriptor):
    name: str
    usage: Dict[str, str] = Field(default_factory=dict)


class PodUsageSample(_Descriptor):
    """Point-in-time pod usage, one entry per container."""
    
    name: str
    namespace: str
    containers: List[ContainerUsageSample] = Field(default_factory=list)
    
    @property
    def key(self) -> str:
        return f"{self.namespace}/{self.name}"
