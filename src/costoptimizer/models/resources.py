"""
Cost optimizer output models.

Every record here is created fresh by an analysis cycle and is immutable once
published, except OptimizationAction whose status moves pending -> executed.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, Optional, Tuple
from datetime import datetime, timezone
from enum import Enum


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RecommendationType(str, Enum):
    """Recommendation categories."""
    NODE_OPTIMIZATION = "node_optimization"
    NODE_SCALING = "node_scaling"
    RESOURCE_RIGHTSIZING = "resource_rightsizing"
    HORIZONTAL_SCALING = "horizontal_scaling"
    RESOURCE_GOVERNANCE = "resource_governance"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ActionStatus(str, Enum):
    PENDING = "pending"
    EXECUTED = "executed"


class NodeResourceRecord(BaseModel):
    """Node capacity, usage and derived monthly cost."""
    
    model_config = ConfigDict(frozen=True)
    
    name: str
    cpu_capacity: float = Field(0.0, ge=0, description="CPU capacity in cores")
    memory_capacity: float = Field(0.0, ge=0, description="Memory capacity in GiB")
    cpu_usage: float = Field(0.0, ge=0, description="CPU usage in cores")
    memory_usage: float = Field(0.0, ge=0, description="Memory usage in GiB")
    cpu_utilization: Optional[float] = Field(None, description="CPU usage / capacity in percent, None when capacity is zero")
    memory_utilization: Optional[float] = Field(None, description="Memory usage / capacity in percent, None when capacity is zero")
    instance_type: str = "default"
    estimated_cost: float = Field(0.0, ge=0, description="Monthly cost in USD")


class ContainerResourceSpec(BaseModel):
    """Per-container requests and limits, CPU in cores and memory in GiB; zero when unset."""
    
    model_config = ConfigDict(frozen=True)
    
    name: str
    cpu_request: float = 0.0
    memory_request: float = 0.0
    cpu_limit: float = 0.0
    memory_limit: float = 0.0


class PodResourceRecord(BaseModel):
    """Pod usage, requests and limits summed across containers."""
    
    model_config = ConfigDict(frozen=True)
    
    name: str
    namespace: str
    cpu_usage: float = Field(0.0, ge=0, description="CPU usage in cores")
    memory_usage: float = Field(0.0, ge=0, description="Memory usage in GiB")
    cpu_request: float = Field(0.0, ge=0, description="CPU request in cores")
    memory_request: float = Field(0.0, ge=0, description="Memory request in GiB")
    cpu_limit: float = Field(0.0, ge=0, description="CPU limit in cores")
    memory_limit: float = Field(0.0, ge=0, description="Memory limit in GiB")
    estimated_cost: float = Field(0.0, ge=0, description="Monthly cost in USD, from requests")
    containers: Tuple[ContainerResourceSpec, ...] = ()


class Recommendation(BaseModel):
    """A single optimization suggestion."""
    
    model_config = ConfigDict(frozen=True, use_enum_values=True)
    
    type: RecommendationType
    resource: str
    namespace: Optional[str] = None
    description: str
    impact: str
    potential_savings: float = Field(0.0, description="Monthly USD; negative means a cost increase")
    priority: Priority
    timestamp: datetime = Field(default_factory=utc_now)


class ClusterCostSummary(BaseModel):
    """Cluster-wide cost rollup for one analysis cycle."""
    
    model_config = ConfigDict(frozen=True)
    
    total_monthly_cost: float = 0.0
    compute_cost: float = 0.0
    storage_cost: float = 0.0
    wasted_resources: float = 0.0
    potential_savings: float = 0.0
    node_count: int = 0
    pod_count: int = 0
    namespace_costs: Dict[str, float] = Field(default_factory=dict)
    recommendation_count: int = 0
    last_updated: datetime = Field(default_factory=utc_now)


class OptimizationAction(BaseModel):
    """A proposable mutation; describes but never performs the change."""
    
    model_config = ConfigDict(use_enum_values=True)
    
    id: str
    type: str
    resource: str
    namespace: Optional[str] = None
    action: str
    parameters: Dict[str, Any] = Field(default_factory=dict)
    status: ActionStatus = ActionStatus.PENDING
    created_at: datetime = Field(default_factory=utc_now)
    executed_at: Optional[datetime] = None
