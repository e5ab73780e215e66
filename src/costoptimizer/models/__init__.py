from .descriptors import *
from .resources import *

__all__ = [
    "NodeDescriptor",
    "ContainerDescriptor",
    "PodDescriptor",
    "DeploymentDescriptor",
    "NodeUsageSample",
    "ContainerUsageSample",
    "PodUsageSample",
    "RecommendationType",
    "Priority",
    "ActionStatus",
    "NodeResourceRecord",
    "ContainerResourceSpec",
    "PodResourceRecord",
    "Recommendation",
    "ClusterCostSummary",
    "OptimizationAction",
    "utc_now",
]
