# src/costoptimizer/analytics/__init__.py
"""
Analytics: utilization normalization, recommendation rules and cost rollup.
"""

from .utilization_analytics import (
    ContainerUtilization,
    NodeUtilization,
    PodUtilization,
    UtilizationAnalyzer,
)
from .recommendation_rules import RecommendationRules
from .cost_aggregator import CostAggregator

__all__ = [
    "UtilizationAnalyzer",
    "NodeUtilization",
    "PodUtilization",
    "ContainerUtilization",
    "RecommendationRules",
    "CostAggregator",
]
