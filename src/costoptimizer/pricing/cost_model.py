"""
Static pricing model.

Node cost comes from an hourly rate per instance-type label; pod cost is a
node-independent estimate from requested CPU and memory at flat unit rates.
Months are a fixed 30 days.
"""

from pathlib import Path
from typing import Dict, Any, Mapping, Optional, Union
import structlog
import yaml

from costoptimizer.core.exceptions import ConfigurationException
from costoptimizer.core.utils import HOURS_PER_MONTH

logger = structlog.get_logger(__name__)

DEFAULT_INSTANCE_TYPE = "default"

# USD per hour; declaration order is the substring match order
DEFAULT_HOURLY_RATES: Dict[str, float] = {
    "t3.micro": 0.0104,
    "t3.small": 0.0208,
    "t3.medium": 0.0416,
    "t3.large": 0.0832,
    "t3.xlarge": 0.1664,
    "t3.2xlarge": 0.3328,
    "m5.large": 0.096,
    "m5.xlarge": 0.192,
    "m5.2xlarge": 0.384,
    "m5.4xlarge": 0.768,
    "c5.large": 0.085,
    "c5.xlarge": 0.17,
    "c5.2xlarge": 0.34,
    "c5.4xlarge": 0.68,
}

INSTANCE_TYPE_LABELS = (
    "node.kubernetes.io/instance-type",
    "beta.kubernetes.io/instance-type",
)


class CostModel:
    """Hourly instance pricing plus flat storage and pod unit rates."""
    
    def __init__(self,
                 config: Optional[Dict[str, Any]] = None,
                 hourly_rates: Optional[Mapping[str, float]] = None):
        config = config or {}
        self.default_hourly_rate = config.get("default_hourly_rate", 0.1)
        self.storage_cost_per_gb_month = config.get("storage_cost_per_gb_month", 0.10)
        self.cpu_core_hour_rate = config.get("cpu_core_hour_rate", 0.05)
        self.memory_gb_hour_rate = config.get("memory_gb_hour_rate", 0.01)
        self.storage_placeholder_monthly_cost = config.get("storage_placeholder_monthly_cost", 100.0)
        
        if hourly_rates is None:
            table_path = config.get("table_path")
            hourly_rates = load_rate_table(table_path) if table_path else DEFAULT_HOURLY_RATES
        # a "default" entry in the table sets the fallback rate
        for label, rate in hourly_rates.items():
            if label.lower() == DEFAULT_INSTANCE_TYPE:
                self.default_hourly_rate = float(rate)
        
        # the fallback rate is never a substring candidate
        self.hourly_rates = {
            label.lower(): float(rate)
            for label, rate in hourly_rates.items()
            if label.lower() != DEFAULT_INSTANCE_TYPE
        }
    
    def hourly_rate(self, instance_type: Optional[str]) -> float:
        """Hourly rate for an instance type; unknown types get the default rate."""
        if not instance_type:
            return self.default_hourly_rate
        return self.hourly_rates.get(instance_type.lower(), self.default_hourly_rate)
    
    def resolve_instance_type(self, node_name: str, labels: Optional[Mapping[str, str]] = None) -> str:
        """Best-effort instance type for a node.

        A priced instance-type label wins. Otherwise the node name is matched
        by substring against the rate table and the first declared match is
        used, so overlapping keys resolve by table order.
        """
        for label_key in INSTANCE_TYPE_LABELS:
            label = (labels or {}).get(label_key)
            if label and label.lower() in self.hourly_rates:
                return label.lower()
        
        lowered = node_name.lower()
        for instance_type in self.hourly_rates:
            if instance_type in lowered:
                return instance_type
        return DEFAULT_INSTANCE_TYPE
    
    def node_monthly_cost(self, instance_type: Optional[str]) -> float:
        return self.hourly_rate(instance_type) * HOURS_PER_MONTH
    
    def pod_monthly_cost(self, cpu_request_cores: float, memory_request_gib: float) -> float:
        """Request-based monthly estimate, independent of node pricing."""
        cpu_cost = cpu_request_cores * self.cpu_core_hour_rate * HOURS_PER_MONTH
        memory_cost = memory_request_gib * self.memory_gb_hour_rate * HOURS_PER_MONTH
        return cpu_cost + memory_cost
    
    def storage_monthly_cost(self, size_gb: float) -> float:
        return size_gb * self.storage_cost_per_gb_month


def load_rate_table(path: Union[str, Path]) -> Dict[str, float]:
    """Load an instance-type -> hourly rate mapping from YAML."""
    table_path = Path(path)
    if not table_path.exists():
        raise ConfigurationException(f"Pricing table not found: {table_path}")
    
    with open(table_path, 'r') as f:
        data = yaml.safe_load(f) or {}
    
    if not isinstance(data, dict):
        raise ConfigurationException(f"Pricing table must be a mapping: {table_path}")
    
    try:
        rates = {str(label): float(rate) for label, rate in data.items()}
    except (TypeError, ValueError) as e:
        raise ConfigurationException(f"Invalid rate in pricing table {table_path}: {e}")
    
    if any(rate < 0 for rate in rates.values()):
        raise ConfigurationException(f"Negative rate in pricing table {table_path}")
    
    logger.info("Loaded pricing table", path=str(table_path), instance_types=len(rates))
    return rates
