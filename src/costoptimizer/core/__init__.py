from .exceptions import *
from .base_client import BaseClient
from .providers import ActionExecutor, InventoryProvider, MetricsProvider
from .utils import retry_with_backoff, setup_logging

__all__ = [
    "BaseClient",
    "InventoryProvider",
    "MetricsProvider",
    "ActionExecutor",
    "CostOptimizerException",
    "ClientConnectionException",
    "ProviderUnavailableException",
    "ConfigurationException",
    "ActionNotFoundException",
    "ActionExecutionException",
    "retry_with_backoff",
    "setup_logging",
]
