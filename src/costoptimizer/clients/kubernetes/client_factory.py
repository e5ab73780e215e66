# src/costoptimizer/clients/kubernetes/client_factory.py
"""Kubernetes client factory."""

from typing import Dict, Any, Optional
import structlog

from .k8s_client import KubernetesClient

logger = structlog.get_logger(__name__)


class KubernetesClientFactory:
    """Builds a KubernetesClient from the kubernetes and scheduler settings."""
    
    def __init__(self, config: Dict[str, Any], scheduler_config: Optional[Dict[str, Any]] = None):
        self.config = config
        self.scheduler_config = scheduler_config or {}
        self.kubeconfig_path = config.get("kubeconfig_path")
        self.context = config.get("context")
        
        self.logger = logger.bind(factory="kubernetes")
    
    def create_client(self) -> KubernetesClient:
        client_config = {
            **self.config,
            "retry_attempts": self.scheduler_config.get("retry_attempts", 3),
            "retry_backoff_factor": self.scheduler_config.get("retry_backoff_factor", 1.5),
        }
        self.logger.debug("Creating Kubernetes client", kubeconfig_path=self.kubeconfig_path, context=self.context)
        return KubernetesClient(
            config_dict=client_config,
            kubeconfig_path=self.kubeconfig_path,
            context=self.context,
        )
    
    async def create_connected_client(self) -> KubernetesClient:
        """Create and connect; connection failure is fatal to startup."""
        k8s_client = self.create_client()
        await k8s_client.connect()
        return k8s_client
