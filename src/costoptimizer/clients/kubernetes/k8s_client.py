# src/costoptimizer/clients/kubernetes/k8s_client.py
"""Kubernetes client serving inventory and metrics-server usage to the engine."""

import asyncio
import os
from typing import Any, Callable, Dict, List, Optional
import structlog
from kubernetes import client, config
from kubernetes.client.rest import ApiException

from costoptimizer.core.base_client import BaseClient
from costoptimizer.core.exceptions import ClientConnectionException, ProviderUnavailableException
from costoptimizer.core.providers import InventoryProvider, MetricsProvider
from costoptimizer.models.descriptors import (
    ContainerDescriptor,
    ContainerUsageSample,
    DeploymentDescriptor,
    NodeDescriptor,
    NodeUsageSample,
    PodDescriptor,
    PodUsageSample,
)

logger = structlog.get_logger(__name__)

METRICS_GROUP = "metrics.k8s.io"
METRICS_VERSION = "v1beta1"


class KubernetesClient(BaseClient, InventoryProvider, MetricsProvider):
    """Lists nodes, pods, deployments and metrics.k8s.io usage samples."""
    
    provider = "kubernetes"
    
    def __init__(self, 
                 config_dict: Dict[str, Any],
                 kubeconfig_path: Optional[str] = None,
                 context: Optional[str] = None):
        super().__init__(config_dict, "KubernetesClient")
        self.kubeconfig_path = kubeconfig_path
        self.context = context
        
        self.v1 = None
        self.apps_v1 = None
        self.custom_objects = None
    
    async def connect(self) -> None:
        """Load cluster credentials and build the API clients."""
        try:
            if self.kubeconfig_path or os.environ.get("KUBECONFIG"):
                config.load_kube_config(config_file=self.kubeconfig_path, context=self.context)
                self.logger.info("Loaded kubeconfig", path=self.kubeconfig_path or os.environ.get("KUBECONFIG"))
            else:
                try:
                    config.load_incluster_config()
                    self.logger.info("Loaded in-cluster config")
                except config.ConfigException:
                    config.load_kube_config(context=self.context)
                    self.logger.info("Loaded default kubeconfig")
            
            self.v1 = client.CoreV1Api()
            self.apps_v1 = client.AppsV1Api()
            self.custom_objects = client.CustomObjectsApi()
            
            self._connected = True
            self.logger.info("Kubernetes client connected")
            
        except Exception as e:
            raise ClientConnectionException("Kubernetes", f"Connection failed: {e}")
    
    async def disconnect(self) -> None:
        self._connected = False
        self.logger.info("Kubernetes client disconnected")
    
    async def health_check(self) -> bool:
        try:
            if not self._connected:
                return False
            await asyncio.to_thread(client.VersionApi().get_code)
            return True
        except Exception as e:
            self.logger.warning("Kubernetes health check failed", error=str(e))
            return False
    
    async def _call(self, operation: str, func: Callable[[], Any]):
        """Run a blocking API call off the event loop, retrying API errors.

        Any final failure surfaces as ProviderUnavailableException.
        """
        self.ensure_connected(operation)
        try:
            return await self.run_blocking(operation, func, retry_on=(ApiException,))
        except ApiException as e:
            raise ProviderUnavailableException(
                "kubernetes", operation, f"API error {e.status}: {e.reason}",
                details={"status": e.status}
            )
        except Exception as e:
            raise ProviderUnavailableException("kubernetes", operation, str(e))
    
    # Inventory
    
    async def list_nodes(self) -> List[NodeDescriptor]:
        node_list = await self._call("list_nodes", lambda: self.v1.list_node())
        nodes = [self._node_descriptor(node) for node in node_list.items]
        self.logger.debug(f"Listed {len(nodes)} nodes")
        return nodes
    
    async def list_pods(self, namespace: Optional[str] = None) -> List[PodDescriptor]:
        if namespace:
            pod_list = await self._call("list_pods", lambda: self.v1.list_namespaced_pod(namespace))
        else:
            pod_list = await self._call("list_pods", lambda: self.v1.list_pod_for_all_namespaces())
        pods = [self._pod_descriptor(pod) for pod in pod_list.items]
        self.logger.debug(f"Listed {len(pods)} pods", namespace=namespace or "*")
        return pods
    
    async def list_deployments(self, namespace: Optional[str] = None) -> List[DeploymentDescriptor]:
        if namespace:
            deployment_list = await self._call(
                "list_deployments", lambda: self.apps_v1.list_namespaced_deployment(namespace)
            )
        else:
            deployment_list = await self._call(
                "list_deployments", lambda: self.apps_v1.list_deployment_for_all_namespaces()
            )
        deployments = [self._deployment_descriptor(d) for d in deployment_list.items]
        self.logger.debug(f"Listed {len(deployments)} deployments", namespace=namespace or "*")
        return deployments
    
    # Metrics
    
    async def list_node_metrics(self) -> List[NodeUsageSample]:
        response = await self._call(
            "list_node_metrics",
            lambda: self.custom_objects.list_cluster_custom_object(METRICS_GROUP, METRICS_VERSION, "nodes")
        )
        return [
            NodeUsageSample(name=item["metadata"]["name"], usage=_string_map(item.get("usage")))
            for item in response.get("items", [])
        ]
    
    async def list_pod_metrics(self, namespace: Optional[str] = None) -> List[PodUsageSample]:
        if namespace:
            response = await self._call(
                "list_pod_metrics",
                lambda: self.custom_objects.list_namespaced_custom_object(
                    METRICS_GROUP, METRICS_VERSION, namespace, "pods"
                )
            )
        else:
            response = await self._call(
                "list_pod_metrics",
                lambda: self.custom_objects.list_cluster_custom_object(METRICS_GROUP, METRICS_VERSION, "pods")
            )
        return [
            PodUsageSample(
                name=item["metadata"]["name"],
                namespace=item["metadata"].get("namespace", namespace or "default"),
                containers=[
                    ContainerUsageSample(name=c.get("name", ""), usage=_string_map(c.get("usage")))
                    for c in item.get("containers", [])
                ],
            )
            for item in response.get("items", [])
        ]
    
    # Conversions
    
    @staticmethod
    def _node_descriptor(node) -> NodeDescriptor:
        capacity = (node.status.capacity if node.status else None) or {}
        return NodeDescriptor(
            name=node.metadata.name,
            labels=node.metadata.labels or {},
            cpu_capacity=capacity.get("cpu"),
            memory_capacity=capacity.get("memory"),
        )
    
    @staticmethod
    def _container_descriptor(container) -> ContainerDescriptor:
        resources = container.resources
        return ContainerDescriptor(
            name=container.name,
            requests=_string_map(resources.requests if resources else None),
            limits=_string_map(resources.limits if resources else None),
        )
    
    def _pod_descriptor(self, pod) -> PodDescriptor:
        return PodDescriptor(
            name=pod.metadata.name,
            namespace=pod.metadata.namespace,
            phase=pod.status.phase if pod.status and pod.status.phase else "Unknown",
            containers=[self._container_descriptor(c) for c in (pod.spec.containers or [])],
        )
    
    def _deployment_descriptor(self, deployment) -> DeploymentDescriptor:
        template_spec = deployment.spec.template.spec if deployment.spec and deployment.spec.template else None
        return DeploymentDescriptor(
            name=deployment.metadata.name,
            namespace=deployment.metadata.namespace,
            replicas=(deployment.status.replicas if deployment.status else None) or 0,
            containers=[self._container_descriptor(c) for c in ((template_spec.containers if template_spec else None) or [])],
        )


def _string_map(values: Optional[Dict[str, Any]]) -> Dict[str, str]:
    return {str(k): str(v) for k, v in (values or {}).items()}
