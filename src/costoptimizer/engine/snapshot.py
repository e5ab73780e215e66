# src/costoptimizer/engine/snapshot.py
"""Point-in-time inventory + metrics snapshot with per-call timeouts."""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple
import structlog

from costoptimizer.core.exceptions import ProviderUnavailableException
from costoptimizer.core.providers import InventoryProvider, MetricsProvider
from costoptimizer.models.descriptors import (
    DeploymentDescriptor,
    NodeDescriptor,
    NodeUsageSample,
    PodDescriptor,
    PodUsageSample,
)
from costoptimizer.models.resources import utc_now

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ClusterSnapshot:
    """Everything one cycle analyzes. A None field means that call failed."""
    nodes: Optional[Tuple[NodeDescriptor, ...]] = None
    pods: Optional[Tuple[PodDescriptor, ...]] = None
    deployments: Optional[Tuple[DeploymentDescriptor, ...]] = None
    node_metrics: Optional[Tuple[NodeUsageSample, ...]] = None
    pod_metrics: Optional[Tuple[PodUsageSample, ...]] = None
    collected_at: datetime = field(default_factory=utc_now)
    
    @property
    def unavailable(self) -> Tuple[str, ...]:
        return tuple(
            name for name in ("nodes", "pods", "deployments", "node_metrics", "pod_metrics")
            if getattr(self, name) is None
        )


class SnapshotCollector:
    """Pulls one snapshot from the providers, concurrently and with timeouts."""
    
    def __init__(self,
                 inventory: InventoryProvider,
                 metrics: MetricsProvider,
                 config: Optional[Dict[str, Any]] = None):
        config = config or {}
        self.inventory = inventory
        self.metrics = metrics
        self.namespace = config.get("namespace")
        self.timeout_seconds = config.get("collaborator_timeout_seconds", 30.0)
        self.logger = logger.bind(component="snapshot_collector")
    
    async def collect(self) -> ClusterSnapshot:
        nodes, pods, deployments, node_metrics, pod_metrics = await asyncio.gather(
            self._fetch("nodes", self.inventory.list_nodes),
            self._fetch("pods", lambda: self.inventory.list_pods(self.namespace)),
            self._fetch("deployments", lambda: self.inventory.list_deployments(self.namespace)),
            self._fetch("node_metrics", self.metrics.list_node_metrics),
            self._fetch("pod_metrics", lambda: self.metrics.list_pod_metrics(self.namespace)),
        )
        snapshot = ClusterSnapshot(
            nodes=nodes,
            pods=pods,
            deployments=deployments,
            node_metrics=node_metrics,
            pod_metrics=pod_metrics,
        )
        if snapshot.unavailable:
            self.logger.warning("Snapshot is partial", unavailable=list(snapshot.unavailable))
        return snapshot
    
    async def _fetch(self, kind: str, call: Callable[[], Awaitable[Any]]) -> Optional[tuple]:
        """Run one provider call; any failure or timeout yields None."""
        try:
            items = await asyncio.wait_for(call(), timeout=self.timeout_seconds)
            return tuple(items)
        except asyncio.TimeoutError:
            self.logger.error(
                f"Provider call for {kind} timed out",
                timeout_seconds=self.timeout_seconds
            )
        except ProviderUnavailableException as e:
            self.logger.error(f"Provider unavailable for {kind}", error=e.message)
        except Exception as e:
            self.logger.error(f"Provider call for {kind} failed", error=str(e), error_type=type(e).__name__)
        return None
