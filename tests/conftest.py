"""
Test fixtures and configuration for pytest
"""
import pytest
import structlog

from costoptimizer.analytics import CostAggregator, RecommendationRules, UtilizationAnalyzer
from costoptimizer.engine.analysis import AnalysisCycle
from costoptimizer.pricing import CostModel

from fakes import FakeCluster, container, deployment, node, node_usage, pod, pod_usage


@pytest.fixture(autouse=True, scope="session")
def route_structlog_to_stdlib():
    """Send engine logs through stdlib logging so pytest captures them off stdout."""
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.format_exc_info,
            structlog.processors.KeyValueRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )
    yield
    structlog.reset_defaults()


@pytest.fixture
def cost_model():
    return CostModel()


@pytest.fixture
def analyzer(cost_model):
    return UtilizationAnalyzer(cost_model)


@pytest.fixture
def rules(cost_model):
    return RecommendationRules(cost_model)


@pytest.fixture
def aggregator(cost_model):
    return CostAggregator(cost_model)


@pytest.fixture
def analysis_cycle(analyzer, rules, aggregator):
    return AnalysisCycle(analyzer, rules, aggregator)


@pytest.fixture
def sample_cluster():
    """Two nodes (one idle t3.large, one hot m5.xlarge), three pods, two deployments."""
    return FakeCluster(
        nodes=[
            node("ip-10-0-1-5", cpu="2", memory="8Gi",
                 labels={"node.kubernetes.io/instance-type": "t3.large"}),
            node("worker-m5.xlarge-b", cpu="4", memory="16Gi"),
        ],
        node_metrics=[
            node_usage("ip-10-0-1-5", cpu="150m", memory="500Mi"),
            node_usage("worker-m5.xlarge-b", cpu="3800m", memory="8Gi"),
        ],
        pods=[
            pod("api-7d9f", "shop", containers=[
                container("api", requests={"cpu": "500m", "memory": "1Gi"}, limits={"cpu": "1", "memory": "2Gi"}),
            ]),
            pod("worker-1", "batch", containers=[
                container("worker", requests={"cpu": "250m", "memory": "256Mi"}),
                container("sidecar", requests={"cpu": "100m"}),
            ]),
            pod("pending-0", "batch", phase="Pending", containers=[
                container("job", requests={"cpu": "2"}),
            ]),
        ],
        pod_metrics=[
            pod_usage("api-7d9f", "shop", {"api": ("150m", "900Mi")}),
            pod_usage("worker-1", "batch", {"worker": ("200m", "200Mi"), "sidecar": ("80m", "10Mi")}),
        ],
        deployments=[
            deployment("api", "shop", replicas=3, containers=[
                container("api", requests={"cpu": "500m"}),
            ]),
            deployment("legacy", "default", replicas=1, containers=[container("legacy")]),
        ],
    )
