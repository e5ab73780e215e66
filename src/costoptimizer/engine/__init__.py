from .analysis import AnalysisCycle, AnalysisResult
from .optimizer import CostOptimizer
from .scheduler import RefreshScheduler, SchedulerState, TriggerOutcome
from .snapshot import ClusterSnapshot, SnapshotCollector
from .store import ResultStore

__all__ = [
    "AnalysisCycle",
    "AnalysisResult",
    "ClusterSnapshot",
    "CostOptimizer",
    "RefreshScheduler",
    "ResultStore",
    "SchedulerState",
    "SnapshotCollector",
    "TriggerOutcome",
]
