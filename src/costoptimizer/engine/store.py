# src/costoptimizer/engine/store.py
"""Holder of the current published AnalysisResult."""

import threading

from costoptimizer.engine.analysis import AnalysisResult


class ResultStore:
    """Swaps whole AnalysisResult references under a lock.

    Results are immutable, so a reader holding one never sees a later
    cycle's data mixed in.
    """
    
    def __init__(self, initial: AnalysisResult):
        self._lock = threading.Lock()
        self._current = initial
    
    def current(self) -> AnalysisResult:
        with self._lock:
            return self._current
    
    def publish(self, result: AnalysisResult) -> None:
        with self._lock:
            self._current = result
