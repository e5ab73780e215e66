# src/costoptimizer/actions/catalog.py
"""
Optimization action catalog.

Actions are proposals with enough metadata to describe a mutation. Executing
one hands it to an ActionExecutor and records the status change; the engine
itself never touches cluster resources.
"""

import asyncio
import threading
from typing import Dict, Iterable, List, Optional
import structlog

from costoptimizer.core.exceptions import ActionExecutionException, ActionNotFoundException
from costoptimizer.core.providers import ActionExecutor
from costoptimizer.models.resources import ActionStatus, OptimizationAction, utc_now

logger = structlog.get_logger(__name__)


def default_actions() -> List[OptimizationAction]:
    return [
        OptimizationAction(
            id="1",
            type="scale_down",
            resource="default/nginx-deployment",
            namespace="default",
            action="Scale deployment to 1 replica",
            parameters={"replicas": 1},
        ),
    ]


class DryRunActionExecutor(ActionExecutor):
    """Logs the action instead of performing it."""
    
    async def execute(self, action: OptimizationAction) -> None:
        logger.info(
            "Dry-run optimization action",
            action_id=action.id,
            action_type=action.type,
            resource=action.resource,
            parameters=action.parameters
        )


class ActionCatalog:
    """Registry of proposable actions and their execution status."""
    
    def __init__(self,
                 executor: Optional[ActionExecutor] = None,
                 actions: Optional[Iterable[OptimizationAction]] = None):
        self.executor = executor or DryRunActionExecutor()
        self._lock = threading.Lock()
        self._execute_lock = asyncio.Lock()
        self._actions: Dict[str, OptimizationAction] = {}
        for action in (default_actions() if actions is None else actions):
            self._actions[action.id] = action
        self.logger = logger.bind(component="action_catalog")
    
    def list_actions(self) -> List[OptimizationAction]:
        with self._lock:
            return [action.model_copy(deep=True) for action in self._actions.values()]
    
    def get_action(self, action_id: str) -> OptimizationAction:
        with self._lock:
            action = self._actions.get(action_id)
            if action is None:
                raise ActionNotFoundException(action_id)
            return action.model_copy(deep=True)
    
    async def execute_action(self, action_id: str) -> OptimizationAction:
        """Delegate to the executor and mark the action executed.

        Re-executing an executed action returns it unchanged.
        """
        async with self._execute_lock:
            action = self.get_action(action_id)
            if action.status == ActionStatus.EXECUTED:
                self.logger.info("Optimization action already executed", action_id=action_id)
                return action
            
            self.logger.info("Executing optimization action", action_id=action_id, resource=action.resource)
            try:
                await self.executor.execute(action)
            except Exception as e:
                self.logger.error("Optimization action failed", action_id=action_id, error=str(e))
                raise ActionExecutionException(
                    f"Action {action_id} failed: {e}", details={"action_id": action_id}
                ) from e
            
            executed = action.model_copy(update={
                "status": ActionStatus.EXECUTED.value,
                "executed_at": utc_now(),
            })
            with self._lock:
                self._actions[action_id] = executed
            return executed.model_copy(deep=True)
