"""Base class for clients that talk to a cluster API."""

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional, Tuple, Type
import structlog

from costoptimizer.core.exceptions import ProviderUnavailableException
from costoptimizer.core.utils import retry_with_backoff

logger = structlog.get_logger(__name__)


class BaseClient(ABC):
    """Connection state plus retried, off-loop execution of blocking SDK calls."""

    provider = "cluster"

    def __init__(self, config: Dict[str, Any], name: Optional[str] = None):
        self.config = config
        self.name = name or self.__class__.__name__
        self.retry_attempts = config.get("retry_attempts", 3)
        self.retry_backoff_factor = config.get("retry_backoff_factor", 1.5)
        self._connected = False
        self.logger = logger.bind(client=self.name)

    @abstractmethod
    async def connect(self) -> None:
        """Load credentials and build the API handles."""

    @abstractmethod
    async def disconnect(self) -> None:
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        pass

    @property
    def is_connected(self) -> bool:
        return self._connected

    def ensure_connected(self, operation: str) -> None:
        if not self._connected:
            raise ProviderUnavailableException(self.provider, operation, "client not connected")

    async def run_blocking(self,
                           operation: str,
                           func: Callable[[], Any],
                           retry_on: Tuple[Type[BaseException], ...] = (Exception,)) -> Any:
        """Run ``func`` in a worker thread, retrying on ``retry_on``.

        The last error is re-raised unchanged; callers map it to their own exception.
        """
        self.ensure_connected(operation)
        async for attempt in retry_with_backoff(
            max_retries=self.retry_attempts,
            backoff_factor=self.retry_backoff_factor,
            retry_on=retry_on
        ):
            with attempt:
                return await asyncio.to_thread(func)

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()
