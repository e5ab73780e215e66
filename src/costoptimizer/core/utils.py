"""Utility functions and decorators."""

import logging.config
from decimal import Decimal
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple, Union

import structlog
import yaml
from kubernetes.utils import parse_quantity
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

logger = structlog.get_logger(__name__)

BYTES_PER_GIB = Decimal(1024 ** 3)
HOURS_PER_MONTH = 24 * 30


def retry_with_backoff(
    max_retries: int = 3,
    backoff_factor: float = 1.5,
    max_wait: float = 60.0,
    retry_on: Union[type, Tuple[type, ...]] = Exception,
) -> AsyncRetrying:
    """Async retry controller with exponential backoff.

    Use as ``async for attempt in retry_with_backoff(...): with attempt: ...``.
    """
    return AsyncRetrying(
        stop=stop_after_attempt(max_retries),
        wait=wait_exponential(multiplier=backoff_factor, max=max_wait),
        retry=retry_if_exception_type(retry_on),
        reraise=True
    )


def setup_logging(config_path: Optional[Union[str, Path]] = None,
                  log_level: str = "INFO",
                  log_format: str = "text") -> None:
    """Setup structured logging configuration."""
    if config_path and Path(config_path).exists():
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f)
        logging.config.dictConfig(config)
    else:
        logging.basicConfig(
            level=getattr(logging, log_level.upper()),
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
    
    json_output = bool(config_path) or log_format == "json"
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def to_quantity(value: Any) -> Decimal:
    """Parse a Kubernetes quantity ("250m", "8Gi", 2) into an exact Decimal.

    Missing or malformed values become zero; CPU comes back in cores and
    memory in bytes.
    """
    if value is None or value == "":
        return Decimal(0)
    try:
        return parse_quantity(value)
    except ValueError:
        logger.debug("Unparseable resource quantity", value=value)
        return Decimal(0)


def resource_quantity(resources: Optional[Mapping[str, Any]], name: str) -> Decimal:
    """Quantity for ``name`` in a requests/limits/usage mapping."""
    if not resources:
        return Decimal(0)
    return to_quantity(resources.get(name))


def percentage(usage: Decimal, capacity: Decimal) -> Optional[float]:
    """usage / capacity in percent, or None when capacity is zero."""
    if capacity <= 0:
        return None
    return float(usage / capacity * 100)


def cores(value: Decimal) -> float:
    return float(value)


def gibibytes(value: Decimal) -> float:
    return float(value / BYTES_PER_GIB)


def format_bytes(bytes_value: float) -> str:
    """Format bytes to human readable format."""
    for unit in ['B', 'KiB', 'MiB', 'GiB', 'TiB']:
        if abs(bytes_value) < 1024.0:
            return f"{bytes_value:.2f} {unit}"
        bytes_value /= 1024.0
    return f"{bytes_value:.2f} PiB"


def format_cpu(cores_value: float) -> str:
    """Format cores as millicores below one core."""
    if cores_value >= 1:
        return f"{cores_value:.2f} cores"
    return f"{cores_value * 1000:.0f}m"

