"""Custom exceptions for the cost optimizer."""

from typing import Optional, Dict, Any


class CostOptimizerException(Exception):
    """Base exception for the cost optimizer."""
    
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ClientConnectionException(CostOptimizerException):
    """Raised when client connections fail."""
    
    def __init__(self, client_type: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.client_type = client_type
        super().__init__(f"{client_type} connection failed: {message}", details)


class ProviderUnavailableException(CostOptimizerException):
    """Raised when an inventory or metrics call fails or times out."""
    
    def __init__(self, provider: str, operation: str, message: str,
                 details: Optional[Dict[str, Any]] = None):
        self.provider = provider
        self.operation = operation
        super().__init__(f"{provider}.{operation} unavailable: {message}", details)


class ConfigurationException(CostOptimizerException):
    """Raised when configuration is invalid."""
    pass


class ActionNotFoundException(CostOptimizerException):
    """Raised when an optimization action id is not in the catalog."""
    
    def __init__(self, action_id: str):
        self.action_id = action_id
        super().__init__(f"Optimization action not found: {action_id}")


class ActionExecutionException(CostOptimizerException):
    """Raised when the action executor rejects or fails an action."""
    pass
