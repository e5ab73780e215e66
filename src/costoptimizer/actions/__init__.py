from .catalog import ActionCatalog, DryRunActionExecutor, default_actions

__all__ = ["ActionCatalog", "DryRunActionExecutor", "default_actions"]
