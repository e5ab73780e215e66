from .cost_model import CostModel, DEFAULT_HOURLY_RATES, DEFAULT_INSTANCE_TYPE, load_rate_table

__all__ = ["CostModel", "DEFAULT_HOURLY_RATES", "DEFAULT_INSTANCE_TYPE", "load_rate_table"]
