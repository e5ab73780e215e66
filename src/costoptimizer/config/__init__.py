from .settings import Settings, KubernetesSettings, PricingSettings, SchedulerSettings

__all__ = ["Settings", "KubernetesSettings", "PricingSettings", "SchedulerSettings"]
