# config/settings.py
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
from enum import Enum
from dotenv import load_dotenv

load_dotenv()


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Environment(str, Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class KubernetesSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="K8S_")
    
    kubeconfig_path: Optional[str] = Field(None, description="Path to kubeconfig file")
    context: Optional[str] = Field(None, description="Kubernetes context to use")
    namespace: Optional[str] = Field(None, description="Namespace to analyze; unset means all namespaces")


class PricingSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="PRICING_")
    
    default_hourly_rate: float = Field(0.1, ge=0, description="Hourly rate for unknown instance types")
    storage_cost_per_gb_month: float = Field(0.10, ge=0, description="Storage cost per GB-month")
    cpu_core_hour_rate: float = Field(0.05, ge=0, description="Pod CPU cost per core-hour")
    memory_gb_hour_rate: float = Field(0.01, ge=0, description="Pod memory cost per GiB-hour")
    storage_placeholder_monthly_cost: float = Field(100.0, ge=0, description="Flat monthly storage cost in summaries")
    table_path: Optional[str] = Field(None, description="YAML file overriding the instance-type rate table")


class SchedulerSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="SCHEDULER_")
    
    interval_seconds: float = Field(300.0, gt=0, description="Seconds between analysis cycles")
    collaborator_timeout_seconds: float = Field(30.0, gt=0, description="Timeout for each provider call")
    retry_attempts: int = Field(3, ge=1, description="Number of attempts per provider call")
    retry_backoff_factor: float = Field(1.5, ge=0, description="Backoff factor for retries")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )
    
    environment: Environment = Field(Environment.DEVELOPMENT, description="Environment")
    debug: bool = Field(False, description="Debug mode")
    log_level: LogLevel = Field(LogLevel.INFO, description="Log level")
    log_format: str = Field("text", description="Log format (json or text)")
    
    kubernetes: KubernetesSettings = Field(default_factory=lambda: KubernetesSettings())
    pricing: PricingSettings = Field(default_factory=lambda: PricingSettings())
    scheduler: SchedulerSettings = Field(default_factory=lambda: SchedulerSettings())

    @field_validator('environment', mode='before')
    @classmethod
    def validate_environment(cls, v):
        if isinstance(v, str):
            return Environment(v.lower())
        return v

    @field_validator('log_level', mode='before')
    @classmethod
    def validate_log_level(cls, v):
        if isinstance(v, str):
            return LogLevel(v.upper())
        return v

    @field_validator('log_format')
    @classmethod
    def validate_log_format(cls, v):
        if v.lower() not in ("json", "text"):
            raise ValueError("log_format must be 'json' or 'text'")
        return v.lower()

    @classmethod
    def create_from_env(cls) -> "Settings":
        """Create settings instance from environment variables."""
        return cls()
