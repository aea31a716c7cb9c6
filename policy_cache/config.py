"""Configuration management for the policy cache."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Cache settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="POLICY_CACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignore extra fields from environment variables
    )

    # Cache Configuration
    eviction_policy: str = Field(default="LRU", description="Eviction policy of the shared cache (LRU or LFU)")
    max_key_count: int = Field(default=1000, description="Maximum number of keys the shared cache can hold")
    segment_count: int = Field(default=16, gt=0, description="Number of lock segments the LRU cache stripes keys across")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    json_logs: bool = Field(default=True, description="Render log events as JSON instead of console text")

    # Monitoring
    enable_metrics: bool = Field(default=True, description="Record Prometheus cache counters")


# Global settings instance
settings = Settings()
