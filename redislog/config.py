"""Pipeline configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Pipeline settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_env: str = "development"

    # Logging
    log_level: str = "INFO"
    log_format: str = "auto"  # auto (based on app_env), console, or json

    # Redis
    redis_url: str = "redis://localhost:6379/0"

    # Bounded list sink
    log_list_name: str = "logs"
    log_list_partition_by_tenant: bool = False
    """If True, events go to "{log_list_name}:{tenant}" using config.tenant."""
    log_list_default_tenant: str = "manager"
    log_list_max_size: int = 1000

    # Fan-out channel sink (disabled when empty)
    log_channel: str | None = None

    # Filtering
    filter_settings_path: str | None = None
    filter_log_settings_path: str | None = None
    filter_response_only: bool = False

    # Pipeline
    pipeline_queue_size: int = 100

    @field_validator("log_channel", "filter_settings_path", "filter_log_settings_path", mode="before")
    @classmethod
    def empty_as_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("log_list_max_size")
    @classmethod
    def check_max_size(cls, v: int) -> int:
        if v < 1:
            raise ValueError("log_list_max_size must be at least 1")
        return v

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
