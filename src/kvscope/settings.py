"""Application settings using Pydantic Settings."""

from datetime import timedelta
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Inspector configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="KVSCOPE_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # API
    api_host: str = Field(default="0.0.0.0", description="API server host")
    api_port: int = Field(default=8080, description="API server port")
    api_reload: bool = Field(default=False, description="Auto-reload on code changes")

    # Store
    db_path: str = Field(default="./data/kvscope.db", description="RocksDB path")
    backend: Literal["rocksdb", "memory"] = Field(
        default="rocksdb",
        description="Store backend: rocksdb (on-disk) or memory (empty in-process store)",
    )
    read_only: bool = Field(
        default=True,
        description="Open the RocksDB store read-only so a live writer can keep the lock",
    )

    # Key layout
    internal_prefix: str = Field(
        default="!kv",
        description="Sentinel prefix of store-internal bookkeeping keys",
    )
    partition_duration_hours: int = Field(
        default=1, ge=1, description="Width of a time partition in hours"
    )

    # Query defaults
    default_max_rows: int = Field(default=1000, description="Row cap for key listings")
    default_lookback_hours: int = Field(
        default=336, description="Lookback window for partitioned search (14 days)"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Minimum log level for loguru")

    @property
    def partition_duration(self) -> timedelta:
        """Partition width as a timedelta."""
        return timedelta(hours=self.partition_duration_hours)


settings = Settings()
