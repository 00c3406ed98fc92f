"""Pydantic models for parsing the config.yaml configuration file.

This module contains Pydantic models that correspond to the structure of config.yaml.
These models handle validation and type conversion of the YAML configuration data.
"""

from __future__ import annotations

from typing import Literal

from loguru import logger
from pydantic import AnyHttpUrl, BaseModel, Field, TypeAdapter, field_validator

DEFAULT_LEGACY_BASE_URL = "http://legacy-auth:4000/"

_http_url_adapter = TypeAdapter(AnyHttpUrl)


class LegacyConfig(BaseModel):
    """Connection settings for the legacy authentication facade."""

    enabled: bool = Field(default=True, description="Enable the legacy federation source")
    base_url: str = Field(
        default=DEFAULT_LEGACY_BASE_URL,
        description="Base URL for the legacy authentication facade (e.g. http://legacy-auth:4000/)",
    )
    connect_timeout_seconds: float = Field(
        default=5.0, gt=0, description="Connect timeout for facade calls"
    )
    request_timeout_seconds: float = Field(
        default=5.0, gt=0, description="Overall timeout for a single facade call"
    )
    federation_source_id: str = Field(
        default="legacy-user-storage",
        min_length=1,
        description="Identifier of this federation source, used in storage ids",
    )

    @field_validator("base_url")
    @classmethod
    def _validate_base_url(cls, value: str) -> str:
        # Free text, only required to parse as an http(s) URL
        _http_url_adapter.validate_python(value)
        return value


class ProfileCacheConfig(BaseModel):
    """Remote profile cache configuration."""

    mode: Literal["bounded", "unbounded"] = Field(
        default="bounded",
        description="bounded = LRU with TTL, unbounded = keep every profile for the process lifetime",
    )
    max_entries: int = Field(default=10_000, gt=0, description="Maximum cached profiles")
    ttl_seconds: int = Field(default=3600, gt=0, description="Profile time to live in seconds")


class LoggingConfig(BaseModel):
    """Logging configuration model."""

    level: str = Field(default="INFO", description="Logging level")
    format: Literal["json", "plain"] = Field(default="json", description="Log format")
    file: str | None = Field(default="logs/legacy_bridge.log", description="Log file path")
    max_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(
        default=5, description="Number of backup log files to keep"
    )


class DatabaseConfig(BaseModel):
    """Database configuration model."""

    url: str = Field(
        default="sqlite:///./legacy_bridge.db",
        description="Database connection URL",
    )
    pool_size: int = Field(default=20, description="Connection pool size")
    max_overflow: int = Field(default=10, description="Maximum pool overflow")
    pool_timeout: int = Field(default=30, description="Pool timeout in seconds")
    pool_recycle: int = Field(default=1800, description="Pool recycle time in seconds")

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")


class AppConfig(BaseModel):
    """Application configuration model."""

    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    host: str = Field(default="0.0.0.0", description="Application host")
    port: int = Field(default=8000, description="Application port")

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


class ConfigData(BaseModel):
    """Root configuration model that matches the config.yaml structure."""

    app: AppConfig = Field(
        default_factory=AppConfig, description="Application configuration"
    )
    legacy: LegacyConfig = Field(
        default_factory=LegacyConfig, description="Legacy facade configuration"
    )
    profile_cache: ProfileCacheConfig = Field(
        default_factory=ProfileCacheConfig, description="Profile cache configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Database configuration"
    )

    def log_summary(self) -> None:
        """Log the effective non-secret settings once at startup."""
        logger.info(
            "Configuration loaded",
            environment=self.app.environment,
            legacy_base_url=self.legacy.base_url,
            federation_source_id=self.legacy.federation_source_id,
            cache_mode=self.profile_cache.mode,
        )
