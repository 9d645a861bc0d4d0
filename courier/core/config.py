"""Centralized configuration management with environment-aware defaults.

This module implements the configuration system using Pydantic Settings,
providing type-safe configuration with validation and environment variable
support.

Features:
- **Type safety**: All configuration values are validated and typed
- **Environment variables**: Supports .env files and environment overrides
- **Nested configuration**: Uses __ delimiter for complex config structures
- **Auto-detection**: Picks a log formatter from the deployment environment
- **Caching**: Configuration is cached for performance

Configuration sources (in order of precedence):
1. Environment variables
2. .env file in project root
3. Default values in model definitions
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_STATIC_MIME_TYPES: dict[str, str] = {
    "css": "text/css",
    "scss": "text/x-scss",
    "sass": "text/x-sass",
    "csv": "text/csv",
    "map": "application/json",
    "json": "application/json",
    "js": "text/javascript",
}


class LogConfig(BaseModel):
    """Logging configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_formatter_type: Literal["console", "json"] | None = Field(
        default=None,
        description="Log output formatter. Auto-detected if not specified.",
    )
    sensitive_fields: list[str] = Field(
        default_factory=lambda: [
            "password",
            "token",
            "secret",
            "api_key",
            "authorization",
        ],
        description="Field names to redact",
    )


class RoutingConfig(BaseModel):
    """Request path resolution and static file settings."""

    document_root: Path = Field(
        default=Path("public"),
        description="Directory static files are served from",
    )
    script_extension: str = Field(
        default=".php",
        description="Extension of front-controller scripts; never served as static",
    )
    path_query_param: str = Field(
        default="p",
        min_length=1,
        description="Query parameter holding the route path for front-controller requests",
    )
    static_mime_types: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_STATIC_MIME_TYPES),
        description="Extension to Content-Type overrides for static files",
    )

    @field_validator("script_extension", mode="after")
    @classmethod
    def ensure_leading_dot(cls, v: str) -> str:
        """Normalize the script extension to a lowercase dotted suffix."""
        v = v.strip().lower()
        if v and not v.startswith("."):
            return f".{v}"
        return v


class Settings(BaseSettings):
    """Main settings class for the application."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        env_nested_delimiter="__",
    )

    # Application settings
    app_name: str = Field(default="Courier", description="Application name")
    app_version: str = Field(default="0.4.0", description="Application version")
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Environment the application is running in",
    )
    debug: bool = Field(default=True, description="Debug mode flag")

    # Logging configuration
    log_config: LogConfig = Field(
        default_factory=LogConfig, description="Logging configuration"
    )

    # Routing configuration
    routing_config: RoutingConfig = Field(
        default_factory=RoutingConfig, description="Path and static file settings"
    )

    def model_post_init(self, __context: object) -> None:
        """Post initialization to set environment-based defaults."""
        super().model_post_init(__context)

        if self.log_config.log_formatter_type is None:
            self.log_config.log_formatter_type = self._detect_formatter()

    def _detect_formatter(self) -> Literal["console", "json"]:
        """Auto-detect log formatter based on environment."""
        # Container platforms collect stdout as structured logs
        if os.getenv("K_SERVICE") or os.getenv("AWS_EXECUTION_ENV"):
            return "json"

        if self.environment == "development":
            return "console"
        return "json"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
