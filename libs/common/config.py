"""Configuration management for the GFG stats services.

This module centralizes environment-driven configuration for the services in
this repository (currently the dashboard/proxy service). It builds on
``pydantic_settings.BaseSettings`` so configuration can be provided via
environment variables, ``.env`` files, or defaults.

Highlights
- Strongly‑typed settings with sensible defaults
- One place to discover commonly used environment variables
- Small service‑specific subclasses to keep concerns clear

Usage
- Inject the appropriate config in your service entrypoint:
  ``config = DashboardConfig()``
- Or select dynamically: ``config = get_config("dashboard")``
"""

from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class for all services.

    Field names double as environment variable names (case-insensitive), so
    ``gfg_log_level`` is read from ``GFG_LOG_LEVEL``.

    Notes
    - Add new shared settings here so downstream services inherit them.
    - Prefer a typed field over reading ``os.environ`` directly.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    gfg_env: str = Field(default="local", description="Deployment environment name")

    # Logging
    gfg_log_level: str = Field(default="INFO", description="DEBUG, INFO, WARNING or ERROR")
    gfg_log_format: str = Field(default="json", description="json or console")

    # Backend scraping service
    backend_url: str = Field(
        default="http://127.0.0.1:5000",
        min_length=1,
        description="Base URL of the external GFG scraping backend",
    )


class DashboardConfig(BaseConfig):
    """Configuration for the dashboard service.

    Adds the HTTP bind address, CORS origins, and the per-route timeouts used
    when forwarding requests to the backend.
    """

    gfg_dashboard_host: str = Field(default="0.0.0.0")
    gfg_dashboard_port: int = Field(default=3000, ge=1, le=65535)
    gfg_cors_origins: str = Field(default="*", description="Comma separated list of origins")

    gfg_problems_timeout_seconds: float = Field(default=60.0, gt=0)
    gfg_stats_timeout_seconds: float = Field(default=30.0, gt=0)
    gfg_profile_timeout_seconds: float = Field(default=30.0, gt=0)

    @property
    def cors_origins(self) -> List[str]:
        """CORS origins as a list, ignoring blank entries."""
        return [origin.strip() for origin in self.gfg_cors_origins.split(",") if origin.strip()]

    @property
    def backend_base_url(self) -> str:
        """Backend URL without a trailing slash."""
        return self.backend_url.rstrip("/")


def get_config(service_name: str) -> BaseConfig:
    """Get configuration for a specific service.

    Parameters
    - service_name: Literal name, currently only ``dashboard``.

    Returns
    - A concrete ``BaseConfig`` subclass pre‑wired to read the right env vars.
    """
    config_map = {
        "dashboard": DashboardConfig,
    }

    # Default to ``BaseConfig`` to avoid surprising crashes for unknown names.
    config_class = config_map.get(service_name, BaseConfig)
    return config_class()
