"""Common utilities shared across services.

Includes:
- ``config``: Pydantic-based service configuration from environment variables.
- ``logging``: structured logging setup with structlog.
- ``metrics``: Prometheus metrics helpers.

Import pattern:
- from libs.common.config import DashboardConfig
- from libs.common.logging import configure_logging
"""
