"""ImpactCRM configuration module.

This module provides TOML-based configuration with environment variable overrides.

Configuration is loaded from the following locations (in order of priority):
1. Environment variables (highest priority)
2. ./config.toml (project root - for development)
3. ~/.config/impactcrm/config.toml (user config)
4. /etc/impactcrm/config.toml (system config)

Secrets are loaded from secrets.env files in the same directories.
"""

from impactcrm.config.schema import (
    AuthConfig,
    DatabaseConfig,
    ImpactCRMConfig,
    ImportConfig,
    LoggingConfig,
    SecretsConfig,
    ServerConfig,
    StorageConfig,
)
from impactcrm.config.settings import get_settings, reset_settings, settings

__all__ = [
    "AuthConfig",
    "DatabaseConfig",
    "ImpactCRMConfig",
    "ImportConfig",
    "LoggingConfig",
    "SecretsConfig",
    "ServerConfig",
    "StorageConfig",
    "get_settings",
    "reset_settings",
    "settings",
]
