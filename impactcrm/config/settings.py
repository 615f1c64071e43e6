"""Global settings instance for ImpactCRM.

This module provides a unified settings object that combines:
- Configuration from config.toml
- Secrets from secrets.env
- Environment variable overrides

The settings object provides a flat interface while internally using the
structured configuration.
"""

import logging
import secrets as secrets_module
from pathlib import Path

from impactcrm.config.loader import load_config, load_secrets
from impactcrm.config.schema import ImpactCRMConfig, SecretsConfig

logger = logging.getLogger(__name__)


class Settings:
    """Unified settings object combining config and secrets."""

    def __init__(
        self,
        config: ImpactCRMConfig | None = None,
        secrets: SecretsConfig | None = None,
    ):
        """Initialize settings.

        Args:
            config: Optional ImpactCRMConfig instance. If not provided, loads from file.
            secrets: Optional SecretsConfig instance. If not provided, loads from file.
        """
        self._config = config or load_config()
        self._secrets = secrets or load_secrets()
        self._secret_key_generated = not self._secrets.secret_key

        if self._secret_key_generated:
            self._secrets.secret_key = secrets_module.token_urlsafe(32)
            logger.warning(
                "SECURITY WARNING: No secret key configured. "
                "A random secret key has been generated; bearer tokens signed with "
                "the identity provider's key will be rejected. "
                "Set IMPACTCRM_SECRET_KEY for production use."
            )

    @property
    def config(self) -> ImpactCRMConfig:
        """Get the full configuration object."""
        return self._config

    # Application
    @property
    def app_name(self) -> str:
        return self._config.app_name

    @property
    def debug(self) -> bool:
        return self._config.server.debug

    # Server
    @property
    def host(self) -> str:
        return self._config.server.host

    @property
    def port(self) -> int:
        return self._config.server.port

    @property
    def workers(self) -> int:
        return self._config.server.workers

    @property
    def enforce_https(self) -> bool:
        return self._config.server.enforce_https

    @property
    def rate_limit_per_minute(self) -> int:
        return self._config.server.rate_limit_per_minute

    @property
    def cors_origins(self) -> list[str]:
        return self._config.server.cors_origins

    # Database
    @property
    def mongodb_url(self) -> str:
        return self._config.database.mongodb_url

    @property
    def mongodb_database(self) -> str:
        return self._config.database.mongodb_database

    @property
    def min_pool_size(self) -> int:
        return self._config.database.min_pool_size

    @property
    def max_pool_size(self) -> int:
        return self._config.database.max_pool_size

    # Storage
    @property
    def data_dir(self) -> Path:
        return self._config.storage.data_dir

    @property
    def max_upload_size_mb(self) -> int:
        return self._config.storage.max_upload_mb

    @property
    def max_upload_size_bytes(self) -> int:
        return self._config.storage.max_upload_bytes

    # Import pipeline
    @property
    def import_max_rows(self) -> int:
        return self._config.imports.max_rows

    @property
    def import_max_displayed_errors(self) -> int:
        return self._config.imports.max_displayed_errors

    # Auth
    @property
    def jwt_algorithm(self) -> str:
        return self._config.auth.algorithm

    @property
    def jwt_audience(self) -> str | None:
        return self._config.auth.audience

    # Logging
    @property
    def log_level(self) -> str:
        return self._config.logging.level

    @property
    def log_format(self) -> str:
        return self._config.logging.format

    # Secrets
    @property
    def secret_key(self) -> str:
        return self._secrets.secret_key or ""

    @property
    def secret_key_generated(self) -> bool:
        """True when no key was configured and a random one is in use."""
        return self._secret_key_generated


# Global settings instance - lazily initialized
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance, loading it on first use."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset the global settings instance.

    This is primarily useful for testing to reload configuration.
    """
    global _settings
    _settings = None


class _SettingsProxy:
    """Proxy object that lazily loads settings on first access."""

    def __getattr__(self, name: str):
        return getattr(get_settings(), name)

    def __repr__(self) -> str:
        return repr(get_settings())


settings = _SettingsProxy()
