"""Pydantic models for ImpactCRM configuration.

These models define the structure of config.toml and secrets.env files.
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field


class ServerConfig(BaseModel):
    """Server configuration."""

    host: str = "127.0.0.1"
    port: int = 8000
    workers: int = 2
    debug: bool = False
    enforce_https: bool = False
    rate_limit_per_minute: int = 60
    # CORS configuration - empty list means same-origin only
    cors_origins: list[str] = []


class DatabaseConfig(BaseModel):
    """MongoDB database configuration."""

    mongodb_url: str = "mongodb://localhost:27017"
    mongodb_database: str = "impactcrm"
    # Connection pool settings
    min_pool_size: int = 10
    max_pool_size: int = 100


class StorageConfig(BaseModel):
    """File storage configuration."""

    data_dir: Path = Field(default_factory=lambda: Path("data"))
    max_upload_mb: int = 10

    @property
    def max_upload_bytes(self) -> int:
        """Get max upload size in bytes."""
        return self.max_upload_mb * 1024 * 1024


class ImportConfig(BaseModel):
    """CSV import pipeline configuration."""

    max_rows: int = Field(default=5000, ge=1)
    # Errors shown to a user per blocked import; detection is never capped
    max_displayed_errors: int = Field(default=50, ge=1)


class AuthConfig(BaseModel):
    """Bearer token verification configuration."""

    algorithm: str = "HS256"
    # Expected "aud" claim; tokens from the identity provider carry one
    audience: str | None = None


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: str = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class SecretsConfig(BaseModel):
    """Secrets loaded from secrets.env or environment variables.

    These values should never be committed to version control.
    """

    secret_key: str | None = None


class ImpactCRMConfig(BaseModel):
    """Root configuration model for config.toml."""

    app_name: str = "ImpactCRM"
    server: ServerConfig = Field(default_factory=ServerConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    imports: ImportConfig = Field(default_factory=ImportConfig, alias="import")
    auth: AuthConfig = Field(default_factory=AuthConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"populate_by_name": True}
