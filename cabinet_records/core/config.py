"""Application configuration with validation."""

from enum import Enum
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator


class Environment(str, Enum):
    """Application environment."""
    DEVELOPMENT = "development"
    PRODUCTION = "production"


class StorageBackend(str, Enum):
    """Where uploaded files are persisted."""
    LOCAL = "local"
    R2 = "r2"


class ConfigurationError(Exception):
    """Raised when application configuration is invalid for the environment."""
    pass


class Settings(BaseSettings):
    """
    Application settings with validation.

    Values come from environment variables or a ``.env`` file.
    """

    # Environment
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment (development/production)"
    )

    # Database Configuration
    database_url: str = Field(
        default="sqlite:///./records.db",
        description="Database connection URL"
    )
    # Connection pool tuning (PostgreSQL only; ignored for SQLite).
    db_pool_size: int = Field(
        default=5,
        description="Number of persistent database connections"
    )
    db_max_overflow: int = Field(
        default=10,
        description="Extra connections allowed during traffic bursts"
    )
    db_pool_timeout: int = Field(
        default=30,
        description="Seconds to wait for a connection from the pool before raising"
    )
    db_pool_recycle: int = Field(
        default=1800,
        description="Seconds before a connection is recycled"
    )

    # File storage
    # UPLOAD_DIR holds locally stored uploads and the PDF scratch files.
    # It is created once by main.startup(), never on import.
    upload_dir: str = Field(
        default="./uploads",
        description="Directory for local uploads and PDF scratch files"
    )
    storage_backend: StorageBackend = Field(
        default=StorageBackend.LOCAL,
        description="Upload destination: 'local' directory or Cloudflare 'r2'"
    )
    r2_account_id: str = Field(default="", description="Cloudflare account id")
    r2_access_key_id: str = Field(default="", description="R2 access key id")
    r2_secret_access_key: str = Field(default="", description="R2 secret access key")
    r2_bucket_name: str = Field(default="", description="R2 bucket name")
    r2_folder: str = Field(
        default="records",
        description="Key prefix for objects uploaded by the records core"
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: str = Field(
        default="json",
        description="Log output format: 'json' for structured, 'text' for human-readable"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the standard Python logging levels."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level. Must be one of: {valid_levels}")
        return v_upper

    @property
    def r2_endpoint_url(self) -> str:
        return f"https://{self.r2_account_id}.r2.cloudflarestorage.com"

    def validate_storage_config(self) -> None:
        """Fail startup when R2 storage is selected without credentials.

        Raises:
            ConfigurationError: If any R2 setting is missing.
        """
        if self.storage_backend != StorageBackend.R2:
            return

        missing = [
            name.upper()
            for name in ("r2_account_id", "r2_access_key_id", "r2_secret_access_key", "r2_bucket_name")
            if not getattr(self, name)
        ]
        if missing:
            raise ConfigurationError(
                "Missing required R2 environment variables: " + ", ".join(missing)
            )

    class Config:
        """Pydantic configuration."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


# Global settings instance
settings = Settings()
