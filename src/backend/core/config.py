"""
Application configuration using Pydantic Settings.

All configuration is loaded from environment variables or a local .env file.
"""

from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Votaciones"
    APP_ENV: str = "development"
    DEBUG: bool = False
    SECRET_KEY: str = ""  # Required - loaded from environment

    @field_validator("SECRET_KEY")
    @classmethod
    def validate_required_secrets(cls, v: str, info: Any) -> str:
        """Validate that required secrets are set."""
        if not v:
            raise ValueError(f"{info.field_name} must be set in environment")
        return v

    # Server signing keys
    # Keys live in KEYS_STORAGE_ROOT/KEYS_DIRECTORY/{private,public}.pem
    KEYS_STORAGE_ROOT: str = "storage/app"
    KEYS_DIRECTORY: str = "keys"
    PRIVATE_KEY_FILENAME: str = "private.pem"
    PUBLIC_KEY_FILENAME: str = "public.pem"
    RSA_KEY_SIZE: int = 2048

    @field_validator("RSA_KEY_SIZE")
    @classmethod
    def validate_key_size(cls, v: int) -> int:
        """RSA keys below 2048 bits are not accepted for vote signing."""
        if v < 2048:
            raise ValueError("RSA_KEY_SIZE must be at least 2048")
        return v

    @property
    def keys_dir(self) -> Path:
        """Directory holding the server key pair."""
        return Path(self.KEYS_STORAGE_ROOT) / self.KEYS_DIRECTORY

    @property
    def private_key_path(self) -> Path:
        return self.keys_dir / self.PRIVATE_KEY_FILENAME

    @property
    def public_key_path(self) -> Path:
        return self.keys_dir / self.PUBLIC_KEY_FILENAME

    # CORS - stored as comma-separated string to avoid pydantic-settings JSON parsing issues
    CORS_ORIGINS: str = "http://localhost:3000"

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list."""
        import json

        try:
            return json.loads(self.CORS_ORIGINS)
        except json.JSONDecodeError:
            return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
