"""Configuration management using Pydantic Settings."""
from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Router settings loaded from environment variables (and ``.env``)."""

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 8080
    environment: str = "development"

    # Auth
    governor_key: str = "dev-governor-key"

    # Registry
    registry_path: Path = Path("registry.json")

    # Google Cloud
    google_cloud_project: str | None = None
    gcp_access_token: str | None = None
    mock_gcp_services: bool = False

    # Firestore
    firestore_collection: str = "executions"
    firestore_database: str = "(default)"
    firestore_emulator_host: str | None = None
    commander_collection: str = "commander_state"

    # Outbound backends
    backend_timeout_s: float = 30.0

    # CORS preflight
    cors_allow_origin: str = "http://localhost:3000"

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "console"] = "console"


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the process settings."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (for testing)."""
    global _settings
    _settings = None


class ConfigurationError(RuntimeError):
    """Raised at start-up when the settings cannot produce a working service."""
