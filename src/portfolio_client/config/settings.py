"""Application settings and configuration."""

from datetime import timedelta
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


def get_default_data_dir() -> Path:
    """Return the default data directory based on platform."""
    return Path.home() / "Documents" / "Portfolio Client Data"


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PORTFOLIO_CLIENT_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Portfolio Client"
    app_version: str = "0.1.0"

    # Remote portfolio service
    api_base_url: str = "http://127.0.0.1:8000"
    request_timeout_seconds: float = 30.0
    min_payload_bytes: int = 16

    # Data directory (all app data lives here)
    data_dir: Optional[Path] = None

    # Database URL (derived from data_dir if not set explicitly)
    database_url: Optional[str] = None

    # Session token file (derived from data_dir if not set explicitly)
    credential_file: Optional[Path] = None

    # Local replica behavior
    cache_validity_hours: float = 6.0
    snapshot_retention: int = 20

    log_level: str = "INFO"

    def get_data_dir(self) -> Path:
        """Get the data directory, creating it if needed."""
        data_dir = self.data_dir or get_default_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def get_database_url(self) -> str:
        """Get database URL, deriving from data_dir if not set."""
        if self.database_url:
            return self.database_url
        db_path = self.get_data_dir() / "portfolio.db"
        return f"sqlite:///{db_path}"

    def get_credential_file(self) -> Path:
        """Get the session token file path."""
        return self.credential_file or self.get_data_dir() / "session.jwt"

    def get_cache_validity(self) -> timedelta:
        return timedelta(hours=self.cache_validity_hours)


# Global settings instance (can be replaced at runtime)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the current settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Settings) -> None:
    """Set the global settings instance."""
    global _settings
    _settings = settings


def reset_settings() -> None:
    """Reset settings to force reload."""
    global _settings
    _settings = None
