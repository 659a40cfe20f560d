"""Application settings and configuration."""

from decimal import Decimal
from pathlib import Path
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


def get_default_data_dir() -> Path:
    """Return the default data directory."""
    return Path.home() / ".piefolio"


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    app_name: str = "Piefolio"
    app_version: str = "0.1.0"
    log_level: str = "INFO"

    # Data directory (database lives here unless database_url is set)
    data_dir: Optional[Path] = None
    database_url: Optional[str] = None

    # Upstream portfolio API
    upstream_base_url: str = "http://localhost:9000"
    upstream_api_key: Optional[str] = None
    upstream_timeout_seconds: float = 10.0
    use_stub_provider: bool = False

    # Defaults for users without stored settings
    default_country: str = "BG"
    default_currency: str = "BGN"
    default_monthly_budget: Decimal = Decimal("1000")

    # Snapshot freshness
    portfolio_max_staleness_seconds: int = 3600
    serve_stale_on_upstream_error: bool = True

    # Rate limiting
    api_rate_limit: int = 100
    api_rate_window_seconds: float = 60.0
    auth_rate_limit: int = 10
    auth_rate_window_seconds: float = 15 * 60.0
    rate_limit_max_clients: int = 500
    rate_limit_idle_ttl_seconds: Optional[float] = None
    unresolved_client_policy: Literal["shared", "reject"] = "shared"

    # Allocation analysis
    rebalance_threshold_percent: Decimal = Decimal("5")

    def get_data_dir(self) -> Path:
        """Get the data directory, creating it if needed."""
        data_dir = self.data_dir or get_default_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def get_database_url(self) -> str:
        """Get database URL, deriving from data_dir if not set."""
        if self.database_url:
            return self.database_url
        db_path = self.get_data_dir() / "piefolio.db"
        return f"sqlite:///{db_path}"


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
