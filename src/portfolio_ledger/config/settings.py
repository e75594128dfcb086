"""Application settings and configuration."""

from decimal import Decimal
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="LEDGER_",
    )

    app_name: str = "Portfolio Ledger Service"
    app_version: str = "0.1.0"

    database_url: str = "sqlite:///./portfolio_ledger.db"
    log_level: str = "INFO"

    # Trading rules
    commission_rate: Decimal = Decimal("0.001")
    min_commission: Decimal = Decimal("1.00")
    margin_ratio: Decimal = Decimal("0.5")
    rebalance_threshold: Decimal = Decimal("1.0")

    # Trade history paging
    default_trade_history_limit: int = 50
    max_trade_history_limit: int = 500

    # Market data settings
    market_data_provider: Literal["stub", "yahoo"] = "stub"
    market_data_cache_ttl_seconds: int = 60
    market_data_timeout_seconds: float = 10


# Global settings instance, read only at the composition root
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the current settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Settings) -> None:
    """Replace the settings instance (tests and embedding callers)."""
    global _settings
    _settings = settings


def reset_settings() -> None:
    """Reset settings to force reload."""
    global _settings
    _settings = None
