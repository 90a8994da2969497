"""
Configuration management for the customer ledger.
Uses pydantic-settings for type-safe, centralized configuration.
"""

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables (LEDGER_*) or .env.
    Only the application entry point reads these; core components get
    their values passed in.
    """

    model_config = SettingsConfigDict(
        env_prefix='LEDGER_',
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore'
    )

    # Database
    database_url: str = "sqlite:///transactions.db"
    db_echo: bool = False

    # Logging
    log_level: str = "INFO"

    # Presentation / export
    report_title: str = "Transactions Report"
    currency_label: str = "Rs."


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings() -> Settings:
    """Reload settings from environment (useful for testing)."""
    global _settings
    _settings = Settings()
    return _settings
