"""
Configuration Management for FinTrack

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The ledger core never reads it directly; the component factory reads
it once and injects the values (budget ratio, date policy) where needed.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class LedgerSettings(BaseSettings):
    """
    Ledger behaviour and console configuration.

    Every field can be overridden with a FINTRACK_ environment variable,
    e.g. FINTRACK_NEAR_BUDGET_RATIO=0.8.
    """

    model_config = SettingsConfigDict(
        env_prefix="FINTRACK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    near_budget_ratio: float = Field(
        default=0.9,
        gt=0.0,
        le=1.0,
        description="Fraction of a budget at which spending counts as near the limit"
    )
    allow_future_dates: bool = Field(
        default=False,
        description="Accept record dates after today"
    )
    export_default_path: str = Field(
        default="fintrack-export.csv",
        min_length=1,
        description="Export target when the user gives no path"
    )
    log_level: str = Field(
        default="WARNING",
        description="Minimum level for log output"
    )
    log_json: bool = Field(
        default=False,
        description="Render log lines as JSON instead of console key/value"
    )
    currency_symbol: str = Field(
        default="$",
        max_length=3,
        description="Symbol printed before amounts in console output"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus
    {setting_name}_error entries for failures.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.ledger
        results["ledger"] = True
    except Exception as e:
        results["ledger"] = False
        results["ledger_error"] = str(e)

    return results
