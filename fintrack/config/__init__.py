"""Configuration package."""

from fintrack.config.settings import (
    LedgerSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "LedgerSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
