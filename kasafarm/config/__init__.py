"""Configuration package."""

from kasafarm.config.settings import (
    AppSettings,
    GoogleSheetsSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "GoogleSheetsSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
