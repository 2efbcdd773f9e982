"""Configuration package."""

from networth.config.settings import (
    ApiSettings,
    AppSettings,
    GoogleSheetsSettings,
    MonitorSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "ApiSettings",
    "AppSettings",
    "GoogleSheetsSettings",
    "MonitorSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
