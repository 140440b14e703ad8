"""Configuration package."""

from simple_finances.config.settings import (
    AppSettings,
    Settings,
    SimpleFINSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "Settings",
    "SimpleFINSettings",
    "get_settings",
    "validate_all_settings",
]
