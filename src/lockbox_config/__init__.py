"""Shared application configuration package."""

from .settings import (
    ConfigurationError,
    Settings,
    get_config_dir,
    load_settings,
)

__all__ = [
    "ConfigurationError",
    "Settings",
    "get_config_dir",
    "load_settings",
]
