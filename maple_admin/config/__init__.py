"""Configuration - environment settings, credentials and admin settings."""

from .settings import AdminSettings, ConfigurationError, Settings, get_settings

__all__ = ["AdminSettings", "ConfigurationError", "Settings", "get_settings"]
