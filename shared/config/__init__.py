"""
Configuration Module
====================

Centralized configuration management using Pydantic Settings.
Loads from environment variables with type validation and defaults.

Usage:
    from shared.config import settings

    print(settings.environment)
    print(settings.registry.max_tokens)
"""

from shared.config.settings import (
    ConfigGuard,
    Environment,
    LogLevel,
    RegistrySettings,
    Settings,
    get_settings,
)


# Global settings instance (singleton)
settings = get_settings()

__all__ = [
    "Settings",
    "RegistrySettings",
    "get_settings",
    "settings",
    "Environment",
    "LogLevel",
    "ConfigGuard",
]
