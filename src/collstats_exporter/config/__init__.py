"""
Configuration package initialization.

Exports key settings classes and the global settings instance for convenient imports.
"""

from .settings import (
    Environment,
    LogLevel,
    MongoSettings,
    MonitoringSettings,
    Settings,
    settings,
)

__all__ = [
    "Settings",
    "settings",
    "Environment",
    "LogLevel",
    "MongoSettings",
    "MonitoringSettings",
]
