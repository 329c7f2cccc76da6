"""
Configuration module for the Cart Uplift learning worker
"""

from .settings import (
    settings,
    Settings,
    DatabaseSettings,
    LearningSettings,
    SecuritySettings,
    LoggingSettings,
)

__all__ = [
    "settings",
    "Settings",
    "DatabaseSettings",
    "LearningSettings",
    "SecuritySettings",
    "LoggingSettings",
]
