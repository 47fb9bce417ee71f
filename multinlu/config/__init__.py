"""
Configuration Management

Type-safe settings for the NLU manager with validation, TOML/JSON files
and environment variable integration.
"""

from .models import (
    NluSettings,
    ClassifierSettings,
    NerSettings,
    LogLevel,
    DEFAULT_MODEL_FILE,
    DEFAULT_EXCEL_FILE,
    create_default_settings,
)
from .manager import ConfigManager, ConfigValidationError

__all__ = [
    "NluSettings",
    "ClassifierSettings",
    "NerSettings",
    "LogLevel",
    "DEFAULT_MODEL_FILE",
    "DEFAULT_EXCEL_FILE",
    "create_default_settings",
    "ConfigManager",
    "ConfigValidationError",
]
