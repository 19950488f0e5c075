"""Configuration loading and typed config sections."""

from .domains import EngineConfig, LoggingConfig
from .manager import ENV_PREFIX, PROJECT_CONFIG_FILENAME, ConfigManager

__all__ = [
    "ConfigManager",
    "EngineConfig",
    "LoggingConfig",
    "ENV_PREFIX",
    "PROJECT_CONFIG_FILENAME",
]
