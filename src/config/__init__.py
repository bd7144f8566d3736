"""Configuration module (environment settings and structured logging)."""

from src.config.logging import NOISY_LOGGERS, configure_logging, get_logger
from src.config.settings import DEFAULT_IMAGE_SIZE_NAMES, Settings, get_settings

__all__ = [
    "DEFAULT_IMAGE_SIZE_NAMES",
    "NOISY_LOGGERS",
    "Settings",
    "configure_logging",
    "get_logger",
    "get_settings",
]
