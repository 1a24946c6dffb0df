"""Configuration module for practice desk."""

from practice_desk.config.logging import configure_logging, get_logger
from practice_desk.config.settings import FlatSettings, get_settings

__all__ = ["FlatSettings", "get_settings", "configure_logging", "get_logger"]
