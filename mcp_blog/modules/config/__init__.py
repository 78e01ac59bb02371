"""Configuration management module."""

from .config_manager import AppSettings, ConfigManager

__all__ = ["AppSettings", "ConfigManager"]
