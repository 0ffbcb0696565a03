"""Configuration package exports."""

from .loader import ConfigError, load_config
from .model import ChatFeedConfig, normalize_channel

__all__ = ["ChatFeedConfig", "ConfigError", "load_config", "normalize_channel"]
