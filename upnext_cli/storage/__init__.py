"""
Storage Layer.

This package handles all data persistence: the configuration file and the
cached reading list.
"""

from .cache import CacheStore
from .config_manager import ConfigManager

__all__ = ["CacheStore", "ConfigManager"]
