"""
Data Models Layer.

This package contains Pydantic models that define the core data structures
used throughout the application: configuration and reading-list entries.
"""

from .config import AppConfig
from .entries import OutdatedEntry, RawListEntry

__all__ = ["AppConfig", "OutdatedEntry", "RawListEntry"]
