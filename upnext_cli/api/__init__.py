"""
Reading List API Layer.

This package handles all communication with the remote reading-list API.
"""

from .client import FetchOutcome, ReadingListClient

__all__ = ["FetchOutcome", "ReadingListClient"]
