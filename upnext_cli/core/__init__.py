"""
Core application engine for deriving and refreshing the reading list.

The `ReadingListService` coordinates cache loads and refreshes, delegating
the normalization, filtering and sorting of raw entries to `pipeline.derive`.
"""

from .pipeline import derive
from .service import ReadingListService

__all__ = ["ReadingListService", "derive"]
