"""Up Next: track which titles on a reading list have unread chapters."""

__version__ = "0.1.0"
