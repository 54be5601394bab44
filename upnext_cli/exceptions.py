"""
Defines custom exceptions for the application to allow for more specific error handling.
"""


class UpNextError(Exception):
    """Base exception for all application-specific errors."""


class TransportError(UpNextError):
    """
    Raised (or carried by a fetch outcome) when the reading list could not be
    retrieved: a non-200 response, an unusable body, or a network failure.
    """

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class MalformedCacheError(UpNextError):
    """Raised when a cached reading list cannot be decoded."""


class ConfigurationError(UpNextError):
    """Raised for issues related to configuration loading or validation."""
