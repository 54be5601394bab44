"""
Pydantic model for application configuration.
Provides validation for the endpoint, user and cache settings.
"""

from pathlib import Path
from urllib.parse import quote, urlsplit

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_API_BASE_URL = "https://albert.crxssed.dev"
DEFAULT_CACHE_KEY = "readingListCache"
READING_LIST_PATH = "/api/anilist/reading-list/{username}"


class AppConfig(BaseModel):
    """A validated configuration model for the application."""

    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    # Remote source
    username: str
    api_base_url: str = DEFAULT_API_BASE_URL
    only_unread: bool = True
    request_timeout: float | None = None

    # Local cache
    cache_key: str = DEFAULT_CACHE_KEY

    # Internal fields not loaded from INI file
    config_path: str = Field(..., repr=False)

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        """Ensures the username can be embedded as a single path segment."""
        if not v:
            raise ValueError("Username cannot be empty.")
        if "/" in v:
            raise ValueError("Username cannot contain '/'.")
        return v

    @field_validator("api_base_url")
    @classmethod
    def validate_api_base_url(cls, v: str) -> str:
        """Requires an absolute http(s) URL and drops any trailing slash."""
        parts = urlsplit(v)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ValueError(
                f"API URL must be an absolute http(s) URL, but got: {v!r}"
            )
        return v.rstrip("/")

    @field_validator("request_timeout")
    @classmethod
    def validate_timeout(cls, v: float | None) -> float | None:
        """A zero timeout means no timeout, like an empty value."""
        if v is None or v == 0:
            return None
        if v < 0:
            raise ValueError("Request timeout must be a positive number of seconds.")
        return v

    @field_validator("cache_key")
    @classmethod
    def validate_cache_key(cls, v: str) -> str:
        if not v:
            raise ValueError("Cache key cannot be empty.")
        return v

    @property
    def endpoint(self) -> str:
        """The reading-list URL for the configured user, without query string."""
        path = READING_LIST_PATH.format(username=quote(self.username, safe=""))
        return self.api_base_url + path

    @property
    def query_params(self) -> dict[str, str]:
        return {"only_unread": "true" if self.only_unread else "false"}

    @property
    def cache_dir(self) -> Path:
        return Path(self.config_path)

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        internal_fields = {"config_path"}
        return {key for key in cls.model_fields if key not in internal_fields}
