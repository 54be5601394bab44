"""
Async client for the reading-list aggregation API.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Optional

import aiohttp

from upnext_cli import __version__
from upnext_cli.exceptions import TransportError
from upnext_cli.models.config import AppConfig
from upnext_cli.models.entries import RawListEntry, parse_raw_entries

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchOutcome:
    """The result of one fetch: either the decoded entries or the failure."""

    entries: list[RawListEntry] = field(default_factory=list)
    error: Optional[TransportError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, message: str, status: Optional[int] = None) -> "FetchOutcome":
        return cls(error=TransportError(message, status=status))


class ReadingListClient:
    """
    Fetches a user's reading list with a single GET request.

    Failures never raise out of `fetch()`; they come back as a `FetchOutcome`
    carrying a `TransportError`. There is no retry.
    """

    def __init__(self, config: AppConfig):
        """
        Initializes the client.

        Args:
            config: Validated configuration providing the endpoint and timeout.
        """
        self.config = config
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "ReadingListClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _initialize_session(self) -> None:
        """Ensures an active aiohttp session is available."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.config.request_timeout)
            self._session = aiohttp.ClientSession(
                headers={
                    "User-Agent": f"upnext-cli/{__version__}",
                    "Accept": "application/json",
                    "Accept-Encoding": "gzip, deflate",
                },
                timeout=timeout,
            )

    async def close(self) -> None:
        """Gracefully closes the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def fetch(self) -> FetchOutcome:
        """Requests the reading list and decodes it into typed entries."""
        await self._initialize_session()

        url = self.config.endpoint
        start_time = time.monotonic()
        try:
            async with self._session.get(url, params=self.config.query_params) as r:
                duration_ms = (time.monotonic() - start_time) * 1000
                log.debug(f"GET {url} -> {r.status} in {duration_ms:.0f} ms")

                if r.status != 200:
                    return FetchOutcome.failure(
                        f"Reading list request failed with HTTP {r.status}.",
                        status=r.status,
                    )

                try:
                    payload = await r.json(content_type=None)
                except ValueError as e:
                    return FetchOutcome.failure(
                        f"Reading list response is not valid JSON: {e}",
                        status=r.status,
                    )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            log.debug(f"Reading list request to {url} failed: {e!r}")
            return FetchOutcome.failure(f"Could not reach {url}: {e}")

        if not isinstance(payload, list):
            return FetchOutcome.failure(
                "Reading list response is not a JSON array.", status=200
            )

        entries = parse_raw_entries(payload)
        log.debug(f"Fetched {len(entries)} reading-list items.")
        return FetchOutcome(entries=entries)
