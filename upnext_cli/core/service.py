"""
The orchestrator that keeps the current reading list in memory, loads it from
the cache, and refreshes it from the remote API.
"""

import asyncio
import logging
from typing import Optional

from upnext_cli.api.client import ReadingListClient
from upnext_cli.exceptions import MalformedCacheError
from upnext_cli.models.entries import (
    OutdatedEntry,
    deserialize_entries,
    serialize_entries,
)
from upnext_cli.storage.cache import CacheStore

from .pipeline import derive

log = logging.getLogger(__name__)


class ReadingListService:
    """
    Holds the list of outdated titles and a loading flag for the UI.

    The list is only ever replaced wholesale: by a cache load, by a
    successful refresh, or emptied by a forced refresh.
    """

    def __init__(self, client: ReadingListClient, cache: CacheStore):
        self.client = client
        self.cache = cache
        self.entries: list[OutdatedEntry] = []
        self.loading = True
        self.last_error: Optional[Exception] = None
        self._refresh_task: Optional[asyncio.Task] = None

    def load_cache(self) -> list[OutdatedEntry]:
        """Replaces the in-memory list with the cached one, if there is one."""
        serialized = self.cache.load()
        if serialized is None:
            log.debug("No cached reading list found.")
            return self.entries

        try:
            entries = deserialize_entries(serialized)
        except MalformedCacheError as e:
            log.warning(f"[yellow]Discarding unreadable reading-list cache:[/] {e}")
            self.cache.clear()
            return self.entries

        self.entries = entries
        self.loading = False
        log.debug(f"Loaded {len(entries)} entries from cache.")
        return self.entries

    async def initialize(self) -> list[OutdatedEntry]:
        """Loads the cache and refreshes when it holds nothing to show."""
        self.load_cache()
        if not self.entries:
            await self.refresh()
        return self.entries

    async def refresh(self, force_clear: bool = False) -> list[OutdatedEntry]:
        """
        Fetches and derives a new list, persisting it on success.

        A refresh requested while another is running waits for that one and
        returns its result instead of issuing a second request. A forced
        refresh instead waits for it to finish and then runs its own.

        Args:
            force_clear: Drop the cached and in-memory list before fetching, so
            a failed fetch leaves the list empty.

        Returns:
            The current list after the refresh.
        """
        while self._refresh_task is not None and not self._refresh_task.done():
            if not force_clear:
                log.debug("Refresh already in progress; waiting for it.")
                return await asyncio.shield(self._refresh_task)
            log.debug("Refresh in progress; forced refresh will run after it.")
            await asyncio.shield(self._refresh_task)

        self._refresh_task = asyncio.ensure_future(self._run_refresh(force_clear))
        return await self._refresh_task

    async def _run_refresh(self, force_clear: bool) -> list[OutdatedEntry]:
        self.loading = True
        try:
            if force_clear:
                self.cache.clear()
                self.entries = []

            outcome = await self.client.fetch()
            if not outcome.ok:
                self.last_error = outcome.error
                log.warning(f"[yellow]Refresh failed:[/] {outcome.error}")
                return self.entries

            result = derive(outcome.entries)
            if not self.cache.save(serialize_entries(result)):
                log.warning("[yellow]Reading list could not be cached.[/yellow]")
            self.entries = result
            self.last_error = None
            log.info(f"Refreshed reading list: {len(result)} titles behind.")
            return self.entries
        finally:
            self.loading = False
