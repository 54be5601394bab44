"""
Pydantic models for reading-list entries.

`RawListEntry` mirrors the subset of the remote payload the pipeline reads,
with every field optional. `OutdatedEntry` is the derived record that gets
cached and rendered; it serializes with camelCase keys.
"""

import logging
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
)
from pydantic.alias_generators import to_camel

from upnext_cli.exceptions import MalformedCacheError

log = logging.getLogger(__name__)

DEFAULT_COLOR = "#77DD77"
NO_TITLE = "No Title"


class _RawModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


class RawTitle(_RawModel):
    english: str | None = None
    romaji: str | None = None


class RawCoverImage(_RawModel):
    large: str | None = None
    color: str | None = None


class RawSourceMatch(_RawModel):
    last_chapter: float | None = Field(default=None, alias="lastChapter")


class RawMedia(_RawModel):
    title: RawTitle | None = None
    cover_image: RawCoverImage | None = Field(default=None, alias="coverImage")
    inferred_chapter_count: float | None = Field(
        default=None, alias="inferredChapterCount"
    )
    comick_match: RawSourceMatch | None = Field(default=None, alias="comickMatch")


class RawListEntry(_RawModel):
    """One item of the remote reading list."""

    media: RawMedia | None = None
    progress: float | None = None


class OutdatedEntry(BaseModel):
    """A title with unread chapters, as cached and displayed."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    title: str
    image_url: str
    color: str
    chapters_read: float
    total_chapters: float
    chapters_left: float

    @property
    def progress_value(self) -> float:
        """Fraction of the title already read, for progress bars."""
        if self.total_chapters > 0:
            return self.chapters_read / self.total_chapters
        return 0.0


_ENTRY_LIST = TypeAdapter(list[OutdatedEntry])


def parse_raw_entries(payload: list[Any]) -> list[RawListEntry]:
    """
    Decodes a remote JSON array into typed entries.

    Items that cannot be decoded at all are skipped; missing fields are
    left as None for the pipeline to default.
    """
    entries = []
    for index, item in enumerate(payload):
        try:
            entries.append(RawListEntry.model_validate(item))
        except ValidationError as e:
            log.debug(f"Skipping undecodable reading-list item #{index}: {e}")
    return entries


def serialize_entries(entries: list[OutdatedEntry]) -> str:
    """Encodes entries as the JSON string stored in the cache."""
    return _ENTRY_LIST.dump_json(entries, by_alias=True).decode("utf-8")


def deserialize_entries(serialized: str) -> list[OutdatedEntry]:
    """
    Decodes a cached JSON string back into entries.

    Raises:
        MalformedCacheError: If the string is not valid JSON or does not
        match the entry schema.
    """
    try:
        return _ENTRY_LIST.validate_json(serialized)
    except ValidationError as e:
        raise MalformedCacheError(f"Cached reading list is unreadable: {e}") from e
