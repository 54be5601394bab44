"""
Derives the list of outdated titles from raw reading-list entries.

Each raw entry is normalized (title, cover, color, chapter counts), entries
that are caught up are dropped, and the rest are ordered so the titles
closest to being caught up come first.
"""

import logging

from upnext_cli.models.entries import (
    DEFAULT_COLOR,
    NO_TITLE,
    OutdatedEntry,
    RawListEntry,
    RawMedia,
)

log = logging.getLogger(__name__)


def resolve_total_chapters(media: RawMedia, chapters_read: float) -> float | None:
    """
    Picks the best known chapter total for a title.

    Prefers the inferred count, then the matched source's last chapter. With
    neither, the chapters read are returned, which marks the title as caught
    up even though the real total is unknown.
    """
    if media.inferred_chapter_count is not None:
        return media.inferred_chapter_count
    if media.comick_match is not None and media.comick_match.last_chapter is not None:
        return media.comick_match.last_chapter
    return chapters_read


def normalize_entry(raw: RawListEntry) -> OutdatedEntry | None:
    """
    Builds an OutdatedEntry, or returns None if the title is not behind.

    An empty English title or cover color counts as missing, so the romaji
    title or the default color is used instead.
    """
    media = raw.media
    if media is None:
        return None

    title = media.title
    cover = media.cover_image
    chapters_read = raw.progress if raw.progress is not None else 0

    total_chapters = resolve_total_chapters(media, chapters_read)
    if total_chapters is None or total_chapters <= chapters_read:
        return None

    return OutdatedEntry(
        title=(title and (title.english or title.romaji)) or NO_TITLE,
        image_url=(cover and cover.large) or "",
        color=(cover and cover.color) or DEFAULT_COLOR,
        chapters_read=chapters_read,
        total_chapters=total_chapters,
        chapters_left=total_chapters - chapters_read,
    )


def derive(raw_entries: list[RawListEntry]) -> list[OutdatedEntry]:
    """
    Normalizes, filters and sorts raw entries.

    The result is ordered by chapters left, ascending; entries with equal
    counts keep their input order.
    """
    result = [
        entry
        for entry in (normalize_entry(raw) for raw in raw_entries)
        if entry is not None
    ]
    result.sort(key=lambda entry: entry.chapters_left)

    log.debug(f"Sorted result: {[e.model_dump(by_alias=True) for e in result]}")
    return result
