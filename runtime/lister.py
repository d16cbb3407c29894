"""Directory enumeration and ordering."""

from __future__ import annotations

import asyncio
import logging
import os
from datetime import datetime, timezone
from typing import Callable, Dict, List, Sequence

from models.listing import DirectoryEntry, ListingView, OrderDirection, OrderKey
from runtime.errors import ListingError

logger = logging.getLogger(__name__)


_SORT_KEYS: Dict[OrderKey, Callable[[DirectoryEntry], object]] = {
    OrderKey.NAME: lambda entry: entry.name,
    OrderKey.DATE: lambda entry: entry.modified_at,
    OrderKey.SIZE: lambda entry: entry.size,
}


def _as_entry(entry: os.DirEntry[str]) -> DirectoryEntry:
    stat = entry.stat(follow_symlinks=False)
    return DirectoryEntry(
        name=entry.name,
        is_dir=entry.is_dir(follow_symlinks=False),
        size=stat.st_size,
        modified_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
    )


def scan_directory(path: str) -> List[DirectoryEntry]:
    """Snapshot the entries of ``path`` in enumeration order."""
    entries: List[DirectoryEntry] = []
    try:
        with os.scandir(path) as it:
            for entry in it:
                try:
                    entries.append(_as_entry(entry))
                except FileNotFoundError:
                    # removed between readdir and stat
                    logger.debug("Entry %s vanished while listing %s", entry.name, path)
    except (OSError, ValueError) as exc:
        # ValueError: embedded null byte
        raise ListingError(path, exc) from exc
    return entries


def sort_entries(
    entries: Sequence[DirectoryEntry],
    key: OrderKey = OrderKey.NAME,
    direction: OrderDirection = OrderDirection.ASC,
) -> List[DirectoryEntry]:
    """Stable sort; equal keys keep their enumeration order in both directions."""
    return sorted(
        entries,
        key=_SORT_KEYS.get(key, _SORT_KEYS[OrderKey.NAME]),
        reverse=direction is OrderDirection.DESC,
    )


def list_directory(
    path: str,
    key: OrderKey = OrderKey.NAME,
    direction: OrderDirection = OrderDirection.ASC,
) -> ListingView:
    entries = sort_entries(scan_directory(path), key, direction)
    return ListingView(
        current_path=path,
        order_key=key,
        order_direction=direction,
        entries=entries,
    )


async def list_directory_async(
    path: str,
    key: OrderKey = OrderKey.NAME,
    direction: OrderDirection = OrderDirection.ASC,
) -> ListingView:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, list_directory, path, key, direction)
