"""Discovery of source videos in the working directory."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Iterator

from portrait_batch.config import VIDEO_EXTENSIONS
from portrait_batch.errors import ResourceError
from portrait_batch.logging import get_logger

logger = get_logger(__name__)


def has_extension(name: str, extension: str) -> bool:
    """Check whether ``name`` ends in ``.extension`` (case-insensitive).

    At least one character must precede the dot, so ``.mp4`` alone
    does not count.
    """
    suffix = "." + extension.lower()
    return len(name) > len(suffix) and name.lower().endswith(suffix)


def is_video_file(
    name: str,
    is_dir: bool = False,
    extensions: Iterable[str] = VIDEO_EXTENSIONS,
) -> bool:
    """Decide whether a directory entry is a source video.

    Args:
        name: Entry name
        is_dir: Whether the entry is a directory
        extensions: Accepted extensions, without the dot

    Returns:
        True if the entry is a regular file with an accepted extension
    """
    if is_dir:
        return False
    return any(has_extension(name, ext) for ext in extensions)


def iter_video_files(
    directory: Path,
    extensions: Iterable[str] = VIDEO_EXTENSIONS,
) -> Iterator[Path]:
    """Yield source videos directly inside ``directory``.

    Subdirectories are never entered. Entries are yielded sorted by
    name so repeated runs process files in the same order.

    Args:
        directory: Directory to scan
        extensions: Accepted extensions, without the dot

    Yields:
        Path of each accepted file

    Raises:
        ResourceError: If the directory cannot be listed
    """
    extensions = tuple(extensions)

    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda entry: entry.name)
    except OSError as e:
        raise ResourceError(
            f"Cannot open working directory {directory}: {e.strerror or e}",
            context={"path": str(directory)},
        ) from e

    for entry in entries:
        try:
            is_dir = entry.is_dir()
        except OSError as e:
            # Entry vanished or is unreadable; treat it like a directory
            logger.debug(f"Skipping unreadable entry {entry.name}: {e}", extra={"path": entry.path})
            is_dir = True
        if is_video_file(entry.name, is_dir=is_dir, extensions=extensions):
            yield Path(entry.path)
