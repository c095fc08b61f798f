"""Atomic file writes for batch reports."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path


class StorageError(Exception):
    """Raised when a report cannot be written."""

    pass


def atomic_write(path: Path, data: str, encoding: str = "utf-8") -> None:
    """Write data to a file atomically.

    Writes to a temporary file in the same directory, then renames it over
    the target, so readers never see a half-written report.

    Args:
        path: Target file path
        data: String data to write
        encoding: File encoding (default utf-8)

    Raises:
        StorageError: If the write operation fails
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    temp_path = None
    try:
        fd, temp_path = tempfile.mkstemp(
            suffix=".tmp",
            prefix=path.stem + "_",
            dir=path.parent,
        )
        with os.fdopen(fd, "w", encoding=encoding) as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())

        os.replace(temp_path, path)
        temp_path = None
    except OSError as e:
        raise StorageError(f"Failed to write {path}: {e}") from e
    finally:
        if temp_path is not None:
            try:
                os.unlink(temp_path)
            except OSError:
                pass


def atomic_write_json(path: Path, data: dict | list, indent: int = 2) -> None:
    """Write JSON data to a file atomically.

    Args:
        path: Target file path
        data: Data to serialize as JSON
        indent: JSON indentation level (default 2)
    """
    atomic_write(path, json.dumps(data, indent=indent, default=str))
