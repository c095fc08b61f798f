"""Base name derivation for output files."""

from __future__ import annotations

from pathlib import Path

from portrait_batch.errors import NameDerivationError


def derive_base_name(filename: str) -> str:
    """Strip any directory prefix and the last extension from ``filename``.

    >>> derive_base_name("clip.final.mp4")
    'clip.final'
    >>> derive_base_name("noext")
    'noext'
    >>> derive_base_name(".mp4")
    ''

    Raises:
        NameDerivationError: If the name could not be processed
    """
    try:
        base = filename.rsplit("/", 1)[-1]
        stem, dot, _ = base.rpartition(".")
        return stem if dot else base
    except MemoryError as e:
        raise NameDerivationError(
            "Out of memory while deriving base name",
            context={"source": filename},
        ) from e


def base_name_for(source: Path) -> str:
    """Derive the output base name for a source file.

    Raises:
        NameDerivationError: If no non-empty base name can be derived
    """
    base = derive_base_name(source.name)
    if not base:
        raise NameDerivationError(
            f"Cannot derive an output name from {source.name!r}",
            context={"source": str(source)},
        )
    return base
