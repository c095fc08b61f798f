"""Output directory preparation."""

from __future__ import annotations

from pathlib import Path

from portrait_batch.config import BatchSettings
from portrait_batch.errors import ConfigurationError, ResourceError
from portrait_batch.logging import get_logger

logger = get_logger(__name__)


def ensure_output_dir(path: Path) -> Path:
    """Make sure ``path`` is a directory, creating it if needed.

    Only the last path component is created. Safe to call repeatedly and
    tolerant of another process creating the directory first.

    Args:
        path: Directory to prepare

    Returns:
        The prepared path

    Raises:
        ConfigurationError: If the path exists but is not a directory
        ResourceError: If the directory could not be created
    """
    if path.is_dir():
        logger.debug(f"Output directory already present: {path}")
        return path

    if path.exists():
        raise ConfigurationError(
            f"Path exists but is not a directory: {path}",
            context={"path": str(path)},
        )

    try:
        path.mkdir()
    except FileExistsError:
        # Lost a race; fine as long as the winner made a directory
        if not path.is_dir():
            raise ConfigurationError(
                f"Path exists but is not a directory: {path}",
                context={"path": str(path)},
            )
    except OSError as e:
        raise ResourceError(
            f"Could not create output directory {path}: {e.strerror or e}",
            context={"path": str(path)},
        ) from e
    else:
        logger.info(f"Created output directory: {path}")

    return path


def prepare_output_dirs(settings: BatchSettings, workdir: Path) -> tuple[Path, Path]:
    """Prepare the portrait and rotation output roots.

    Returns:
        Tuple of (portrait_root, rotate_root)
    """
    portrait_root = ensure_output_dir(settings.portrait_root(workdir))
    rotate_root = ensure_output_dir(settings.rotate_root(workdir))
    return portrait_root, rotate_root
