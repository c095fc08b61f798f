"""FFmpeg binary discovery for portrait-batch.

Looks for an FFmpeg executable in, by default:
1. An explicitly configured path
2. The system PATH
3. The binary bundled with imageio-ffmpeg
"""

from __future__ import annotations

import platform
import shutil
import subprocess
from pathlib import Path
from typing import NamedTuple

import imageio_ffmpeg
from pydantic import BaseModel, ConfigDict, Field

from portrait_batch.logging import get_logger

logger = get_logger(__name__)


class FFmpegInfo(NamedTuple):
    """Information about FFmpeg installation."""

    path: str
    version: str
    available: bool
    source: str  # "custom", "system", "imageio", or "not_found"


class FFmpegConfig(BaseModel):
    """Configuration for FFmpeg binary location."""

    model_config = ConfigDict(frozen=True)

    custom_ffmpeg_path: str | None = Field(
        default=None,
        description="Custom path to FFmpeg executable",
    )
    prefer_system: bool = Field(
        default=True,
        description="Prefer FFmpeg from PATH over the imageio-ffmpeg bundle",
    )


def subprocess_flags() -> int:
    """Get platform-specific subprocess creation flags."""
    if platform.system() == "Windows":
        return subprocess.CREATE_NO_WINDOW
    return 0


def _get_ffmpeg_from_imageio() -> str | None:
    try:
        return imageio_ffmpeg.get_ffmpeg_exe()
    except RuntimeError:
        # Raised when the platform wheel carries no binary
        return None


def _get_system_ffmpeg() -> str | None:
    return shutil.which("ffmpeg")


def _get_ffmpeg_version(ffmpeg_path: str) -> str | None:
    """Get version string from FFmpeg executable.

    Args:
        ffmpeg_path: Path to FFmpeg executable.

    Returns:
        Version string, or None if unable to determine.
    """
    try:
        result = subprocess.run(
            [ffmpeg_path, "-version"],
            capture_output=True,
            text=True,
            timeout=10,
            creationflags=subprocess_flags(),
        )
    except (subprocess.TimeoutExpired, OSError):
        return None

    if result.returncode != 0:
        return None

    # e.g. "ffmpeg version 6.1.1-3ubuntu5 Copyright (c) ..."
    first_line = result.stdout.split("\n")[0]
    if "version" in first_line.lower():
        parts = first_line.split("version")
        if len(parts) > 1 and parts[1].strip():
            return parts[1].strip().split()[0]
    return first_line.strip() or None


def _locate(config: FFmpegConfig) -> tuple[str | None, str]:
    if config.custom_ffmpeg_path:
        if Path(config.custom_ffmpeg_path).exists():
            return config.custom_ffmpeg_path, "custom"
        logger.warning(
            f"Configured FFmpeg not found, searching elsewhere: {config.custom_ffmpeg_path}",
            extra={"path": config.custom_ffmpeg_path},
        )

    if config.prefer_system:
        lookups = ((_get_system_ffmpeg, "system"), (_get_ffmpeg_from_imageio, "imageio"))
    else:
        lookups = ((_get_ffmpeg_from_imageio, "imageio"), (_get_system_ffmpeg, "system"))

    for lookup, source in lookups:
        path = lookup()
        if path:
            return path, source

    return None, "not_found"


def get_ffmpeg_path(config: FFmpegConfig | None = None) -> str | None:
    """Get the path to FFmpeg executable.

    Args:
        config: Optional configuration for custom paths.

    Returns:
        Path to FFmpeg executable, or None if not found.
    """
    path, _ = _locate(config or FFmpegConfig())
    return path


def get_ffmpeg_info(config: FFmpegConfig | None = None) -> FFmpegInfo:
    """Get information about the FFmpeg installation that will be used.

    Args:
        config: Optional configuration for custom paths.

    Returns:
        FFmpegInfo with path, version, availability, and source.
    """
    path, source = _locate(config or FFmpegConfig())

    if path is None:
        return FFmpegInfo(path="", version="", available=False, source="not_found")

    version = _get_ffmpeg_version(path) or "unknown"
    return FFmpegInfo(path=path, version=version, available=True, source=source)


def verify_ffmpeg(config: FFmpegConfig | None = None) -> tuple[bool, str]:
    """Verify FFmpeg is available and working.

    Args:
        config: Optional configuration for custom paths.

    Returns:
        Tuple of (success, message).
    """
    info = get_ffmpeg_info(config)

    if not info.available:
        return (False, "FFmpeg not found. Add FFmpeg to PATH or install imageio-ffmpeg.")

    if info.version == "unknown":
        return (False, f"FFmpeg found at {info.path} but '-version' did not succeed")

    return (True, f"FFmpeg {info.version} available ({info.source}): {info.path}")
