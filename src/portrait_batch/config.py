"""Settings for portrait-batch.

All values are fixed at process start and passed down explicitly; the
models are frozen so nothing downstream can change them mid-run.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from portrait_batch.ffmpeg_binary import FFmpegConfig

# Environment variable pointing at a specific FFmpeg executable
FFMPEG_ENV_VAR = "PORTRAIT_BATCH_FFMPEG"

PORTRAIT_DIR = "portrait_clips"
ROTATE_DIR = "rotated_left"
VIDEO_EXTENSIONS = ("mp4", "mov", "mkv")


class EncodingSettings(BaseModel):
    """Encoder settings shared by every job."""

    model_config = ConfigDict(frozen=True)

    video_codec: str = "libx264"
    video_preset: str = "faster"  # Speed/quality tradeoff
    video_crf: int = Field(default=18, ge=0, le=51)  # Lower = better
    audio_codec: str = "copy"  # Pass audio through untouched
    faststart: bool = True  # moov atom up front for progressive playback
    container: str = "mp4"


class BatchSettings(BaseModel):
    """Settings for one batch run."""

    model_config = ConfigDict(frozen=True)

    portrait_dir: str = PORTRAIT_DIR
    rotate_dir: str = ROTATE_DIR
    extensions: tuple[str, ...] = VIDEO_EXTENSIONS
    encoding: EncodingSettings = Field(default_factory=EncodingSettings)
    ffmpeg: FFmpegConfig = Field(default_factory=FFmpegConfig)

    def portrait_root(self, workdir: Path) -> Path:
        """Directory receiving the three portrait crops."""
        return workdir / self.portrait_dir

    def rotate_root(self, workdir: Path) -> Path:
        """Directory receiving the rotated copy."""
        return workdir / self.rotate_dir


def load_settings(ffmpeg_path: str | None = None) -> BatchSettings:
    """Build the settings for this process.

    Args:
        ffmpeg_path: Explicit FFmpeg executable; falls back to
            ``PORTRAIT_BATCH_FFMPEG`` from the environment

    Returns:
        Frozen BatchSettings
    """
    custom = ffmpeg_path or os.environ.get(FFMPEG_ENV_VAR) or None
    return BatchSettings(ffmpeg=FFmpegConfig(custom_ffmpeg_path=custom))
