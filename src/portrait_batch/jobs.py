"""Job construction for the four output variants.

Each source video produces four independent jobs:
- three 9:16 crops (left, middle, right) spanning the full input height
- one 90 degree counter-clockwise rotation of the full frame

Crop rectangles are expressed in FFmpeg's filter expression language so
that FFmpeg resolves them against the real input size. The crop filter
truncates the evaluated offsets, so a 1920x1080 middle crop starts at x=656.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from portrait_batch.config import EncodingSettings

# Portrait width for a full-height 9:16 slice
CROP_WIDTH_EXPR = "floor(ih*9/16)"


class Variant(str, Enum):
    """Output variants, in execution order."""

    LEFT_CROP = "left_crop"
    MID_CROP = "mid_crop"
    RIGHT_CROP = "right_crop"
    ROTATE_LEFT = "rotate_left"

    @property
    def suffix(self) -> str:
        """Suffix appended to the base name of the output file."""
        return _SUFFIXES[self]

    @property
    def video_filter(self) -> str:
        """FFmpeg ``-vf`` expression for this variant."""
        return _FILTERS[self]

    @property
    def is_crop(self) -> bool:
        return self is not Variant.ROTATE_LEFT


_SUFFIXES = {
    Variant.LEFT_CROP: "left_9x16",
    Variant.MID_CROP: "mid_9x16",
    Variant.RIGHT_CROP: "right_9x16",
    Variant.ROTATE_LEFT: "rotated_left_90",
}

_FILTERS = {
    Variant.LEFT_CROP: f"crop={CROP_WIDTH_EXPR}:ih:0:0",
    Variant.MID_CROP: f"crop={CROP_WIDTH_EXPR}:ih:(iw-{CROP_WIDTH_EXPR})/2:0",
    Variant.RIGHT_CROP: f"crop={CROP_WIDTH_EXPR}:ih:(iw-{CROP_WIDTH_EXPR}):0",
    # transpose=2 is "90 degrees counter-clockwise, no flip"
    Variant.ROTATE_LEFT: "transpose=2",
}


@dataclass(frozen=True)
class Job:
    """One FFmpeg invocation producing one output file.

    Attributes:
        variant: Which output this job produces
        source: Source video
        output_path: File the job writes
    """

    variant: Variant
    source: Path
    output_path: Path


def output_path_for(
    base_name: str,
    variant: Variant,
    portrait_root: Path,
    rotate_root: Path,
    container: str = "mp4",
) -> Path:
    """Build ``{root}/{base_name}_{suffix}.{container}`` for a variant."""
    root = portrait_root if variant.is_crop else rotate_root
    return root / f"{base_name}_{variant.suffix}.{container}"


def build_jobs(
    source: Path,
    base_name: str,
    portrait_root: Path,
    rotate_root: Path,
    encoding: EncodingSettings | None = None,
) -> list[Job]:
    """Build the four jobs for a source video, crops first.

    Args:
        source: Source video
        base_name: Stem used for every output name
        portrait_root: Directory for the crop outputs
        rotate_root: Directory for the rotated output
        encoding: Encoder settings (only the container is used here)

    Returns:
        Jobs in execution order
    """
    container = (encoding or EncodingSettings()).container
    return [
        Job(
            variant=variant,
            source=source,
            output_path=output_path_for(
                base_name, variant, portrait_root, rotate_root, container
            ),
        )
        for variant in Variant
    ]


def build_ffmpeg_args(job: Job, encoding: EncodingSettings | None = None) -> list[str]:
    """Build FFmpeg arguments for a job.

    Args:
        job: Job to run
        encoding: Encoder settings

    Returns:
        List of FFmpeg arguments (excluding the executable)
    """
    encoding = encoding or EncodingSettings()

    args = [
        # Overwrite output without asking
        "-y",
        "-i", str(job.source),
        # First video stream; first audio stream only if there is one
        "-map", "0:v:0",
        "-map", "0:a:0?",
        "-vf", job.variant.video_filter,
        "-c:v", encoding.video_codec,
        "-preset", encoding.video_preset,
        "-crf", str(encoding.video_crf),
        "-c:a", encoding.audio_codec,
    ]

    if encoding.faststart:
        args.extend(["-movflags", "+faststart"])

    args.append(str(job.output_path))
    return args
