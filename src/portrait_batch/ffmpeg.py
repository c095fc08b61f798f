"""FFmpeg invocation for portrait-batch jobs.

Runs one job as one blocking FFmpeg process and reports the outcome as a
``JobResult`` instead of raising, so a bad input never stops the batch.
"""

from __future__ import annotations

import shlex
import subprocess
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from portrait_batch.config import EncodingSettings
from portrait_batch.ffmpeg_binary import FFmpegConfig, get_ffmpeg_path, subprocess_flags
from portrait_batch.jobs import Job, Variant, build_ffmpeg_args

# Lines of FFmpeg stderr kept on failure
STDERR_TAIL_LINES = 5


class JobStatus(str, Enum):
    """Outcome of a single job."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class JobResult:
    """Result of running a single job.

    Attributes:
        variant: Variant the job produced
        source: Source video
        output_path: File the job was asked to write
        command: Full command line, executable first
        status: Outcome
        returncode: FFmpeg exit status, None if it never started
        error_message: Tail of FFmpeg's stderr or the spawn error
    """

    variant: Variant
    source: Path
    output_path: Path
    command: list[str] = field(default_factory=list)
    status: JobStatus = JobStatus.SUCCEEDED
    returncode: int | None = 0
    error_message: str = ""

    @property
    def succeeded(self) -> bool:
        return self.status == JobStatus.SUCCEEDED

    @property
    def command_line(self) -> str:
        """Command as a copy-pasteable shell string."""
        return shlex.join(self.command)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "variant": self.variant.value,
            "source": str(self.source),
            "output_path": str(self.output_path),
            "command": self.command,
            "status": self.status.value,
            "returncode": self.returncode,
            "error_message": self.error_message,
        }


def _stderr_tail(stderr: str | None) -> str:
    if not stderr:
        return ""
    lines = [line for line in stderr.strip().splitlines() if line.strip()]
    return "\n".join(lines[-STDERR_TAIL_LINES:])


class FFmpegRunner:
    """Runs jobs through an FFmpeg executable.

    Example usage:
        runner = FFmpegRunner()
        result = runner.run_job(job)
        if not result.succeeded:
            print(result.returncode, result.command_line)
    """

    def __init__(
        self,
        ffmpeg_path: str | None = None,
        config: FFmpegConfig | None = None,
        encoding: EncodingSettings | None = None,
    ) -> None:
        """Initialize the runner.

        Args:
            ffmpeg_path: FFmpeg executable; located automatically if None.
                A bare ``ffmpeg`` is used when nothing can be located, so
                each job reports the failure instead of aborting the run.
            config: FFmpeg binary configuration used for the lookup
            encoding: Encoder settings for every job
        """
        self.ffmpeg_path = ffmpeg_path or get_ffmpeg_path(config) or "ffmpeg"
        self.encoding = encoding or EncodingSettings()

    def build_command(self, job: Job) -> list[str]:
        """Full command line for a job, executable first."""
        return [self.ffmpeg_path] + build_ffmpeg_args(job, self.encoding)

    def run_job(self, job: Job) -> JobResult:
        """Run a job and wait for FFmpeg to exit.

        Args:
            job: Job to run

        Returns:
            JobResult describing the outcome
        """
        cmd = self.build_command(job)
        result = JobResult(
            variant=job.variant,
            source=job.source,
            output_path=job.output_path,
            command=cmd,
        )

        try:
            completed = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                errors="replace",
                creationflags=subprocess_flags(),
            )
        except OSError as e:
            result.status = JobStatus.FAILED
            result.returncode = None
            result.error_message = f"Failed to run FFmpeg: {e}"
            return result

        result.returncode = completed.returncode
        if completed.returncode != 0:
            result.status = JobStatus.FAILED
            result.error_message = _stderr_tail(completed.stderr) or "Unknown error"

        return result
