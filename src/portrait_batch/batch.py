"""Batch processing orchestration.

Handles a single pass over the working directory with:
- Output directories prepared before any job runs
- Sequential execution, one FFmpeg process at a time
- Failure handling that doesn't stop the batch
- Summary report generation
"""

from __future__ import annotations

import shlex
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable

from portrait_batch.config import BatchSettings
from portrait_batch.directories import prepare_output_dirs
from portrait_batch.discovery import iter_video_files
from portrait_batch.errors import PortraitBatchError
from portrait_batch.ffmpeg import FFmpegRunner, JobResult
from portrait_batch.jobs import build_jobs
from portrait_batch.logging import (
    get_logger,
    log_operation_complete,
    log_operation_failed,
    log_operation_start,
)
from portrait_batch.naming import base_name_for

logger = get_logger(__name__)


@dataclass
class FileResult:
    """Result of processing a single source video.

    Attributes:
        source: Path to the source video
        base_name: Stem used for the outputs (empty if skipped)
        jobs: Results of the jobs that ran
        skipped: Whether the file was skipped before any job ran
        skip_reason: Why the file was skipped
    """

    source: Path
    base_name: str = ""
    jobs: list[JobResult] = field(default_factory=list)
    skipped: bool = False
    skip_reason: str = ""

    @property
    def failed_jobs(self) -> list[JobResult]:
        return [j for j in self.jobs if not j.succeeded]

    @property
    def succeeded(self) -> bool:
        """True if the file was processed and every job succeeded."""
        return not self.skipped and not self.failed_jobs

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "source": str(self.source),
            "base_name": self.base_name,
            "skipped": self.skipped,
            "skip_reason": self.skip_reason,
            "jobs": [j.to_dict() for j in self.jobs],
        }


@dataclass
class BatchReport:
    """Everything that happened during one batch run.

    Attributes:
        workdir: Directory that was scanned
        portrait_root: Directory holding the crops
        rotate_root: Directory holding the rotations
        files: Per-file results, in processing order
        started_at: When the run started
        completed_at: When the run finished
    """

    workdir: Path
    portrait_root: Path
    rotate_root: Path
    files: list[FileResult] = field(default_factory=list)
    started_at: str = ""
    completed_at: str = ""

    def __post_init__(self):
        if not self.started_at:
            self.started_at = datetime.now().isoformat()

    @property
    def duration(self) -> float | None:
        """Run duration in seconds."""
        if not self.started_at or not self.completed_at:
            return None
        start = datetime.fromisoformat(self.started_at)
        end = datetime.fromisoformat(self.completed_at)
        return (end - start).total_seconds()

    @property
    def files_processed(self) -> int:
        return sum(1 for f in self.files if not f.skipped)

    @property
    def files_skipped(self) -> int:
        return sum(1 for f in self.files if f.skipped)

    @property
    def job_results(self) -> list[JobResult]:
        return [j for f in self.files for j in f.jobs]

    @property
    def jobs_succeeded(self) -> int:
        return sum(1 for j in self.job_results if j.succeeded)

    @property
    def jobs_failed(self) -> int:
        return sum(1 for j in self.job_results if not j.succeeded)

    def get_failed_jobs(self) -> list[JobResult]:
        """Get all jobs that failed, in execution order."""
        return [j for j in self.job_results if not j.succeeded]

    def get_summary(self) -> dict:
        """Get run summary statistics."""
        return {
            "workdir": str(self.workdir),
            "portrait_root": str(self.portrait_root),
            "rotate_root": str(self.rotate_root),
            "files_processed": self.files_processed,
            "files_skipped": self.files_skipped,
            "jobs_succeeded": self.jobs_succeeded,
            "jobs_failed": self.jobs_failed,
            "started_at": self.started_at,
            "completed_at": self.completed_at,
            "duration_seconds": self.duration,
        }

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "summary": self.get_summary(),
            "files": [f.to_dict() for f in self.files],
        }


class BatchProcessor:
    """Runs the four portrait/rotation jobs for every video in a directory.

    Example usage:
        processor = BatchProcessor(BatchSettings())
        report = processor.run(Path.cwd())
    """

    def __init__(
        self,
        settings: BatchSettings | None = None,
        runner: FFmpegRunner | None = None,
        failure_callback: Callable[[JobResult], None] | None = None,
    ):
        """Initialize the processor.

        Args:
            settings: Batch settings
            runner: FFmpeg runner; built from the settings if None
            failure_callback: Called with each failed JobResult as soon
                as the job finishes
        """
        self.settings = settings or BatchSettings()
        self.runner = runner or FFmpegRunner(
            config=self.settings.ffmpeg,
            encoding=self.settings.encoding,
        )
        self.failure_callback = failure_callback

    def process_file(
        self,
        source: Path,
        portrait_root: Path,
        rotate_root: Path,
    ) -> FileResult:
        """Run all jobs for one source video.

        Non-fatal errors (name derivation) skip the file; fatal ones
        propagate. Job failures are recorded and the remaining jobs still
        run.
        """
        result = FileResult(source=source)

        try:
            result.base_name = base_name_for(source)
        except PortraitBatchError as e:
            if e.fatal:
                raise
            result.skipped = True
            result.skip_reason = e.message
            logger.warning(f"Skipping {source.name}: {e.message}", extra={"source": str(source)})
            return result

        jobs = build_jobs(
            source,
            result.base_name,
            portrait_root,
            rotate_root,
            self.settings.encoding,
        )

        for job in jobs:
            logger.debug(
                f"Running {job.variant.value} for {source.name}",
                extra={"command": shlex.join(self.runner.build_command(job))},
            )
            job_result = self.runner.run_job(job)
            result.jobs.append(job_result)

            if job_result.succeeded:
                logger.info(f"Wrote {job_result.output_path}")
                continue

            # The callback already shows the failure to the user
            log = logger.debug if self.failure_callback else logger.error
            log(
                f"FFmpeg failed for {source.name} ({job.variant.value})",
                extra={
                    "returncode": job_result.returncode,
                    "command": job_result.command_line,
                },
            )
            if self.failure_callback:
                self.failure_callback(job_result)

        return result

    def run(self, workdir: Path | None = None) -> BatchReport:
        """Process every video directly inside ``workdir``.

        Args:
            workdir: Directory to scan (default: current directory)

        Returns:
            BatchReport for the run

        Raises:
            ConfigurationError: If an output path is occupied by a file
            ResourceError: If an output directory cannot be created or
                the working directory cannot be listed
        """
        workdir = workdir or Path.cwd()
        started = time.monotonic()
        log_operation_start(logger, "batch", workdir=str(workdir))

        try:
            portrait_root, rotate_root = prepare_output_dirs(self.settings, workdir)
            report = BatchReport(
                workdir=workdir,
                portrait_root=portrait_root,
                rotate_root=rotate_root,
            )
            for source in iter_video_files(workdir, self.settings.extensions):
                report.files.append(self.process_file(source, portrait_root, rotate_root))
        except Exception as e:
            log_operation_failed(logger, "batch", e, workdir=str(workdir))
            raise

        report.completed_at = datetime.now().isoformat()
        log_operation_complete(
            logger,
            "batch",
            duration=time.monotonic() - started,
            files=report.files_processed,
            failed_jobs=report.jobs_failed,
        )
        return report
