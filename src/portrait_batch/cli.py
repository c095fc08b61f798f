"""Command-line interface for portrait-batch.

Uses Typer for a modern, type-hinted CLI experience.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from portrait_batch import __version__
from portrait_batch.batch import BatchProcessor
from portrait_batch.config import load_settings
from portrait_batch.errors import PortraitBatchError, format_error_for_display
from portrait_batch.ffmpeg import JobResult
from portrait_batch.ffmpeg_binary import get_ffmpeg_info, verify_ffmpeg
from portrait_batch.logging import LogConfig, LogLevel, configure_logging
from portrait_batch.storage import StorageError, atomic_write_json

# PORTRAIT_BATCH_FFMPEG may come from a local .env
load_dotenv()

app = typer.Typer(
    name="portrait-batch",
    help="Cut 9:16 portrait crops and rotated copies of every video in a folder.",
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()
err_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"portrait-batch version {__version__}")
        raise typer.Exit()


def report_job_failure(result: JobResult) -> None:
    """Print a failed job with its exit code and full command."""
    code = "not started" if result.returncode is None else result.returncode
    err_console.print(
        f"[red]FFmpeg command failed[/red] (code {code}):",
        soft_wrap=True,
    )
    # Printed verbatim; ":v:" and ":a:" in map specs are emoji codes to rich
    err_console.print(Text(result.command_line), soft_wrap=True, emoji=False, highlight=False)
    if result.error_message:
        err_console.print(Text(result.error_message, style="dim"), soft_wrap=True, emoji=False)


def _resolve_level(verbose: bool, debug: bool, quiet: bool) -> LogLevel:
    if debug:
        return LogLevel.DEBUG
    if verbose:
        return LogLevel.VERBOSE
    if quiet:
        return LogLevel.QUIET
    return LogLevel.NORMAL


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Portrait Batch - portrait crops and rotations for a folder of videos.

    For every [bold].mp4[/bold], [bold].mov[/bold] and [bold].mkv[/bold] file,
    writes left/middle/right 9:16 crops to [bold]portrait_clips/[/bold] and a
    90 degree counter-clockwise rotation to [bold]rotated_left/[/bold].
    """
    pass


@app.command()
def run(
    directory: Annotated[
        Optional[Path],
        typer.Argument(help="Folder containing the videos (default: current directory)"),
    ] = None,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Log each written file")
    ] = False,
    debug: Annotated[
        bool, typer.Option("--debug", help="Log every FFmpeg command before it runs")
    ] = False,
    quiet: Annotated[
        bool, typer.Option("--quiet", "-q", help="Only log errors")
    ] = False,
    log_file: Annotated[
        Optional[Path], typer.Option("--log-file", help="Also write a full debug log here")
    ] = None,
    json_logs: Annotated[
        bool, typer.Option("--json-logs", help="Emit log records as JSON lines")
    ] = False,
    report: Annotated[
        Optional[Path], typer.Option("--report", "-r", help="Write a JSON batch report here")
    ] = None,
    ffmpeg: Annotated[
        Optional[Path], typer.Option("--ffmpeg", help="FFmpeg executable to use")
    ] = None,
) -> None:
    """Process every video in a folder.

    Failed FFmpeg jobs are reported and skipped; the exit code is only
    non-zero when the output folders or the input folder are unusable.
    """
    configure_logging(
        LogConfig(
            level=_resolve_level(verbose, debug, quiet),
            log_file=log_file,
            json_format=json_logs,
        )
    )

    workdir = directory or Path.cwd()
    settings = load_settings(ffmpeg_path=str(ffmpeg) if ffmpeg else None)
    processor = BatchProcessor(settings, failure_callback=report_job_failure)

    try:
        batch_report = processor.run(workdir)
    except PortraitBatchError as e:
        err_console.print(
            Text.assemble(("Error:", "red"), " ", format_error_for_display(e)),
            soft_wrap=True,
            emoji=False,
        )
        raise typer.Exit(1)

    failed = batch_report.get_failed_jobs()
    if failed:
        table = Table(title="Failed jobs")
        table.add_column("File", style="cyan")
        table.add_column("Variant", style="white")
        table.add_column("Code", justify="right", style="red")
        for result in failed:
            code = "-" if result.returncode is None else str(result.returncode)
            table.add_row(Text(result.source.name), result.variant.value, code)
        console.print(table)

    if report:
        try:
            atomic_write_json(report, batch_report.to_dict())
        except StorageError as e:
            err_console.print(
                Text.assemble(("Warning:", "yellow"), " ", str(e)), soft_wrap=True, emoji=False
            )
        else:
            console.print(Text(f"Report written to {report}", style="dim"), soft_wrap=True, emoji=False)

    console.print(
        f"{batch_report.files_processed} file(s) processed, "
        f"{batch_report.jobs_succeeded} job(s) succeeded, "
        f"{batch_report.jobs_failed} failed, "
        f"{batch_report.files_skipped} file(s) skipped.",
        highlight=False,
    )
    console.print(
        Text(
            f"Done. Results in '{batch_report.portrait_root}/' "
            f"and '{batch_report.rotate_root}/'"
        ),
        emoji=False,
        highlight=False,
        soft_wrap=True,
    )


@app.command()
def check_deps(
    ffmpeg: Annotated[
        Optional[Path], typer.Option("--ffmpeg", help="FFmpeg executable to check")
    ] = None,
) -> None:
    """Check that FFmpeg can be found and report its version."""
    settings = load_settings(ffmpeg_path=str(ffmpeg) if ffmpeg else None)
    ffmpeg_info = get_ffmpeg_info(settings.ffmpeg)
    success, message = verify_ffmpeg(settings.ffmpeg)

    if ffmpeg_info.available:
        body = (
            f"[green]FFmpeg:[/green] v{escape(ffmpeg_info.version)} ({ffmpeg_info.source})\n"
            f"  [dim]{escape(ffmpeg_info.path)}[/dim]"
        )
    else:
        body = (
            "[red]FFmpeg:[/red] Not found\n"
            "  Install FFmpeg or run: pip install imageio-ffmpeg"
        )

    console.print(Panel(f"[bold]Dependency Check[/bold]\n\n{body}", title="portrait-batch dependencies"))

    if not success:
        err_console.print(f"[yellow]Warning:[/yellow] {escape(message)}", soft_wrap=True)

    if not ffmpeg_info.available:
        raise typer.Exit(1)
