"""Command-line interface for phrase-scan.

Uses Typer for a modern, type-hinted CLI experience.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Annotated, Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from phrase_scan import __version__
from phrase_scan.config import MatchConfig, Settings, load_settings
from phrase_scan.errors import ConfigurationError, PhraseScanError, format_error_for_display
from phrase_scan.logging import LogContext, LogLevel, enable_file_logging, set_verbosity
from phrase_scan.models.hit import WordHit
from phrase_scan.parsing import TranscriptParser
from phrase_scan.runner import ScanReport, ScanRunner
from phrase_scan.storage import StorageError
from phrase_scan.transcription import WhisperCppBackend

app = typer.Typer(
    name="phrase-scan",
    help="Find a spoken phrase in audio recordings, tolerating transcription noise.",
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()


def _load_env_files() -> None:
    # Local .env overrides the user-level one
    user_env = Path.home() / ".phrase-scan" / ".env"
    if user_env.exists():
        load_dotenv(user_env)
    load_dotenv(override=True)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"phrase-scan version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option("--version", callback=version_callback, is_eager=True, help="Show version and exit."),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show per-file progress.")] = False,
    debug: Annotated[bool, typer.Option("--debug", help="Show debug logging.")] = False,
    quiet: Annotated[bool, typer.Option("--quiet", "-q", help="Only show errors.")] = False,
    log_file: Annotated[
        Optional[Path], typer.Option("--log-file", help="Also write all log records to this file.")
    ] = None,
) -> None:
    """phrase-scan: fuzzy phrase search over speech transcripts."""
    _load_env_files()

    if debug:
        set_verbosity(LogLevel.DEBUG)
    elif verbose:
        set_verbosity(LogLevel.VERBOSE)
    elif quiet:
        set_verbosity(LogLevel.QUIET)
    else:
        set_verbosity(LogLevel.NORMAL)

    if log_file:
        enable_file_logging(log_file)


def _print_error(error: Exception) -> None:
    console.print(f"[red]Error:[/red] {escape(format_error_for_display(error))}")


def _apply_overrides(
    settings: Settings,
    root: Path | None,
    phrase: str | None,
    output: Path | None,
    max_parallel: int | None,
    copy_to: Path | None,
    max_distance: int | None,
    window_size: int | None,
    substring: bool | None,
) -> Settings:
    app_updates = {
        key: value
        for key, value in {
            "scan_root": root,
            "search_phrase": phrase,
            "output_dir": output,
            "max_parallel": max_parallel,
            "copy_directory": copy_to,
        }.items()
        if value is not None
    }
    match_updates = {
        key: value
        for key, value in {
            "max_token_distance": max_distance,
            "window_size": window_size,
            "allow_substring": substring,
        }.items()
        if value is not None
    }

    # Round-trip through validation so overrides get the same checks as the file
    data = settings.model_dump(by_alias=True)
    data["App"].update(app_updates)
    data["Match"].update(match_updates)
    try:
        return Settings.model_validate(data)
    except ValueError as e:
        raise ConfigurationError(f"Invalid option: {e}") from e


def _hits_table(hits: list[WordHit], title: str) -> Table:
    table = Table(title=title)
    table.add_column("Source", style="cyan")
    table.add_column("Start", justify="right")
    table.add_column("End", justify="right")
    table.add_column("Context")

    for hit in hits:
        table.add_row(escape(hit.source), f"{hit.start:.3f}", f"{hit.end:.3f}", escape(hit.context))

    return table


def _summary_table(report: ScanReport) -> Table:
    table = Table(title="Scan Summary", show_header=False)
    table.add_column("Metric", style="bold")
    table.add_column("Value")

    summary = report.get_summary()
    table.add_row("Files scanned", str(summary["total_files"]))
    table.add_row("Completed", f"[green]{summary['completed']}[/green]")
    table.add_row("Failed", f"[red]{summary['failed']}[/red]" if summary["failed"] else "0")
    table.add_row("Skipped", str(summary["skipped"]))
    table.add_row("Files with hits", str(summary["files_with_hits"]))
    table.add_row("Total hits", str(summary["total_hits"]))
    table.add_row("Report", summary["report_path"] or "-")
    table.add_row("Duration", f"{summary['duration_seconds']}s")
    return table


@app.command()
def scan(
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Config file (default: $PHRASE_SCAN_CONFIG or config.json)."),
    ] = None,
    environment: Annotated[
        Optional[str], typer.Option("--env", help="Config overlay name (default: $PHRASE_SCAN_ENV).")
    ] = None,
    root: Annotated[Optional[Path], typer.Option("--root", help="Directory to scan for audio.")] = None,
    phrase: Annotated[Optional[str], typer.Option("--phrase", "-p", help="Phrase to search for.")] = None,
    output: Annotated[Optional[Path], typer.Option("--output", "-o", help="Directory for the CSV report.")] = None,
    max_parallel: Annotated[
        Optional[int], typer.Option("--max-parallel", "-j", help="Files transcribed at once.")
    ] = None,
    copy_to: Annotated[
        Optional[Path], typer.Option("--copy-to", help="Copy audio files with hits here.")
    ] = None,
    max_distance: Annotated[
        Optional[int], typer.Option("--max-distance", help="Edit distance allowed per word.")
    ] = None,
    window_size: Annotated[
        Optional[int], typer.Option("--window-size", help="Segments joined per search window.")
    ] = None,
    substring: Annotated[
        Optional[bool],
        typer.Option("--substring/--no-substring", help="Accept literal substring matches."),
    ] = None,
) -> None:
    """Transcribe every audio file under the scan root and report phrase hits."""
    try:
        settings = load_settings(config_path, environment)
        settings = _apply_overrides(
            settings,
            root=root,
            phrase=phrase,
            output=output,
            max_parallel=max_parallel,
            copy_to=copy_to,
            max_distance=max_distance,
            window_size=window_size,
            substring=substring,
        )
        match_config = settings.match_config()
    except ConfigurationError as e:
        _print_error(e)
        raise typer.Exit(1)

    parser = TranscriptParser(match_config)
    backend = WhisperCppBackend(settings.whisper, parser)
    if not backend.is_available():
        console.print(
            f"[yellow]Warning:[/yellow] whisper.cpp executable '{settings.whisper.executable_path}' "
            "was not found; only existing transcripts will be searched."
        )

    runner = ScanRunner(settings.app, backend)
    cancel_event = threading.Event()

    console.print(
        f"Searching [bold]{settings.app.scan_root}[/bold] for "
        f"\"[cyan]{match_config.normalized_phrase}[/cyan]\""
    )

    try:
        with LogContext(phrase=match_config.normalized_phrase):
            report = runner.run(cancel_event)
    except KeyboardInterrupt:
        cancel_event.set()
        console.print("[yellow]Scan interrupted.[/yellow]")
        raise typer.Exit(130)
    except (PhraseScanError, StorageError) as e:
        _print_error(e)
        raise typer.Exit(1)

    if report.hits:
        console.print(_hits_table(report.hits, f"Hits for \"{match_config.normalized_phrase}\""))
    console.print(_summary_table(report))

    for audio_path, message in report.get_failed_files():
        console.print(f"[red]Failed:[/red] {escape(str(audio_path))}: {escape(message)}")


@app.command()
def find(
    transcripts: Annotated[list[Path], typer.Argument(help="Transcript JSON files to search.")],
    phrase: Annotated[str, typer.Option("--phrase", "-p", help="Phrase to search for.")],
    max_distance: Annotated[int, typer.Option("--max-distance", help="Edit distance allowed per word.")] = 1,
    window_size: Annotated[int, typer.Option("--window-size", help="Segments joined per search window.")] = 4,
    substring: Annotated[
        bool, typer.Option("--substring/--no-substring", help="Accept literal substring matches.")
    ] = True,
) -> None:
    """Search existing transcript files without running whisper.cpp."""
    try:
        match_config = MatchConfig(
            target_phrase=phrase,
            max_token_distance=max_distance,
            window_size=window_size,
            allow_substring=substring,
        )
    except ValueError as e:
        _print_error(ConfigurationError(f"Invalid option: {e}"))
        raise typer.Exit(1)

    parser = TranscriptParser(match_config)
    hits: list[WordHit] = []

    for path in transcripts:
        if not path.is_file():
            console.print(f"[yellow]Warning:[/yellow] Not a file: {path}")
            continue
        hits.extend(parser.parse_file(path, str(path)))

    if not hits:
        console.print(f"No hits for \"{match_config.normalized_phrase}\".")
        return

    console.print(_hits_table(hits, f"Hits for \"{match_config.normalized_phrase}\""))


if __name__ == "__main__":
    app()
