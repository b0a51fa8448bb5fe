"""Scan a directory tree of audio files for the target phrase.

Handles:
- Recursive discovery of audio files
- Parallel transcription with a bounded number of workers
- Failures that skip one file without stopping the scan
- Copying matched audio files
- Writing the CSV report
"""

from __future__ import annotations

import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable

from phrase_scan.config import AppConfig
from phrase_scan.errors import ResourceError
from phrase_scan.logging import (
    get_logger,
    log_operation_complete,
    log_operation_failed,
    log_operation_start,
)
from phrase_scan.models.hit import WordHit
from phrase_scan.report import sort_hits, write_csv_report
from phrase_scan.storage import copy_into
from phrase_scan.transcription.base import TranscriptionBackend

logger = get_logger(__name__)

AUDIO_EXTENSIONS = frozenset({".mp3", ".wav", ".m4a", ".flac", ".aac", ".ogg", ".wma"})


class FileStatus(str, Enum):
    """Outcome of scanning a single audio file."""

    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class FileResult:
    """Result of scanning a single audio file.

    Attributes:
        audio_path: The audio file
        status: Processing status
        hits: Phrase hits found in the file
        error_message: Error message if failed
        copied_to: Where the file was copied, if it had hits
        started_at: When processing started
        completed_at: When processing completed
    """

    audio_path: Path
    status: FileStatus = FileStatus.SKIPPED
    hits: list[WordHit] = field(default_factory=list)
    error_message: str = ""
    copied_to: Path | None = None
    started_at: str = ""
    completed_at: str = ""

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "audio_path": str(self.audio_path),
            "status": self.status.value,
            "hits": [h.to_dict() for h in self.hits],
            "error_message": self.error_message,
            "copied_to": str(self.copied_to) if self.copied_to else None,
            "started_at": self.started_at,
            "completed_at": self.completed_at,
        }


@dataclass
class ScanReport:
    """Summary of a complete scan.

    Attributes:
        results: One result per discovered audio file, in discovery order
        hits: All hits, sorted by source and start time
        report_path: The CSV report written for this scan
        duration: Wall-clock seconds the scan took
    """

    results: list[FileResult] = field(default_factory=list)
    hits: list[WordHit] = field(default_factory=list)
    report_path: Path | None = None
    duration: float = 0.0

    @property
    def total_files(self) -> int:
        return len(self.results)

    @property
    def completed_count(self) -> int:
        return sum(1 for r in self.results if r.status == FileStatus.COMPLETED)

    @property
    def failed_count(self) -> int:
        return sum(1 for r in self.results if r.status == FileStatus.FAILED)

    @property
    def skipped_count(self) -> int:
        return sum(1 for r in self.results if r.status == FileStatus.SKIPPED)

    @property
    def files_with_hits(self) -> int:
        return sum(1 for r in self.results if r.hits)

    def get_failed_files(self) -> list[tuple[Path, str]]:
        """Failed files with their error messages."""
        return [
            (r.audio_path, r.error_message)
            for r in self.results
            if r.status == FileStatus.FAILED
        ]

    def get_summary(self) -> dict:
        """Summary counts for display."""
        return {
            "total_files": self.total_files,
            "completed": self.completed_count,
            "failed": self.failed_count,
            "skipped": self.skipped_count,
            "files_with_hits": self.files_with_hits,
            "total_hits": len(self.hits),
            "report_path": str(self.report_path) if self.report_path else None,
            "duration_seconds": round(self.duration, 2),
        }


def discover_audio_files(root: Path) -> list[Path]:
    """Find audio files below ``root``, recursively.

    Args:
        root: Directory to scan

    Returns:
        Sorted list of audio file paths

    Raises:
        ResourceError: If ``root`` is not a directory
    """
    if not root.is_dir():
        raise ResourceError(f"Scan root is not a directory: {root}", {"path": str(root)})

    return sorted(
        path
        for path in root.rglob("*")
        if path.is_file() and path.suffix.lower() in AUDIO_EXTENSIONS
    )


class ScanRunner:
    """Transcribes every audio file under the scan root and collects hits."""

    def __init__(
        self,
        config: AppConfig,
        backend: TranscriptionBackend,
        progress_callback: Callable[[str, int, int, str], None] | None = None,
    ):
        """Initialize the runner.

        Args:
            config: Scan root, parallelism, copy and output locations
            backend: Transcribes a file and returns its hits
            progress_callback: Optional callback for progress updates
                Signature: (stage, current, total, message)
        """
        self.config = config
        self.backend = backend
        self.progress_callback = progress_callback

    def _report_progress(self, stage: str, current: int, total: int, message: str = "") -> None:
        if self.progress_callback:
            self.progress_callback(stage, current, total, message)

    def process_file(
        self,
        audio_path: Path,
        cancel_event: threading.Event | None = None,
    ) -> FileResult:
        """Transcribe and search one file.

        Errors are recorded on the result instead of being raised, so one bad
        file never stops the scan.
        """
        result = FileResult(audio_path=audio_path)

        if cancel_event is not None and cancel_event.is_set():
            logger.info(f"Skipping {audio_path}: scan cancelled")
            return result

        result.started_at = datetime.now().isoformat()

        try:
            logger.info(f"Processing file: {audio_path}")
            result.hits = self.backend.transcribe_then_find(audio_path)

            if result.hits and self.config.copy_directory:
                result.copied_to = copy_into(audio_path, self.config.copy_directory)

            result.status = FileStatus.COMPLETED
            logger.info(f"Found {len(result.hits)} hits in file: {audio_path}")

        except Exception as e:
            result.status = FileStatus.FAILED
            result.error_message = f"{type(e).__name__}: {e}"
            log_operation_failed(logger, f"transcribe {audio_path.name}", e, audio=str(audio_path))
            logger.debug(f"Traceback for {audio_path}", exc_info=True)

        finally:
            result.completed_at = datetime.now().isoformat()

        return result

    def process_sequential(
        self,
        audio_files: list[Path],
        cancel_event: threading.Event | None = None,
    ) -> list[FileResult]:
        """Process files one after another."""
        results = []
        total = len(audio_files)

        for i, audio_path in enumerate(audio_files):
            results.append(self.process_file(audio_path, cancel_event))
            self._report_progress(
                "processing",
                i + 1,
                total,
                f"{results[-1].status.value}: {audio_path.name}",
            )

        return results

    def process_parallel(
        self,
        audio_files: list[Path],
        cancel_event: threading.Event | None = None,
    ) -> list[FileResult]:
        """Process files on a thread pool bounded by ``max_parallel``.

        Each task returns its own result; results are put back in discovery
        order afterwards.
        """
        total = len(audio_files)
        completed = 0
        by_path: dict[Path, FileResult] = {}

        with ThreadPoolExecutor(max_workers=self.config.max_parallel) as executor:
            futures = {
                executor.submit(self.process_file, path, cancel_event): path
                for path in audio_files
            }

            try:
                for future in as_completed(futures):
                    audio_path = futures[future]
                    completed += 1
                    result = future.result()
                    by_path[audio_path] = result

                    self._report_progress(
                        "processing",
                        completed,
                        total,
                        f"{result.status.value}: {audio_path.name}",
                    )
            except KeyboardInterrupt:
                # Let running files finish; drop the ones not yet started
                if cancel_event is not None:
                    cancel_event.set()
                executor.shutdown(wait=False, cancel_futures=True)
                raise

        return [by_path[path] for path in audio_files]

    def run(self, cancel_event: threading.Event | None = None) -> ScanReport:
        """Scan all audio files and write the CSV report.

        Args:
            cancel_event: When set, files not yet started are skipped

        Returns:
            ScanReport with per-file results, sorted hits and the report path

        Raises:
            ResourceError: If the scan root does not exist
        """
        started = time.monotonic()
        audio_files = discover_audio_files(self.config.scan_root)

        log_operation_start(logger, "scan", root=str(self.config.scan_root), files=len(audio_files))
        self._report_progress("start", 0, len(audio_files), f"Scanning {len(audio_files)} files")

        if self.config.max_parallel > 1 and len(audio_files) > 1:
            results = self.process_parallel(audio_files, cancel_event)
        else:
            results = self.process_sequential(audio_files, cancel_event)

        hits = sort_hits(hit for result in results for hit in result.hits)
        report_path = write_csv_report(hits, self.config.output_dir)

        report = ScanReport(
            results=results,
            hits=hits,
            report_path=report_path,
            duration=time.monotonic() - started,
        )

        log_operation_complete(
            logger,
            "scan",
            duration=report.duration,
            hits=len(hits),
            failed=report.failed_count,
        )
        self._report_progress(
            "complete",
            report.completed_count,
            report.total_files,
            f"Scan complete: {len(hits)} hits in {report.files_with_hits} files",
        )

        return report
