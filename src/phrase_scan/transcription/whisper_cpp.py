"""whisper.cpp transcription backend.

Runs the whisper.cpp command-line tool once per audio file and searches the
JSON transcript it writes next to the audio (or into a configured output
directory). Existing transcripts can be reused to skip re-transcribing.
"""

from __future__ import annotations

import platform
import shlex
import shutil
import subprocess
from pathlib import Path

from phrase_scan.config import WhisperConfig
from phrase_scan.errors import wrap_transcription_error
from phrase_scan.logging import get_logger
from phrase_scan.models.hit import WordHit
from phrase_scan.parsing import TranscriptParser
from phrase_scan.transcription.base import TranscriptionBackend

logger = get_logger(__name__)


class WhisperCppBackend(TranscriptionBackend):
    """Transcribes with the whisper.cpp CLI (``whisper-cli``)."""

    def __init__(self, config: WhisperConfig, parser: TranscriptParser):
        """Initialize the backend.

        Args:
            config: How to invoke whisper.cpp
            parser: Searches the transcripts whisper.cpp writes
        """
        self.config = config
        self.parser = parser

    @property
    def name(self) -> str:
        return "whisper_cpp"

    def is_available(self) -> bool:
        """Check that the whisper.cpp executable can be found."""
        executable = self.config.executable_path
        return shutil.which(executable) is not None or Path(executable).is_file()

    def output_base(self, audio_path: Path) -> Path:
        """Path whisper.cpp writes to, without extension (``-of``)."""
        parent = self.config.output_directory or audio_path.parent
        return parent / audio_path.stem

    def transcript_path(self, audio_path: Path) -> Path:
        """Path of the JSON transcript for an audio file."""
        base = self.output_base(audio_path)
        return base.with_name(base.name + ".json")

    def build_command(self, audio_path: Path) -> list[str]:
        """Command line for transcribing one file."""
        return [
            self.config.executable_path,
            "-m",
            self.config.model_path,
            "-f",
            str(audio_path),
            *shlex.split(self.config.args),
            *shlex.split(self.config.extra_output_args),
            "-of",
            str(self.output_base(audio_path)),
        ]

    def _get_subprocess_flags(self) -> int:
        if platform.system() == "Windows":
            return subprocess.CREATE_NO_WINDOW
        return 0

    def _run_whisper(self, audio_path: Path) -> subprocess.CompletedProcess:
        """Run whisper.cpp on one file.

        Raises:
            TranscriptionError: If the executable is missing or times out
        """
        cmd = self.build_command(audio_path)
        logger.debug(f"Running: {shlex.join(cmd)}")

        try:
            return subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.config.timeout_seconds,
                creationflags=self._get_subprocess_flags(),
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            raise wrap_transcription_error(e, str(audio_path), self.config.executable_path) from e

    def transcribe_then_find(self, audio_path: Path) -> list[WordHit]:
        """Transcribe an audio file (unless a transcript exists) and search it.

        Args:
            audio_path: Audio file to transcribe

        Returns:
            Hits found in the transcript

        Raises:
            TranscriptionError: If whisper.cpp could not be run
        """
        json_path = self.transcript_path(audio_path)

        if self.config.skip_if_transcript_exists and json_path.exists():
            logger.debug(f"Reusing transcript {json_path}")
        else:
            json_path.parent.mkdir(parents=True, exist_ok=True)
            result = self._run_whisper(audio_path)

            if not json_path.exists():
                logger.warning(
                    f"No transcript was created for {audio_path}. Expected: {json_path}",
                    extra={"returncode": result.returncode, "stderr": result.stderr.strip()},
                )
                return []

        return self.parser.parse_file(json_path, str(audio_path))
