"""Tests for the phrase-scan command line."""

import json
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from phrase_scan import __version__
from phrase_scan.cli import app
from phrase_scan.storage import StorageError

runner = CliRunner()

TRANSCRIPT = json.dumps(
    {
        "transcription": [
            {"timestamps": {"from": "00:00:00,000", "to": "00:00:01,000"}, "text": " Well,"},
            {"timestamps": {"from": "00:00:01,000", "to": "00:00:02,000"}, "text": " hello"},
            {"timestamps": {"from": "00:00:02,000", "to": "00:00:03,000"}, "text": " world."},
        ]
    }
)


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Run commands from an empty temporary directory."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("PHRASE_SCAN_CONFIG", raising=False)
    monkeypatch.delenv("PHRASE_SCAN_ENV", raising=False)
    return tmp_path


@pytest.fixture
def scan_setup(workdir):
    """Audio tree with existing transcripts and a config file."""
    audio = workdir / "audio"
    audio.mkdir()
    (audio / "talk.wav").write_bytes(b"RIFF")
    (audio / "talk.json").write_text(TRANSCRIPT, encoding="utf-8")
    (audio / "other.mp3").write_bytes(b"ID3")
    (audio / "other.json").write_text('{"transcription": []}', encoding="utf-8")

    config = {
        "App": {
            "scan_root": "audio",
            "search_phrase": "hello world",
            "output_dir": "reports",
            "max_parallel": 1,
        },
        "Whisper": {"executable_path": "no-such-whisper-cli"},
        "Match": {"window_size": 2},
    }
    (workdir / "config.json").write_text(json.dumps(config), encoding="utf-8")
    return workdir


class TestGlobalOptions:
    """Tests for options on the main command."""

    def test_help(self):
        """Test that help lists the commands."""
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "scan" in result.output
        assert "find" in result.output

    def test_version(self):
        """Test the version option."""
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output


class TestFindCommand:
    """Tests for 'phrase-scan find'."""

    def test_find_hit(self, workdir):
        """Test finding the phrase in a transcript file."""
        (workdir / "talk.json").write_text(TRANSCRIPT, encoding="utf-8")

        result = runner.invoke(app, ["find", "talk.json", "--phrase", "Hello World"])

        assert result.exit_code == 0
        assert "talk.json" in result.output
        assert "3.000" in result.output

    def test_find_no_hit(self, workdir):
        """Test a search without hits."""
        (workdir / "talk.json").write_text(TRANSCRIPT, encoding="utf-8")

        result = runner.invoke(app, ["find", "talk.json", "--phrase", "xyzzy"])

        assert result.exit_code == 0
        assert 'No hits for "xyzzy"' in result.output

    def test_find_missing_file(self, workdir):
        """Test that missing files are reported and skipped."""
        result = runner.invoke(app, ["find", "missing.json", "--phrase", "hello"])

        assert result.exit_code == 0
        assert "Not a file" in result.output

    def test_find_invalid_phrase(self, workdir):
        """Test that a phrase without words is rejected."""
        (workdir / "talk.json").write_text(TRANSCRIPT, encoding="utf-8")

        result = runner.invoke(app, ["find", "talk.json", "--phrase", "?!"])

        assert result.exit_code == 1
        assert "configuration" in result.output

    def test_find_invalid_window(self, workdir):
        """Test that a zero window size is rejected."""
        (workdir / "talk.json").write_text(TRANSCRIPT, encoding="utf-8")

        result = runner.invoke(app, ["find", "talk.json", "--phrase", "hello", "--window-size", "0"])

        assert result.exit_code == 1


class TestScanCommand:
    """Tests for 'phrase-scan scan'."""

    def test_scan(self, scan_setup):
        """Test a scan that reuses existing transcripts."""
        result = runner.invoke(app, ["scan"])

        assert result.exit_code == 0, result.output
        assert "Scan Summary" in result.output

        reports = list((scan_setup / "reports").glob("run-*.csv"))
        assert len(reports) == 1
        lines = reports[0].read_text(encoding="utf-8-sig").splitlines()
        assert lines[0] == "file,start,end,word,context"
        assert len(lines) == 2
        assert "talk.wav" in lines[1]
        assert ',1.000,3.000,"hello world",' in lines[1]

    def test_scan_warns_when_whisper_missing(self, scan_setup):
        """Test the warning about a missing whisper.cpp executable."""
        result = runner.invoke(app, ["scan"])

        assert "Warning" in result.output
        assert "no-such-whisper-cli" in result.output

    def test_phrase_override(self, scan_setup):
        """Test overriding the phrase on the command line."""
        result = runner.invoke(app, ["scan", "--phrase", "xyzzy"])

        assert result.exit_code == 0
        report = next((scan_setup / "reports").glob("run-*.csv"))
        assert report.read_text(encoding="utf-8-sig") == "file,start,end,word,context\n"

    def test_copy_to(self, scan_setup):
        """Test copying audio files with hits."""
        result = runner.invoke(app, ["scan", "--copy-to", "matches"])

        assert result.exit_code == 0
        assert (scan_setup / "matches" / "talk.wav").exists()
        assert not (scan_setup / "matches" / "other.mp3").exists()

    def test_environment_overlay(self, scan_setup):
        """Test selecting a config overlay."""
        (scan_setup / "config.ci.json").write_text(
            json.dumps({"App": {"output_dir": "ci-reports"}}), encoding="utf-8"
        )

        result = runner.invoke(app, ["scan", "--env", "ci"])

        assert result.exit_code == 0
        assert list((scan_setup / "ci-reports").glob("run-*.csv"))

    def test_missing_config(self, workdir):
        """Test that a missing config file fails cleanly."""
        result = runner.invoke(app, ["scan", "--config", "missing.json"])

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_invalid_override(self, scan_setup):
        """Test that an invalid override is a configuration error."""
        result = runner.invoke(app, ["scan", "--max-distance", "-1"])

        assert result.exit_code == 1
        assert "configuration" in result.output

    def test_missing_scan_root(self, scan_setup):
        """Test that a missing scan root fails cleanly."""
        result = runner.invoke(app, ["scan", "--root", "nowhere"])

        assert result.exit_code == 1
        assert "not a directory" in result.output

    def test_report_write_failure(self, scan_setup):
        """Test that a report that cannot be written fails cleanly."""
        with patch(
            "phrase_scan.runner.write_csv_report",
            side_effect=StorageError("Failed to write reports/run.csv: disk full"),
        ):
            result = runner.invoke(app, ["scan"])

        assert result.exit_code == 1
        assert "disk full" in result.output
        assert not isinstance(result.exception, StorageError)
