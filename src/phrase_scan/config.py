"""Configuration loading and management for phrase-scan.

Settings live in a JSON file with one object per section:

    {
      "App": {"scan_root": "recordings", "search_phrase": "example phrase",
              "output_dir": "reports", "max_parallel": 4},
      "Whisper": {"executable_path": "whisper-cli",
                  "model_path": "models/ggml-small.bin"},
      "Match": {"max_token_distance": 1, "allow_substring": true, "window_size": 4}
    }

An optional ``config.<environment>.json`` next to the base file is merged on
top of it, section by section.
"""

from __future__ import annotations

import json
import os
from functools import cached_property
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from phrase_scan.errors import ConfigurationError
from phrase_scan.matching.text import normalize

CONFIG_ENV_VAR = "PHRASE_SCAN_CONFIG"
ENVIRONMENT_ENV_VAR = "PHRASE_SCAN_ENV"
DEFAULT_ENVIRONMENT = "development"
DEFAULT_CONFIG_FILE = "config.json"


class MatchConfig(BaseModel):
    """Immutable matching policy for one run.

    The target phrase is normalized once, on first use, and reused for every
    transcript searched with this configuration.
    """

    model_config = ConfigDict(frozen=True)

    target_phrase: str
    # Maximum edit distance per token (after stemming)
    max_token_distance: int = Field(default=1, ge=0)
    # Accept a literal substring of the normalized text as a match
    allow_substring: bool = True
    # Number of consecutive segments joined into one search window
    window_size: int = Field(default=4, ge=1)

    @field_validator("target_phrase")
    @classmethod
    def _phrase_has_tokens(cls, value: str) -> str:
        if not normalize(value):
            raise ValueError("target phrase must contain at least one letter or digit")
        return value

    @cached_property
    def normalized_phrase(self) -> str:
        """The target phrase in normalized form."""
        return normalize(self.target_phrase)


class AppConfig(BaseModel):
    """Where to scan and where to write results."""

    scan_root: Path = Path(".")
    search_phrase: str = ""
    # Directory receiving run-<timestamp>.csv
    output_dir: Path = Path("reports")
    max_parallel: int = Field(default_factory=lambda: os.cpu_count() or 1, ge=1)
    # Audio files with at least one hit are copied here
    copy_directory: Path | None = None


class WhisperConfig(BaseModel):
    """How to invoke the whisper.cpp command-line transcriber."""

    executable_path: str = "whisper-cli"
    model_path: str = "models/ggml-small.bin"
    # -oj makes whisper.cpp write the JSON transcript we parse
    args: str = "-ml 1 -oj"
    extra_output_args: str = ""
    skip_if_transcript_exists: bool = True
    # Defaults to the audio file's own directory
    output_directory: Path | None = None
    timeout_seconds: float | None = Field(default=None, gt=0)


class MatchSettings(BaseModel):
    """Matching tolerances, without the phrase itself."""

    max_token_distance: int = Field(default=1, ge=0)
    allow_substring: bool = True
    window_size: int = Field(default=4, ge=1)


class Settings(BaseModel):
    """All configuration sections."""

    model_config = ConfigDict(populate_by_name=True)

    app: AppConfig = Field(default_factory=AppConfig, alias="App")
    whisper: WhisperConfig = Field(default_factory=WhisperConfig, alias="Whisper")
    match: MatchSettings = Field(default_factory=MatchSettings, alias="Match")

    def match_config(self) -> MatchConfig:
        """Build the matching policy from the search phrase and tolerances.

        Raises:
            ConfigurationError: If the phrase or tolerances are invalid
        """
        try:
            return MatchConfig(
                target_phrase=self.app.search_phrase,
                max_token_distance=self.match.max_token_distance,
                allow_substring=self.match.allow_substring,
                window_size=self.match.window_size,
            )
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid match settings: {_describe_validation_error(e)}"
            ) from e


def _describe_validation_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"])
        parts.append(f"{location}: {item['msg']}" if location else item["msg"])
    return "; ".join(parts)


def _merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overlay.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _read_config_file(path: Path) -> dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in config file: {e}", {"path": str(path)}) from e

    if not isinstance(data, dict):
        raise ConfigurationError("Config file must contain a JSON object", {"path": str(path)})
    return data


def environment_config_path(path: Path, environment: str) -> Path:
    """Path of the environment overlay for a base config file."""
    return path.with_name(f"{path.stem}.{environment}{path.suffix}")


def get_config_path() -> Path:
    """Config file named by PHRASE_SCAN_CONFIG, or config.json in the cwd."""
    return Path(os.environ.get(CONFIG_ENV_VAR, DEFAULT_CONFIG_FILE))


def get_environment() -> str:
    """Environment name used to pick the config overlay."""
    return os.environ.get(ENVIRONMENT_ENV_VAR) or DEFAULT_ENVIRONMENT


def load_settings(path: Path | None = None, environment: str | None = None) -> Settings:
    """Load settings from a JSON file plus its environment overlay.

    Args:
        path: Base config file (defaults to ``get_config_path()``)
        environment: Overlay name (defaults to ``get_environment()``)

    Returns:
        Validated Settings

    Raises:
        ConfigurationError: If the file is missing, unreadable or invalid
    """
    path = path or get_config_path()
    environment = environment or get_environment()

    if not path.exists():
        raise ConfigurationError(f"Config file not found: {path}", {"path": str(path)})

    data = _read_config_file(path)

    overlay_path = environment_config_path(path, environment)
    if overlay_path.exists():
        data = _merge(data, _read_config_file(overlay_path))

    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid configuration: {_describe_validation_error(e)}",
            {"path": str(path)},
        ) from e
