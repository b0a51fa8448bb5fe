"""File helpers for phrase-scan."""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path


class StorageError(Exception):
    """Raised when a file cannot be written or copied."""

    pass


def atomic_write(path: Path, data: str, encoding: str = "utf-8") -> None:
    """Write text to a file atomically.

    The data goes to a temporary file in the target directory, which is then
    renamed over the target, so readers never see a half-written report.

    Args:
        path: Target file path
        data: Text to write
        encoding: File encoding

    Raises:
        StorageError: If the write fails
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, temp_name = tempfile.mkstemp(suffix=".tmp", prefix=path.stem + "_", dir=path.parent)
    temp_path = Path(temp_name)
    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(temp_path, path)
    except OSError as e:
        temp_path.unlink(missing_ok=True)
        raise StorageError(f"Failed to write {path}: {e}") from e


def copy_into(source: Path, directory: Path) -> Path:
    """Copy a file into a directory, replacing any file of the same name.

    Returns:
        Path of the copy

    Raises:
        StorageError: If the copy fails
    """
    target = directory / source.name
    try:
        directory.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, target)
    except OSError as e:
        raise StorageError(f"Failed to copy {source} to {directory}: {e}") from e
    return target
