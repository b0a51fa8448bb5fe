"""CSV report of phrase hits.

One row per hit with the columns ``file,start,end,word,context``. Text fields
are always quoted and embedded quotes are doubled. The file starts with a
UTF-8 byte order mark so spreadsheet tools pick the right encoding.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

from phrase_scan.models.hit import WordHit
from phrase_scan.storage import atomic_write

CSV_HEADER = "file,start,end,word,context"


def _quote(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


def format_csv_row(hit: WordHit) -> str:
    """Format one hit as a CSV line (without the newline)."""
    return ",".join(
        [
            _quote(hit.source),
            f"{hit.start:.3f}",
            f"{hit.end:.3f}",
            _quote(hit.phrase),
            _quote(hit.context),
        ]
    )


def sort_hits(hits: Iterable[WordHit]) -> list[WordHit]:
    """Order hits by source, then by start time."""
    return sorted(hits, key=lambda h: (h.source, h.start))


def report_file_name(now: datetime | None = None) -> str:
    """Name of a report file, unique per run."""
    now = now or datetime.now(timezone.utc)
    return now.strftime("run-%Y%m%dT%H%M%S%fZ.csv")


def render_csv(hits: Iterable[WordHit]) -> str:
    """Render hits as CSV text, in the order given."""
    lines = [CSV_HEADER]
    lines.extend(format_csv_row(hit) for hit in hits)
    return "\n".join(lines) + "\n"


def write_csv_report(hits: Iterable[WordHit], output_dir: Path) -> Path:
    """Write hits to a new report file in ``output_dir``.

    Hits are sorted by source and start time before writing.

    Args:
        hits: Hits from all scanned files
        output_dir: Directory for the report; created if missing

    Returns:
        Path of the written report
    """
    path = output_dir / report_file_name()
    atomic_write(path, render_csv(sort_hits(hits)), encoding="utf-8-sig")
    return path
