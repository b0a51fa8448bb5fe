"""Allow running as ``python -m phrase_scan``."""

from phrase_scan.cli import app

app()
