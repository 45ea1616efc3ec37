"""Allow running as ``python -m ninevectors``."""

from ninevectors.cli import app

app()
