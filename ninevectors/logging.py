"""Terminal and log file logging configuration.

Terminal verbosity follows ``-v`` / ``--verbose`` (WARNING by default).  The
log file under ``<state_dir>/logs/`` follows the ``log_level`` setting, so
``NINEVECTORS_LOG_LEVEL`` in the environment or a ``.env`` file controls it.
API requests log their ``X-Request-ID``, which is how a failed call in the
file is matched to a server-side log.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FILENAME = "ninevectors.log"

# Rotate at 256 KB
_MAX_BYTES = 256 * 1024

_BACKUP_COUNT = 2

# Third-party loggers held at WARNING
_QUIET_LOGGERS = ("httpx", "httpcore", "asyncio")

_TERMINAL_FORMAT = "%(levelname)s | %(name)s | %(message)s"
_FILE_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"


def _parse_log_level(level_str: str) -> int:
    """Parse a log level name case-insensitively, falling back to INFO."""
    numeric = getattr(logging, level_str.upper(), None)
    if isinstance(numeric, int):
        return numeric
    return logging.INFO


def log_file_path(state_dir: Path) -> Path:
    return state_dir / "logs" / LOG_FILENAME


def setup_logging(
    *,
    state_dir: Path | None = None,
    verbose: bool = False,
    file_level: str = "INFO",
) -> Path | None:
    """Configure the terminal handler and, when *state_dir* is given, the log file.

    Returns the log file path, or None when logging to the terminal only.
    Safe to call more than once: existing root handlers are replaced.
    """
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    root.setLevel(logging.DEBUG)

    terminal = logging.StreamHandler()
    terminal.setLevel(logging.DEBUG if verbose else logging.WARNING)
    terminal.setFormatter(logging.Formatter(_TERMINAL_FORMAT))
    root.addHandler(terminal)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    if state_dir is None:
        return None

    path = log_file_path(state_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        path, maxBytes=_MAX_BYTES, backupCount=_BACKUP_COUNT, encoding="utf-8",
    )
    file_handler.setLevel(_parse_log_level(file_level))
    file_handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root.addHandler(file_handler)
    return path
