"""
ONKOFHIR Logging Utilities - Session-Tagged Diagnostics

Overview:
---------
Centralised logging configuration for the reconciliation core.  The core only
ever emits non-fatal diagnostics (identifier normalisation misses, ambiguous
report versions), so this module is about routing those warnings somewhere a
data steward will see them.

Log Location:
-------------
- Default: ~/.onkofhir/logs/
- Each call to ``setup_logging`` creates a timestamped file with a session ID
- Can be overridden via the ONKOFHIR_LOG_DIR environment variable

Usage:
------
    from onkofhir.utils.logging import get_logger, setup_logging

    # Call once at startup (service or job entry point)
    log_file = setup_logging(level="DEBUG")

    # Get logger in any module
    logger = get_logger(__name__)
    logger.warning("Identifier to convert does not have 9 digits: %s", raw)

The session ID lives on the filter attached
to the ``onkofhir`` logger; ``get_session_id`` reads it back from there.
"""

from __future__ import annotations

import logging
import os
import sys
import uuid
from datetime import datetime
from pathlib import Path
from typing import Optional

from ..config import OnkoConfig, get_config

# ============================================================================
# Constants
# ============================================================================

ROOT_LOGGER_NAME = "onkofhir"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(session_id)s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# File logs include line numbers
FILE_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(session_id)s | %(name)s:%(lineno)d | %(message)s"


# ============================================================================
# Session ID Filter - Adds session_id to all log records
# ============================================================================

class SessionIdFilter(logging.Filter):
    """Add session_id to all log records."""

    def __init__(self, session_id: str):
        super().__init__()
        self.session_id = session_id

    def filter(self, record: logging.LogRecord) -> bool:
        record.session_id = self.session_id  # type: ignore[attr-defined]
        return True


class SessionFormatter(logging.Formatter):
    """Formatter that defaults session_id to 'N/A' for records from other loggers."""

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "session_id"):
            record.session_id = "N/A"  # type: ignore[attr-defined]
        return super().format(record)


# ============================================================================
# Setup Functions
# ============================================================================

def generate_session_id() -> str:
    """Generate a short unique session ID (6 characters)."""
    return uuid.uuid4().hex[:6]


def get_log_directory(config: OnkoConfig) -> Path:
    """Get the log directory, respecting ONKOFHIR_LOG_DIR."""
    env_log_dir = os.getenv("ONKOFHIR_LOG_DIR")
    if env_log_dir:
        return Path(env_log_dir)
    return config.log_dir


def generate_log_filename(session_id: str) -> str:
    """Generate a timestamped log filename with session ID."""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"onkofhir_{timestamp}_{session_id}.log"


def setup_logging(
    level: Optional[str] = None,
    log_dir: Optional[Path] = None,
    console_output: bool = False,
    config: Optional[OnkoConfig] = None,
) -> Path:
    """
    Initialise ONKOFHIR logging with a session file and optional console output.

    Parameters
    ----------
    level : str, optional
        Log level: DEBUG, INFO, WARNING, ERROR. Defaults to
        ``config.log_level`` (ONKOFHIR_LOG_LEVEL).
    log_dir : Path, optional
        Directory for log files. Defaults to ONKOFHIR_LOG_DIR, then
        ``config.log_dir`` (~/.onkofhir/logs/).
    console_output : bool
        If True, also log to stderr.
    config : OnkoConfig, optional
        Settings to read defaults from. Defaults to :func:`get_config`.

    Returns
    -------
    Path
        Path to the log file being written to.
    """
    session_id = generate_session_id()
    if config is None:
        config = get_config()

    if level is None:
        level = config.log_level
    log_level = getattr(logging, level.upper(), logging.INFO)

    if log_dir is None:
        log_dir = get_log_directory(config)
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / generate_log_filename(session_id)

    root = logging.getLogger(ROOT_LOGGER_NAME)

    # Clear any existing handlers and filters from a previous session
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    for f in root.filters[:]:
        root.removeFilter(f)

    root.setLevel(log_level)
    # Logger filters do not see records propagated from child loggers,
    # so the handlers carry the filter as well.
    session_filter = SessionIdFilter(session_id)
    root.addFilter(session_filter)

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(log_level)
    file_handler.setFormatter(SessionFormatter(FILE_LOG_FORMAT, LOG_DATE_FORMAT))
    file_handler.addFilter(session_filter)
    root.addHandler(file_handler)

    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(SessionFormatter(LOG_FORMAT, LOG_DATE_FORMAT))
        console_handler.addFilter(session_filter)
        root.addHandler(console_handler)

    # Prevent propagation to the host root logger (avoid duplicate logs)
    root.propagate = False

    root.info("ONKOFHIR logging session %s started (level %s)", session_id, level.upper())
    return log_file


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger under the ``onkofhir`` namespace.

    Does not install any handlers; records propagate to whatever the host
    application configured until :func:`setup_logging` routes them to the
    session handlers instead.
    """
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def get_session_id() -> Optional[str]:
    """Return the current session ID, or None if logging was never set up."""
    for f in logging.getLogger(ROOT_LOGGER_NAME).filters:
        if isinstance(f, SessionIdFilter):
            return f.session_id
    return None
