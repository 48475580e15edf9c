# wasstrip/config/logging_config.py

"""Logging for wasstrip runs.

A run writes everything from the ``wasstrip.*`` loggers to
``logs/run_<timestamp>.log``; the terminal only sees records at
``Settings.LOG_LEVEL`` and above so JSON on stdout stays clean.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from wasstrip.config.settings import Settings

_FILE_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | %(funcName)s:%(lineno)d | "
    "%(message)s"
)
_STDERR_FORMAT = "%(levelname)s %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _open_log_file(root_logger: logging.Logger) -> Path | None:
    """Path of the run log the logger already writes to, if any."""
    for handler in root_logger.handlers:
        if isinstance(handler, logging.FileHandler):
            return Path(handler.baseFilename)
    return None


def _stderr_level() -> int:
    level = logging.getLevelName(Settings.LOG_LEVEL.upper())
    return level if isinstance(level, int) else logging.WARNING


def setup_logging() -> Path:
    """Attach the run-log and stderr handlers to the ``wasstrip`` logger.

    Calling it again keeps the handlers of the first call and returns the
    log file they write to.
    """
    root_logger = logging.getLogger("wasstrip")
    root_logger.setLevel(logging.DEBUG)

    existing = _open_log_file(root_logger)
    if existing is not None:
        return existing

    Settings.LOGS_DIR.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = Settings.LOGS_DIR / f"run_{stamp}.log"

    to_file = logging.FileHandler(log_file, encoding="utf-8")
    to_file.setLevel(logging.DEBUG)
    to_file.setFormatter(logging.Formatter(_FILE_FORMAT, _DATE_FORMAT))

    to_stderr = logging.StreamHandler(sys.stderr)
    to_stderr.setLevel(_stderr_level())
    to_stderr.setFormatter(logging.Formatter(_STDERR_FORMAT))

    root_logger.addHandler(to_file)
    root_logger.addHandler(to_stderr)
    root_logger.debug(
        "Run log %s (stderr level %s)",
        log_file,
        logging.getLevelName(to_stderr.level),
    )
    return log_file
