"""
File logging for commit_wizard.

The interactive interface owns the terminal, so log records are never
written to it. When logging is enabled, records from every
``commit_wizard.*`` logger are appended to a log file instead:

- ``~/.local/share/commit-wizard/commit-wizard.log`` by default,
- ``./commit-wizard.log`` when requested, or when the default location
  cannot be written.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional


PACKAGE_LOGGER = "commit_wizard"
LOCAL_LOG_FILE = "commit-wizard.log"
LOG_FORMAT = "[%(asctime)s] %(levelname)s [%(name)s] %(message)s"

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


def default_log_path() -> Path:
    """Return the per-user log file location."""
    return Path.home() / ".local" / "share" / "commit-wizard" / LOCAL_LOG_FILE


def _open_handler(path: Path) -> logging.FileHandler:
    path.parent.mkdir(parents=True, exist_ok=True)
    return logging.FileHandler(path, mode="a", encoding="utf-8")


def init_logging(enabled: bool, local: bool = False, verbose: bool = False) -> Optional[Path]:
    """Attach a file handler to the package logger.

    Parameters
    ----------
    enabled : bool
        When False nothing is configured and ``None`` is returned.
    local : bool, optional
        Write to ``./commit-wizard.log`` instead of the per-user location.
    verbose : bool, optional
        Log at DEBUG level instead of INFO.

    Returns
    -------
    Optional[Path]
        The path of the log file in use.

    Raises
    ------
    OSError
        If not even the local log file can be opened.
    """
    if not enabled:
        return None

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(package_logger.handlers):
        if isinstance(handler, logging.FileHandler):
            package_logger.removeHandler(handler)
            handler.close()

    path = Path(LOCAL_LOG_FILE) if local else default_log_path()
    try:
        handler = _open_handler(path)
    except OSError:
        if local:
            raise
        path = Path(LOCAL_LOG_FILE)
        handler = _open_handler(path)

    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.info("Logging initialized at %s", path.resolve())
    return path
