from __future__ import annotations

import logging
from pathlib import Path

from appserver.core.utils.io import ensure_directory

_CONFIGURED_LOG_PATH: str | None = None
_APPSERVER_FILE_HANDLER: logging.Handler | None = None

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _level_from_name(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(*, log_path: Path, level: str = "INFO") -> None:
    """Configure the ``appserver`` logger to write to ``log_path``.

    Idempotent per-process: if already configured for the same file, only the
    level is updated.
    """
    global _CONFIGURED_LOG_PATH, _APPSERVER_FILE_HANDLER

    resolved = str(Path(log_path).resolve())
    package_logger = logging.getLogger("appserver")
    package_logger.setLevel(_level_from_name(level))

    if _CONFIGURED_LOG_PATH == resolved and _APPSERVER_FILE_HANDLER is not None:
        _APPSERVER_FILE_HANDLER.setLevel(_level_from_name(level))
        return

    ensure_directory(Path(resolved).parent)

    # Replace the installed file handler when switching paths.
    if _APPSERVER_FILE_HANDLER is not None:
        package_logger.removeHandler(_APPSERVER_FILE_HANDLER)
        _APPSERVER_FILE_HANDLER.close()
        _APPSERVER_FILE_HANDLER = None

    fh = logging.FileHandler(resolved, encoding="utf-8")
    fh.setLevel(_level_from_name(level))
    fh.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger.addHandler(fh)

    _APPSERVER_FILE_HANDLER = fh
    _CONFIGURED_LOG_PATH = resolved


def reset_logging_for_tests() -> None:
    """Test-only: remove the installed file handler."""
    global _CONFIGURED_LOG_PATH, _APPSERVER_FILE_HANDLER
    if _APPSERVER_FILE_HANDLER is not None:
        logging.getLogger("appserver").removeHandler(_APPSERVER_FILE_HANDLER)
        _APPSERVER_FILE_HANDLER.close()
    _CONFIGURED_LOG_PATH = None
    _APPSERVER_FILE_HANDLER = None


__all__ = ["LOG_FORMAT", "configure_logging", "reset_logging_for_tests"]
