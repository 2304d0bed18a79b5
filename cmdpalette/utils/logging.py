"""Simple logging utilities for cmdpalette.

Standard Logger Initialization Pattern
--------------------------------------
For most modules, use the standard Python pattern:

    import logging
    logger = logging.getLogger(__name__)

Configuration happens once, in the CLI entry point, via `setup_logging()`.
Output goes to a rotating file so log lines never draw over the TUI.

Note: This module reads the config dir from the environment instead of
importing CMDPALETTE_CONFIG_DIR so it can be used before config is loaded.
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

# Max log file size: 5MB, keep 2 backups
_MAX_LOG_BYTES = 5 * 1024 * 1024
_BACKUP_COUNT = 2

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_log_path() -> Path:
    """Path of the rotating log file."""
    log_dir = Path(
        os.environ.get("CMDPALETTE_CONFIG_DIR", str(Path.home() / ".config" / "cmdpalette"))
    )
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / "cmdpalette.log"


def _file_handler(level: int) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        get_log_path(), maxBytes=_MAX_LOG_BYTES, backupCount=_BACKUP_COUNT
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT))
    return handler


def setup_logging(verbose: bool = False) -> logging.Logger:
    """
    Configure the cmdpalette logger hierarchy.

    The root logger stays at WARNING to avoid noise from third-party libs;
    cmdpalette.* loggers go to INFO, or DEBUG when verbose.

    Returns:
        The "cmdpalette" package logger
    """
    level = logging.DEBUG if verbose else logging.INFO
    package_logger = logging.getLogger("cmdpalette")

    if not any(isinstance(h, RotatingFileHandler) for h in package_logger.handlers):
        package_logger.addHandler(_file_handler(logging.DEBUG))

    package_logger.setLevel(level)
    logging.getLogger().setLevel(logging.WARNING)
    return package_logger
