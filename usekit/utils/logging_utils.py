"""Logging utilities for usekit.

Modules log through the standard pattern:

    import logging
    logger = logging.getLogger(__name__)

The CLI configures the ``usekit`` logger once, in ``setup_cli_logging``:
warnings and errors go to stderr through rich, and ``--log-dir`` adds a
rotating file that also records every component that activated.
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from rich.logging import RichHandler

from usekit.config.constants import LOG_FILE_NAME
from usekit.config.settings import get_log_level
from usekit.utils.output import err_console

# Max log file size: 5MB, keep 2 backups
_MAX_LOG_BYTES = 5 * 1024 * 1024
_BACKUP_COUNT = 2


def _file_handler(log_dir: Path) -> RotatingFileHandler:
    log_dir.mkdir(parents=True, exist_ok=True)

    handler = RotatingFileHandler(
        log_dir / LOG_FILE_NAME, maxBytes=_MAX_LOG_BYTES, backupCount=_BACKUP_COUNT
    )
    handler.setLevel(logging.INFO)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    return handler


def setup_cli_logging(
    verbose: bool = False, quiet: bool = False, log_dir: Optional[Path] = None
) -> logging.Logger:
    """Configure the ``usekit`` logger for command line use.

    ``--verbose`` lowers the console level to DEBUG, ``--quiet`` raises it
    to ERROR; otherwise USEKIT_LOG_LEVEL applies. With ``log_dir`` the
    logger also writes INFO and above to ``usekit.log`` in that directory,
    whatever the console level.
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = get_log_level()

    logger = logging.getLogger("usekit")

    rich_handler = next((h for h in logger.handlers if isinstance(h, RichHandler)), None)
    if rich_handler is None:
        rich_handler = RichHandler(console=err_console, show_path=False, markup=False)
        rich_handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(rich_handler)
    rich_handler.setLevel(level)

    # A previous run in the same process may have pointed elsewhere
    for handler in [h for h in logger.handlers if isinstance(h, RotatingFileHandler)]:
        logger.removeHandler(handler)
        handler.close()

    if log_dir is not None:
        logger.addHandler(_file_handler(log_dir))
        level = min(level, logging.INFO)

    logger.setLevel(level)
    return logger
