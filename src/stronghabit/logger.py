# SPDX-License-Identifier: MIT

import logging
import logging.handlers
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

MAX_LOG_FILE_SIZE = 1024 * 1024
LOG_BACKUP_COUNT = 3


def setup_logging(level: str, log_path: Path) -> None:
    """
    Configure the root logger.

    Warnings and errors go to stderr through rich; everything at `level` and
    above goes to a rotating log file.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    console_handler = RichHandler(
        console=Console(stderr=True), show_time=False, show_path=False
    )
    console_handler.setLevel(logging.WARNING)
    root_logger.addHandler(console_handler)

    log_path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.handlers.RotatingFileHandler(
        log_path,
        maxBytes=MAX_LOG_FILE_SIZE,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setLevel(getattr(logging, level.upper(), logging.INFO))
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"
        )
    )
    root_logger.addHandler(file_handler)
