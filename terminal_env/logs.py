"""
Logger Setup
--------------------------------------------------

Console output goes through RichHandler at INFO; the install log receives
everything at DEBUG, including the captured output of external commands.
The log file is appended to, never truncated.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from rich.logging import RichHandler

from terminal_env.ui import console

LOGGER_NAME = "terminal_env"
LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logger(
    log_file: Optional[Union[str, Path]] = None, debug: bool = False
) -> logging.Logger:
    """Configure the package logger. Without a log file only the console is used."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    for h in logger.handlers[:]:
        logger.removeHandler(h)
        h.close()

    console_handler = RichHandler(
        console=console, rich_tracebacks=True, show_path=False, markup=False
    )
    console_handler.setLevel(logging.DEBUG if debug else logging.INFO)
    logger.addHandler(console_handler)

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
        logger.addHandler(file_handler)
        logger.debug(f"===== Run started {datetime.now().strftime(LOG_DATE_FORMAT)} =====")
    return logger


def close_logger() -> None:
    """Flush and detach every handler from the package logger."""
    logger = logging.getLogger(LOGGER_NAME)
    for h in logger.handlers[:]:
        logger.removeHandler(h)
        h.close()
