import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from . import settings

# Parent of every module logger in the package; third-party loggers stay on root.
PACKAGE_LOGGER = "offseason"


def setup_logger(
    name: str = PACKAGE_LOGGER,
    log_level: int | str = logging.INFO,
    log_file: Path | None = None,
) -> logging.Logger:
    """
    Configures console output at `log_level` and a rotating log file that always
    records DEBUG, so dropped rows and per-row decode failures stay on disk even
    when the console is quiet.
    Only `name` and its children are raised to DEBUG; the root logger is untouched.
    """
    if isinstance(log_level, str):
        log_level = log_level.upper()

    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)

    # Already configured (e.g. run_process called twice in one interpreter)
    if logger.handlers:
        return logger

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(console_handler)

    log_file = log_file or settings.LOG_FILE
    log_file.parent.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        log_file, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    logger.addHandler(file_handler)

    return logger
