"""Logging configuration for the node age controller.

The controller reports everything it does through its log, so the console
handler follows the configured level. Verbose mode lowers only this package's
loggers to DEBUG; third-party clients keep the configured level and the
chattiest of them are capped regardless.
"""

import logging
import sys
from pathlib import Path

PACKAGE_LOGGER = "node_age_controller"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# The kubernetes client logs every request and watch chunk below WARNING
NOISY_LOGGERS = {
    "urllib3": logging.WARNING,
    "kubernetes": logging.WARNING,
}


def setup_logging(level: str = "INFO", log_file: Path | None = None, verbose: bool = False) -> None:
    """Configure logging for the controller.

    Args:
        level: Level for the root logger and third-party libraries
        log_file: Optional path to a log file
        verbose: Log this package's DEBUG records to the console
    """
    root_level = getattr(logging, level.upper())
    package_level = logging.DEBUG if verbose else logging.NOTSET
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(root_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(min(root_level, package_level or root_level))
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file)
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
        except OSError as e:
            get_logger(__name__).warning(f"Failed to create log file handler: {e}")

    logging.getLogger(PACKAGE_LOGGER).setLevel(package_level)
    for name, cap in NOISY_LOGGERS.items():
        logging.getLogger(name).setLevel(max(cap, root_level))


def get_logger(name: str) -> logging.Logger:
    """Get a logger, typically for ``__name__``."""
    return logging.getLogger(name)
