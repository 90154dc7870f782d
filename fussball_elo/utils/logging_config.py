"""
Logging configuration for the entire system.
"""

import logging
import sys
from typing import Optional

from fussball_elo.config.settings import LOG_DATE_FORMAT, LOG_FORMAT


def setup_logging(log_file: Optional[str] = None, level: int = logging.INFO):
    """
    Setup logging configuration.

    Args:
        log_file: Optional log file path. Console only when None.
        level: Logging level (default: INFO)
    """
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    # Console handler (stderr keeps report output on stdout clean)
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    logging.debug(f"Logging initialized (file: {log_file or 'none'})")
