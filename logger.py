"""
Shared logging configuration for the converter.

Console output is always enabled; a detailed log file can be added by
passing ``log_file``.
"""

import logging
import os
from datetime import datetime


def setup_logger(name, log_level=logging.INFO, log_file=None):
    """
    Set up a logger with a console handler and an optional file handler.

    Args:
        name: The name of the logger (typically __name__ from the calling module)
        log_level: The console logging level (default: logging.INFO)
        log_file: Optional path of a log file that receives DEBUG output

    Returns:
        logging.Logger: Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG if log_file else log_level)

    # Avoid adding handlers multiple times if logger already exists
    if logger.handlers:
        return logger

    detailed_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    console_formatter = logging.Formatter(
        '%(levelname)s - %(message)s'
    )

    if log_file:
        log_dir = os.path.dirname(os.path.abspath(log_file))
        os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(detailed_formatter)
        logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    return logger


def log_run_start(logger, filepath):
    logger.info("=" * 60)
    logger.info(f"Converting {filepath}")
    logger.info(f"Timestamp: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    logger.info("=" * 60)


def log_run_end(logger, filepath, success=True):
    status = "COMPLETED SUCCESSFULLY" if success else "FAILED"
    logger.info("=" * 60)
    logger.info(f"{filepath} {status}")
    logger.info("=" * 60)
