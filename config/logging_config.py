"""Logging configuration for ARP Scan.

Everything is logged under the ``arpscan`` logger: a rotating file in the
data directory gets DEBUG and up, stderr gets warnings (or everything with
``--verbose``). Only the scan report and hosts-file preview go to stdout.

Usage:
    from config.logging_config import setup_logging, get_logger

    setup_logging(debug=args.verbose)
    logger = get_logger(__name__)
"""
import logging
import sys
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from config.constants import STORAGE

ROOT_LOGGER_NAME = 'arpscan'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class ArpScanFormatter(logging.Formatter):
    """Colors the level name when stderr is a terminal."""

    LEVEL_COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def __init__(self, use_colors: bool = True):
        super().__init__(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelname)
        if self.use_colors and color and sys.stderr.isatty():
            # copy so the file handler still sees the plain level name
            record = logging.makeLogRecord(record.__dict__)
            record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def setup_logging(
    data_dir: Optional[Path] = None,
    debug: bool = False,
    console_output: bool = True,
    log_to_file: bool = True
) -> logging.Logger:
    """Configure the ``arpscan`` logger, replacing any earlier handlers.

    Args:
        data_dir: Directory for the log file. Defaults to ~/.arp-scan/
        debug: Verbose mode; lowers both logger and console level to DEBUG.
        console_output: Also log to stderr.
        log_to_file: Write a rotating log file.
    """
    if data_dir is None:
        data_dir = Path.home() / STORAGE.DATA_DIR_NAME

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    logger.propagate = False

    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)

    if log_to_file:
        data_dir.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            data_dir / STORAGE.LOG_FILE,
            maxBytes=STORAGE.LOG_MAX_BYTES,
            backupCount=STORAGE.LOG_BACKUP_COUNT,
            encoding='utf-8'
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(file_handler)

    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.DEBUG if debug else logging.WARNING)
        console_handler.setFormatter(ArpScanFormatter())
        logger.addHandler(console_handler)

    logger.debug(f"Logging initialized (debug={debug}, file={log_to_file})")
    return logger


def get_logger(name: str) -> logging.Logger:
    """Child of the ``arpscan`` logger named after the last two parts of ``name``.

    ``discovery.scanner`` becomes ``arpscan.discovery.scanner``.
    """
    short_name = '.'.join(name.split('.')[-2:])
    return logging.getLogger(f'{ROOT_LOGGER_NAME}.{short_name}')


class LogContext:
    """Logs how long a block took, or that it failed.

    Example:
        >>> with LogContext(logger, "Sending 256 ARP requests"):
        ...     send_all(frames)
    """

    def __init__(self, logger: logging.Logger, operation: str, level: int = logging.DEBUG):
        self.logger = logger
        self.operation = operation
        self.level = level
        self.start_time: Optional[float] = None

    def __enter__(self):
        self.start_time = time.monotonic()
        self.logger.log(self.level, f"{self.operation} starting...")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration_ms = (time.monotonic() - self.start_time) * 1000
        if exc_type:
            self.logger.error(f"{self.operation} failed after {duration_ms:.0f}ms: {exc_val}")
        else:
            self.logger.log(self.level, f"{self.operation} completed in {duration_ms:.0f}ms")
        return False
