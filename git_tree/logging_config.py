"""Logging configuration for git-tree"""
import copy
import logging
import sys
from pathlib import Path
from typing import Optional, TextIO

LOG_DIR_NAME = '.git-tree'
LOG_FILE_NAME = 'git-tree.log'

DETAILED_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
SIMPLE_FORMAT = '[%(name)s] %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

PACKAGE_PREFIXES = ('git_tree.', 'services.')


class ColoredFormatter(logging.Formatter):
    """Formatter that colors the level name when writing to a terminal."""

    LEVEL_COLORS = {
        logging.DEBUG: '\033[36m',     # Cyan
        logging.INFO: '\033[32m',      # Green
        logging.WARNING: '\033[33m',   # Yellow
        logging.ERROR: '\033[31m',     # Red
        logging.CRITICAL: '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def __init__(self, fmt=None, datefmt=None, stream: Optional[TextIO] = None):
        super().__init__(fmt=fmt, datefmt=datefmt)
        stream = stream or sys.stderr
        self.use_color = hasattr(stream, 'isatty') and stream.isatty()

    def format(self, record):
        color = self.LEVEL_COLORS.get(record.levelno)
        if not self.use_color or color is None:
            return super().format(record)
        # Other handlers share the record, so color a copy
        record = copy.copy(record)
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def get_log_file() -> Path:
    """Location of the debug log file."""
    return Path.home() / LOG_DIR_NAME / LOG_FILE_NAME


def _file_handler(log_file: Path) -> logging.Handler:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file, mode='w')  # Overwrite each run
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(fmt=DETAILED_FORMAT, datefmt=DATE_FORMAT))
    return handler


def _console_handler(level: int, debug: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    if debug:
        formatter = ColoredFormatter(fmt=DETAILED_FORMAT, datefmt=DATE_FORMAT, stream=sys.stderr)
    else:
        formatter = ColoredFormatter(fmt=SIMPLE_FORMAT, stream=sys.stderr)
    handler.setFormatter(formatter)
    return handler


def setup_logging(verbose: bool = False, debug: bool = False, log_file: Optional[Path] = None) -> None:
    """
    Configure logging for the application.

    Warnings only by default, INFO with ``verbose``, DEBUG with ``debug``.
    Debug runs are also mirrored to a log file (``~/.git-tree/git-tree.log``
    unless ``log_file`` is given).

    Args:
        verbose: If True, show INFO level messages
        debug: If True, show DEBUG level messages with timestamps
        log_file: Override the debug log location
    """
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if debug:
        root_logger.addHandler(_file_handler(log_file or get_log_file()))
    root_logger.addHandler(_console_handler(level, debug))

    # GitPython logs every command it runs at DEBUG
    logging.getLogger('git').setLevel(logging.DEBUG if debug else logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger named after a module, without the package prefixes.

    ``git_tree.services.metadata_service`` logs as ``metadata_service``.
    """
    for prefix in PACKAGE_PREFIXES:
        if name.startswith(prefix):
            name = name[len(prefix):]
    return logging.getLogger(name)
