"""
Logging configuration for vcrbpkg.

Everything logs under the ``vcrbpkg`` logger. Console output goes to stdout
so that rvm and Bundler output streamed by child processes interleaves with
it in order; the optional log file always receives DEBUG records.
"""

import logging
import sys
from typing import Optional

LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']

# Short names accepted on the command line and in configuration files
LEVEL_ALIASES = {
    'WARN': 'WARNING',
    'FATAL': 'CRITICAL',
}

CONSOLE_FORMAT = '%(levelname)s - %(message)s'
DETAILED_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s'


def normalize_level(level: str) -> str:
    """
    Canonical level name for ``level``, e.g. ``warn`` -> ``WARNING``.

    Raises:
        ValueError: The name is not a known level
    """
    if not isinstance(level, str):
        raise ValueError(f"log level must be a name, got {level!r}")
    name = level.strip().upper()
    name = LEVEL_ALIASES.get(name, name)
    if name not in LOG_LEVELS:
        raise ValueError(f"unknown log level '{level}'")
    return name


class ColoredFormatter(logging.Formatter):
    """Formatter that colors the level name when writing to a terminal."""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def __init__(self, fmt=None, use_color: bool = True):
        super().__init__(fmt)
        self.use_color = use_color

    def format(self, record):
        color = self.COLORS.get(record.levelname) if self.use_color else None
        if color is None:
            return super().format(record)

        # Other handlers share the record and must see the plain level name
        original_levelname = record.levelname
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original_levelname


def setup_logging(level: str = "INFO", log_file: Optional[str] = None, verbose: bool = False) -> logging.Logger:
    """
    Configure the ``vcrbpkg`` logger.

    Args:
        level: Console level name, aliases such as ``warn`` accepted
        log_file: Optional path that receives every record at DEBUG
        verbose: Use the detailed format on the console too

    Returns:
        The configured ``vcrbpkg`` logger
    """
    numeric_level = getattr(logging, normalize_level(level))

    logger = logging.getLogger('vcrbpkg')
    logger.setLevel(logging.DEBUG if log_file else numeric_level)
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(ColoredFormatter(
        DETAILED_FORMAT if verbose else CONSOLE_FORMAT,
        use_color=sys.stdout.isatty()
    ))
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(DETAILED_FORMAT))
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Logger for one component, a child of ``vcrbpkg``."""
    return logging.getLogger(f'vcrbpkg.{name}')
