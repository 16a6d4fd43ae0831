"""Logging configuration for Secure Delete.

Handlers are attached to the ``securedelete`` package logger so a host
application embedding the delete flow keeps control of its own root logger.
"""
import logging
import os
import sys
from pathlib import Path
from typing import Optional

PACKAGE_LOGGER = 'securedelete'
DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    console_output: bool = True,
    format_string: Optional[str] = None
) -> logging.Logger:
    """Configure the Secure Delete package logger.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path to also write logs to.
        console_output: Whether to log to stderr.
        format_string: Custom format string (DEFAULT_FORMAT if None).

    Returns:
        The configured package logger.
    """
    formatter = logging.Formatter(format_string or DEFAULT_FORMAT)

    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    pkg_logger.setLevel(level)
    pkg_logger.propagate = False
    for handler in list(pkg_logger.handlers):
        pkg_logger.removeHandler(handler)
        handler.close()

    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        pkg_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding='utf8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        pkg_logger.addHandler(file_handler)

    if not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return pkg_logger


def setup_cli_logging(verbose: bool = False, quiet: bool = False) -> logging.Logger:
    """CLI logging: WARNING by default, DEBUG with --verbose, ERROR with --quiet.

    SECUREDELETE_LOG_FILE, when set, adds a file handler at the same level.
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING

    env_log = os.getenv('SECUREDELETE_LOG_FILE')
    return setup_logging(
        level=level,
        log_file=Path(env_log) if env_log else None,
        console_output=True,
        format_string='%(levelname)s: %(message)s',
    )


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the package namespace."""
    if name == PACKAGE_LOGGER or name.startswith(PACKAGE_LOGGER + '.'):
        return logging.getLogger(name)
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")
