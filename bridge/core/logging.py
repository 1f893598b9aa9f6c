"""
Rich-based logging and console output

Two channels:
- log records (`get_logger`) go through a RichHandler on stderr and,
  optionally, a plain-text file
- user-facing lines go to the shared consoles; stdout carries results only
"""
import logging
from pathlib import Path
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler
from rich.traceback import install as install_traceback

LOGGER_NAMESPACE = "bridge"
FILE_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Libraries that log connection chatter at INFO
NOISY_LOGGERS = ("paramiko",)

# Consoles look up sys.stdout / sys.stderr on every write
_stdout_console = Console()
_stderr_console = Console(stderr=True)


def _resolve_level(level: Union[str, int]) -> int:
    if isinstance(level, int):
        resolved = level
    else:
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            resolved = logging.WARNING
    return resolved


def _rich_handler(level: int, rich_tracebacks: bool) -> RichHandler:
    handler = RichHandler(
        console=_stderr_console,
        show_time=True,
        show_level=True,
        show_path=level <= logging.DEBUG,
        rich_tracebacks=rich_tracebacks,
        # Messages embed commands and paths; brackets must print as-is
        markup=False,
    )
    handler.setLevel(level)
    return handler


def _file_handler(log_file: Path, level: int) -> logging.FileHandler:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT))
    return handler


def setup_logging(
    level: Union[str, int] = "WARNING",
    log_file: Optional[Path] = None,
    rich_tracebacks: bool = True,
) -> logging.Logger:
    """
    Configure the `bridge` logger tree.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL) or number
        log_file: Optional log file path, written in plain text
        rich_tracebacks: Render uncaught tracebacks with rich

    Returns:
        The configured package logger
    """
    log_level = _resolve_level(level)

    if rich_tracebacks:
        install_traceback(show_locals=False, width=120)

    logger = logging.getLogger(LOGGER_NAMESPACE)
    logger.setLevel(log_level)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.addHandler(_rich_handler(log_level, rich_tracebacks))
    if log_file:
        logger.addHandler(_file_handler(log_file, log_level))

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    return logger


def get_logger(name: str) -> logging.Logger:
    """Logger for a module (pass __name__)"""
    return logging.getLogger(name)


def get_stdout_console() -> Console:
    """Console for command results"""
    return _stdout_console


def get_stderr_console() -> Console:
    """Console for progress, warnings and errors"""
    return _stderr_console
