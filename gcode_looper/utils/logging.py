"""
Logging setup for the looper CLI.

Console
    Default runs print one ``[LEVEL] message`` line per record to stderr so
    progress reads like a plain tool log. ``--verbose`` / ``--debug`` switch to
    :class:`rich.logging.RichHandler`.
Files
    A rotating ``gcode-looper.log`` is kept when ``$GCODE_LOOPER_LOG_DIR`` or
    the configured ``log_dir`` names a directory. ``--save-logfile`` adds a
    plain-text copy of the console stream.

Pipelines log through the standard library; the CLI logs through structlog,
which is routed into the same root handlers.
"""

from __future__ import annotations

import atexit
import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Optional

import structlog
from rich.logging import RichHandler
from structlog.stdlib import LoggerFactory

__all__ = ["setup_logging", "LOG_DIR_ENV", "LOG_FILENAME"]

LOG_DIR_ENV = "GCODE_LOOPER_LOG_DIR"
LOG_FILENAME = "gcode-looper.log"

_PLAIN_FORMAT = "[%(levelname)s] %(message)s"
_FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _levels(verbose: bool, debug: bool, force_info: bool) -> tuple[int, int]:
    """Return ``(console_level, file_level)`` for the given flags."""
    if debug:
        return logging.DEBUG, logging.DEBUG
    if verbose or force_info:
        return logging.INFO, logging.INFO
    return logging.WARNING, logging.INFO


def _console_handler(plain: bool, level: int) -> logging.Handler:
    if plain:
        handler: logging.Handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_PLAIN_FORMAT))
    else:
        handler = RichHandler(rich_tracebacks=True, markup=False, show_path=False)
    handler.setLevel(level)
    return handler


def _log_directory(configured: Optional[Path]) -> Optional[Path]:
    """Pick the rotating-log directory; the environment wins over config."""
    env_dir = os.environ.get(LOG_DIR_ENV)
    if env_dir:
        return Path(env_dir).expanduser()
    if configured is not None:
        return Path(configured).expanduser()
    return None


def _rotating_handler(directory: Path, level: int) -> logging.Handler:
    directory.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        directory / LOG_FILENAME,
        maxBytes=5_000_000,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_FILE_FORMAT))
    return handler


def _mirror_handler(path: Path, level: int) -> logging.Handler:
    """Append console-equivalent lines to *path*."""
    path = path.expanduser().resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, mode="a", encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_PLAIN_FORMAT))
    atexit.register(handler.close)
    return handler


def _structlog_processors(plain: bool, rich_console: bool) -> list:
    if plain:
        return [structlog.dev.ConsoleRenderer(colors=False)]
    stamped = [
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
    ]
    if rich_console:
        return stamped + [structlog.dev.ConsoleRenderer()]
    return stamped + [structlog.processors.JSONRenderer()]


def setup_logging(
    *,
    verbose: bool = False,
    debug: bool = False,
    force_info: bool = False,
    extra_text_log: Optional[Path] = None,
    log_dir: Optional[Path] = None,
) -> None:
    """Install root handlers and configure structlog. Safe to call repeatedly.

    Args:
        verbose: INFO records through the rich console handler.
        debug: DEBUG records through the rich console handler.
        force_info: INFO records through the plain handler when neither
            *verbose* nor *debug* is set.
        extra_text_log: Plain-text mirror of the console output.
        log_dir: Rotating log directory, overridden by ``$GCODE_LOOPER_LOG_DIR``.
    """
    console_level, file_level = _levels(verbose, debug, force_info)
    plain = force_info and not (verbose or debug)

    handlers = [_console_handler(plain, console_level)]
    directory = _log_directory(log_dir)
    if directory is not None:
        handlers.append(_rotating_handler(directory, file_level))
    if extra_text_log is not None:
        handlers.append(_mirror_handler(extra_text_log, console_level))

    logging.basicConfig(level=logging.DEBUG, handlers=handlers, force=True)

    structlog.configure(
        processors=_structlog_processors(plain, verbose or debug),
        wrapper_class=structlog.make_filtering_bound_logger(console_level),
        logger_factory=LoggerFactory(),
        cache_logger_on_first_use=False,
    )
