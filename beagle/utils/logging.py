"""
Logging set-up shared by every ``beagle-cli`` sub-command.

Three sinks are wired:

* the terminal, through :class:`rich.logging.RichHandler`;
* ``beagle.log``, a rotating file of JSON events (``$BEAGLE_LOG_DIR``, the
  *log_dir* argument, or ``logs/`` next to the package, in that order);
* an optional plain-text copy of what the terminal shows (``--save-logfile``).

Modules obtain their logger with ``structlog.get_logger()`` and emit dotted
event names (``civet.missing``, ``stage.done`` …).
"""

from __future__ import annotations

import atexit
import logging
import logging.handlers
import os
from pathlib import Path
from typing import List, Optional

import structlog
from rich.logging import RichHandler
from structlog.dev import ConsoleRenderer
from structlog.stdlib import LoggerFactory

__all__ = ["setup_logging", "console_level"]

LOG_DIR_ENV = "BEAGLE_LOG_DIR"
LOG_FILENAME = "beagle.log"


def console_level(*, verbose: bool = False, debug: bool = False) -> int:
    """Map the ``-v`` / ``--debug`` flags onto a :mod:`logging` level."""
    if debug:
        return logging.DEBUG
    if verbose:
        return logging.INFO
    return logging.WARNING


def _log_directory(log_dir: Path | None) -> Path:
    env_dir = os.environ.get(LOG_DIR_ENV)
    if env_dir:
        target = Path(env_dir).expanduser()
    elif log_dir is not None:
        target = log_dir
    else:
        target = Path(__file__).resolve().parents[1] / "logs"
    target.mkdir(parents=True, exist_ok=True)
    return target


def _rotating_json_handler(log_dir: Path | None, level: int) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=_log_directory(log_dir) / LOG_FILENAME,
        maxBytes=5_000_000,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setLevel(level)
    return handler


def _mirror_handler(path: Optional[Path], level: int) -> logging.Handler | None:
    """Plain-text copy of the console, appended to *path*."""
    if path is None:
        return None
    path = path.expanduser().resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8", mode="a")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    atexit.register(handler.close)
    return handler


def setup_logging(
    *,
    log_dir: Path | None = None,
    verbose: bool = False,
    debug: bool = False,
    extra_text_log: Optional[Path] = None,
) -> None:
    """Configure the stdlib root logger and structlog.

    Args:
        log_dir: Directory for ``beagle.log`` when ``$BEAGLE_LOG_DIR`` is unset.
        verbose: INFO-level console output.
        debug: DEBUG-level console output (loaded settings, resolved Civet
            paths, built commands).
        extra_text_log: File receiving a plain-text copy of console output.
    """
    level = console_level(verbose=verbose, debug=debug)

    handlers: List[logging.Handler] = [
        RichHandler(level=level, rich_tracebacks=True, markup=False),
        _rotating_json_handler(log_dir, logging.DEBUG if debug else logging.INFO),
    ]
    mirror = _mirror_handler(extra_text_log, level)
    if mirror is not None:
        handlers.append(mirror)

    # Root stays at DEBUG; each handler filters on its own level.
    logging.basicConfig(level=logging.DEBUG, handlers=handlers, format="%(message)s", force=True)

    renderer = ConsoleRenderer() if verbose or debug else structlog.processors.JSONRenderer()
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=LoggerFactory(),
    )
