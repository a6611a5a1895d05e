"""
Logging setup for the c8asm command line.

The chip8asm library only emits records through module loggers; handlers
are installed here, by the CLI, never on import.
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

__all__ = ['setup_logging', 'verbosity_to_level']

LOGGER_NAME = "chip8asm"


def verbosity_to_level(verbose: int = 0, quiet: bool = False) -> int:
    """Map -v count / -q flag to a console log level."""
    if quiet:
        return logging.ERROR
    if verbose == 0:
        return logging.WARNING
    if verbose == 1:
        return logging.INFO
    return logging.DEBUG


def setup_logging(
    console_level: int = logging.WARNING,
    log_file: Optional[Path] = None,
    name: str = LOGGER_NAME,
) -> logging.Logger:
    """
    Configure and return the package logger.

    Console output goes to stderr through rich so it never mixes with a
    binary written to stdout. When log_file is given, everything at DEBUG
    and above is also written there.
    """
    logger = logging.getLogger(name)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.DEBUG)

    # ── Console handler ──
    ch = RichHandler(
        level=console_level,
        console=Console(stderr=True),
        show_time=False,
        show_path=False,
        rich_tracebacks=True,
    )
    ch.setLevel(console_level)
    logger.addHandler(ch)

    # ── File handler: captures everything (DEBUG+) ──
    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_path), encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
        logger.addHandler(fh)
        logger.debug("Log file: %s", log_path)

    return logger
