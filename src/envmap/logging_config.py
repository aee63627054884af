"""
Logging for envmap.

All package loggers hang off the ``envmap`` logger, which gets a single
RichHandler on stderr. Stdout is reserved for the Mermaid text and JSON that
callers pipe elsewhere.

Core modules only log at DEBUG (dedupe decisions, skipped run-log lines,
rule timing); the CLI logs progress at INFO.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "envmap"

_LEVELS = {
    "quiet": logging.ERROR,
    "normal": logging.WARNING,
    "verbose": logging.DEBUG,
}


def setup_logging(verbosity: str = "normal", log_file: Optional[str] = None) -> logging.Logger:
    """
    Attach the rich stderr handler (and optionally a file handler) to the
    ``envmap`` logger.

    Safe to call more than once per process: handlers from an earlier call
    are replaced, so the CLI can re-apply the verbosity once the full
    configuration is known.

    Args:
        verbosity: quiet | normal | verbose (unknown values mean normal)
        log_file: Optional file path to append logs to

    Returns:
        The configured ``envmap`` logger
    """
    level = _LEVELS.get(verbosity, logging.WARNING)
    verbose = level == logging.DEBUG

    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    rich_handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        tracebacks_show_locals=verbose,
        markup=False,
        show_time=verbose,
        show_path=verbose,
    )
    rich_handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.addHandler(rich_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
            )
        )
        logger.addHandler(file_handler)

    logger.setLevel(level)
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger under the ``envmap`` namespace.

    Args:
        name: Module name (e.g., 'envmap.graph.builder' or 'graph.builder').
              If None, returns the ``envmap`` logger itself

    Returns:
        Logger instance
    """
    if name is None:
        return logging.getLogger(ROOT_LOGGER)

    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"

    return logging.getLogger(name)
