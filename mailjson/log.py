"""Logging setup.

All diagnostics go through loguru's shared ``logger``; user-facing
progress is echoed by the CLI. A single stderr sink is installed per run.
"""

import sys

from loguru import logger

LOG_FORMAT = "<level>{level: <8}</level> {message}"


def configure_logging(verbose: bool = False) -> None:
    """Install the stderr sink, at DEBUG when verbose and INFO otherwise."""
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if verbose else "INFO",
        format=LOG_FORMAT,
        colorize=None,
    )
