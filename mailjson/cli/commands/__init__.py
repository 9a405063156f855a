"""CLI commands module."""

from . import archive, config

__all__ = ["archive", "config"]
