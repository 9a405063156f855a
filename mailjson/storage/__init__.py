"""Local persistence for fetched messages."""

from .rawstore import RawStore

__all__ = ["RawStore"]
