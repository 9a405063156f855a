"""Mailbox-to-archive run orchestration."""

from .engine import ArchiveEngine, ArchiveResult

__all__ = ["ArchiveEngine", "ArchiveResult"]
