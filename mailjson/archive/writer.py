"""JSON output of the archive.

Layout under the output directory:
- c/<id>.json: one full conversation per file
- mail.json: summary index, first message of each conversation without body
- index.html: landing page, written once and never overwritten
"""

import json
import os
from collections.abc import Iterable
from pathlib import Path

from loguru import logger

from mailjson.archive.landing import render_landing_page
from mailjson.archive.models import Conversation, SummaryEntry

CONVERSATIONS_DIR = "c"
SUMMARY_FILE = "mail.json"
LANDING_PAGE_FILE = "index.html"


def to_json(data: object) -> str:
    """Serialize with a fixed layout so identical input gives identical bytes."""
    return json.dumps(data, indent=1, ensure_ascii=False) + "\n"


class ArchiveWriter:
    """Writes conversation documents, the summary index and the landing page.

    Write errors propagate to the caller.
    """

    def __init__(self, base_path: Path):
        self._base_path = base_path.expanduser().resolve()

    @property
    def base_path(self) -> Path:
        return self._base_path

    @property
    def conversations_dir(self) -> Path:
        return self._base_path / CONVERSATIONS_DIR

    @property
    def summary_path(self) -> Path:
        return self._base_path / SUMMARY_FILE

    @property
    def landing_page_path(self) -> Path:
        return self._base_path / LANDING_PAGE_FILE

    def write_conversation(self, conversation: Conversation) -> Path:
        """Write c/<id>.json with every message in full."""
        path = self.conversations_dir / f"{conversation.id}.json"
        _write_atomic(path, to_json(conversation.to_dict()))
        logger.info(f"Wrote {conversation.id}.json")
        return path

    def write_summary(self, entries: Iterable[SummaryEntry]) -> Path:
        """Write mail.json from summary entries, preserving their order."""
        _write_atomic(self.summary_path, to_json([entry.to_dict() for entry in entries]))
        logger.info(f"Built {SUMMARY_FILE}")
        return self.summary_path

    def write_all(self, conversations: Iterable[Conversation]) -> list[SummaryEntry]:
        """Write every conversation document, then the summary index.

        Returns:
            The summary entries, in conversation order.
        """
        entries = []
        for conversation in conversations:
            self.write_conversation(conversation)
            entries.append(conversation.summary())

        self.write_summary(entries)
        return entries

    def ensure_landing_page(self, version: str) -> bool:
        """Write index.html unless one already exists.

        Returns:
            True if the page was created.
        """
        path = self.landing_page_path
        if path.exists():
            return False

        logger.info(f"No {LANDING_PAGE_FILE} found, therefore creating {LANDING_PAGE_FILE}")
        _write_atomic(path, render_landing_page(version))
        return True


def _write_atomic(path: Path, text: str) -> None:
    """Write to a temporary sibling, then rename into place."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(f".{path.name}.tmp")
    tmp_path.write_text(text, encoding="utf-8")
    os.replace(tmp_path, path)
