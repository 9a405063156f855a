"""Tests for the archive engine.

The IMAP session is a MagicMock; storage and output use tmp_path.
"""

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from mailjson.archive.builder import conversation_id
from mailjson.archive.writer import ArchiveWriter
from mailjson.storage.rawstore import RawStore
from mailjson.sync.engine import ArchiveEngine, ArchiveResult


def make_raw(uid: int) -> bytes:
    return (
        f"From: Sender {uid} <s{uid}@example.com>\r\n"
        f"Subject: Thread message {uid}\r\n"
        f"Date: Mon, 02 Jan 2006 15:04:05 -0700\r\n"
        f"X-Mailer: test\r\n"
        f"\r\n"
        f"Body of {uid}\r\n"
    ).encode()


@pytest.fixture
def session() -> MagicMock:
    session = MagicMock()
    session.thread.return_value = [[101, [102, 103]], [200]]
    session.fetch_messages.side_effect = lambda: iter(
        [(uid, make_raw(uid)) for uid in (101, 102, 103, 200)]
    )
    return session


@pytest.fixture
def engine(session: MagicMock, tmp_path: Path) -> ArchiveEngine:
    return ArchiveEngine(session, RawStore(tmp_path / "raw"), ArchiveWriter(tmp_path))


class TestFetch:
    """Tests for the fetch phase."""

    def test_stores_every_message(self, engine: ArchiveEngine, tmp_path: Path):
        assert engine.fetch() == 4
        assert (tmp_path / "raw" / "101.txt").read_bytes() == make_raw(101)
        assert (tmp_path / "raw" / "200.txt").exists()

    def test_write_failure_aborts(self, session: MagicMock, tmp_path: Path):
        raw_store = MagicMock()
        raw_store.put.side_effect = OSError("disk full")
        writer = MagicMock()
        engine = ArchiveEngine(session, raw_store, writer)

        with pytest.raises(OSError):
            engine.run()

        assert raw_store.put.call_count == 1
        writer.write_all.assert_not_called()


class TestRun:
    """Tests for a complete run."""

    def test_scenario_two_conversations(self, engine: ArchiveEngine, tmp_path: Path):
        result = engine.run()

        assert result.fetched == 4
        assert result.conversations == 2
        assert result.messages == 4
        assert result.missing == []

        summary = json.loads((tmp_path / "mail.json").read_text(encoding="utf-8"))
        assert [entry["Id"] for entry in summary] == [
            conversation_id(make_raw(101)),
            conversation_id(make_raw(200)),
        ]
        assert [entry["Count"] for entry in summary] == [3, 1]
        assert all(entry["Msgs"][0]["Body"] == "" for entry in summary)

    def test_conversation_documents(self, engine: ArchiveEngine, tmp_path: Path):
        engine.run()

        doc_path = tmp_path / "c" / f"{conversation_id(make_raw(101))}.json"
        data = json.loads(doc_path.read_text(encoding="utf-8"))
        assert [m["UID"] for m in data["Msgs"]] == [101, 102, 103]
        assert data["Msgs"][2]["Body"] == "Body of 103\r\n"
        assert "X-Mailer" not in data["Msgs"][0]["Header"]

    def test_thread_requested_before_fetch(self, engine: ArchiveEngine, session: MagicMock):
        engine.run()

        names = [c[0] for c in session.method_calls]
        assert names.index("thread") < names.index("fetch_messages")

    def test_message_missing_from_fetch(self, session: MagicMock, tmp_path: Path):
        session.fetch_messages.side_effect = lambda: iter(
            [(uid, make_raw(uid)) for uid in (101, 103, 200)]
        )
        engine = ArchiveEngine(session, RawStore(tmp_path / "raw"), ArchiveWriter(tmp_path))

        result = engine.run()

        assert result.missing == [102]
        assert result.unfetched == [102]
        assert result.messages == 4
        doc_path = tmp_path / "c" / f"{conversation_id(make_raw(101))}.json"
        data = json.loads(doc_path.read_text(encoding="utf-8"))
        assert data["Count"] == 3
        assert data["Msgs"][1] == {"Header": None, "UID": 102, "Date": "", "Body": "Missing 102"}

    def test_unknown_thread_nodes_skipped(self, session: MagicMock, engine: ArchiveEngine):
        session.thread.return_value = [[101, "junk"], [200]]

        result = engine.run()

        assert result.conversations == 2
        assert result.messages == 2

    def test_complete_fetch_has_nothing_unfetched(self, engine: ArchiveEngine):
        assert engine.run().unfetched == []

    def test_landing_page_created_once(self, engine: ArchiveEngine, tmp_path: Path):
        assert engine.run().landing_page_created is True
        assert engine.run().landing_page_created is False
        assert (tmp_path / "index.html").exists()

    def test_rerun_is_byte_identical(self, engine: ArchiveEngine, tmp_path: Path):
        engine.run()
        first = (tmp_path / "mail.json").read_bytes()

        engine.run()

        assert (tmp_path / "mail.json").read_bytes() == first


class TestBuild:
    """Tests for building from an already populated raw store."""

    def test_build_without_fetch(self, session: MagicMock, tmp_path: Path):
        raw_store = RawStore(tmp_path / "raw")
        raw_store.put(200, make_raw(200))
        engine = ArchiveEngine(session, raw_store, ArchiveWriter(tmp_path))

        with patch("mailjson.sync.engine.__version__", "9.9"):
            result = engine.build([[200]])

        assert isinstance(result, ArchiveResult)
        assert result.conversations == 1
        session.fetch_messages.assert_not_called()
        assert "mailjson 9.9" in (tmp_path / "index.html").read_text(encoding="utf-8")
