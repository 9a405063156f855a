"""Archive engine.

Coordinates one run: ask the server for the thread structure, fetch
every message into the raw store, then build and write conversations.
The build phase starts only once the fetch has been consumed in full.
"""

from dataclasses import dataclass, field

from loguru import logger

from mailjson import __version__
from mailjson.archive.builder import ConversationBuilder
from mailjson.archive.threads import flatten_threads
from mailjson.archive.writer import ArchiveWriter
from mailjson.imap.session import ImapSession
from mailjson.storage.rawstore import RawStore


@dataclass
class ArchiveResult:
    """Counts from an archive run."""

    fetched: int = 0
    conversations: int = 0
    messages: int = 0
    missing: list[int] = field(default_factory=list)
    unfetched: list[int] = field(default_factory=list)
    landing_page_created: bool = False


class ArchiveEngine:
    """Engine turning a selected IMAP mailbox into a JSON archive.

    Example:
        engine = ArchiveEngine(session, RawStore(out / "raw"), ArchiveWriter(out))
        result = engine.run()
        print(f"{result.conversations} conversations")
    """

    def __init__(
        self,
        session: ImapSession,
        raw_store: RawStore,
        writer: ArchiveWriter,
        builder: ConversationBuilder | None = None,
    ):
        self._session = session
        self._raw_store = raw_store
        self._writer = writer
        self._builder = builder or ConversationBuilder(raw_store)

    def fetch(self) -> int:
        """Store every message of the selected mailbox.

        Each message is written before the next one is received. A write
        failure propagates and ends the run.

        Returns:
            Number of messages stored.
        """
        self._raw_store.ensure_dir()

        fetched = 0
        for uid, raw in self._session.fetch_messages():
            self._raw_store.put(uid, raw)
            fetched += 1
            logger.debug(f"Stored raw/{uid}.txt ({len(raw)} bytes)")

        return fetched

    def build(self, threads: list[list[int]], result: ArchiveResult | None = None) -> ArchiveResult:
        """Build and write every conversation, then the summary index."""
        result = result or ArchiveResult()

        def conversations():
            for conversation in self._builder.build_all(threads):
                result.conversations += 1
                result.messages += conversation.count
                result.missing.extend(m.uid for m in conversation.messages if m.header is None)
                yield conversation

        self._writer.write_all(conversations())
        result.landing_page_created = self._writer.ensure_landing_page(__version__)
        return result

    def run(self) -> ArchiveResult:
        """Thread, fetch, then build. The session must have a mailbox selected."""
        threads = flatten_threads(self._session.thread())
        logger.info(f"Found {len(threads)} threads")

        result = ArchiveResult()
        result.fetched = self.fetch()

        stored = set(self._raw_store.uids())
        result.unfetched = sorted({uid for thread in threads for uid in thread} - stored)
        if result.unfetched:
            logger.warning(
                f"{len(result.unfetched)} threaded messages were not fetched: {result.unfetched}"
            )

        return self.build(threads, result)
