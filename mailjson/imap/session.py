"""IMAP session wrapper.

Thin layer over imaplib exposing exactly what the archiver needs:
connect, log in (password or anonymous), select a mailbox, ask for the
reply-thread structure, and stream every message's raw bytes.
"""

import imaplib
import re
import socket
from collections.abc import Iterator

from loguru import logger

from mailjson.imap.thread_response import ThreadResponseError, parse_thread_response
from mailjson.imap.url import MailboxURL

THREAD_ALGORITHM = "REFERENCES"
CONNECT_TIMEOUT = 30

_UID_RE = re.compile(rb"UID (\d+)")


class MailStoreError(Exception):
    """Error talking to the IMAP server."""

    pass


class ConnectionFailedError(MailStoreError):
    """Server unreachable, greeting failed, or the connection dropped."""

    pass


class AuthenticationError(MailStoreError):
    """Server rejected the login."""

    pass


class LoginNotPresentedError(AuthenticationError):
    """Credentials were given but the server is not waiting for a login."""

    pass


class ThreadUnsupportedError(MailStoreError):
    """Server does not implement UID THREAD (RFC 5256)."""

    pass


class ImapSession:
    """A single blocking IMAP connection.

    Example:
        session = ImapSession(parse_mailbox_url("imaps://imap.example.com"))
        session.connect()
        session.login_anonymous()
        session.select("INBOX")
        threads = session.thread()
        for uid, raw in session.fetch_messages():
            ...
        session.logout()
    """

    def __init__(
        self,
        url: MailboxURL,
        *,
        fetch_batch_size: int = 100,
        logout_timeout: float = 30,
        debug: bool = False,
    ):
        self._url = url
        self._fetch_batch_size = max(1, fetch_batch_size)
        self._logout_timeout = logout_timeout
        self._debug = debug
        self._conn: imaplib.IMAP4 | None = None

    @property
    def url(self) -> MailboxURL:
        return self._url

    @property
    def conn(self) -> imaplib.IMAP4:
        if self._conn is None:
            raise MailStoreError("Not connected")
        return self._conn

    def connect(self) -> None:
        """Open the connection, over TLS for imaps.

        Raises:
            ConnectionFailedError: If the host cannot be reached.
        """
        host, port = self._url.host, self._url.port

        # Dial first so an unreachable host fails with a clear message
        try:
            sock = socket.create_connection((host, port), timeout=CONNECT_TIMEOUT)
        except OSError as e:
            raise ConnectionFailedError(f"Cannot reach {host}:{port}: {e}") from e
        sock.close()
        logger.debug(f"Dial to {host}:{port} succeeded")

        try:
            if self._url.secure:
                logger.info(f"Making a secure connection to {host}")
                self._conn = imaplib.IMAP4_SSL(host, port, timeout=CONNECT_TIMEOUT)
            else:
                self._conn = imaplib.IMAP4(host, port, timeout=CONNECT_TIMEOUT)
        except (OSError, imaplib.IMAP4.error) as e:
            raise ConnectionFailedError(f"IMAP connection to {host} failed: {e}") from e

        if self._debug:
            self._conn.debug = 4

    def login(self, username: str, password: str) -> None:
        """Authenticate with LOGIN.

        Raises:
            LoginNotPresentedError: If the session is not in the NONAUTH state.
            AuthenticationError: If the server rejects the credentials.
        """
        conn = self.conn
        if conn.state != "NONAUTH":
            raise LoginNotPresentedError(
                f"Login not presented (session state is {conn.state})"
            )

        try:
            conn.login(username, password)
        except imaplib.IMAP4.error as e:
            raise AuthenticationError(f"Login failed for {username}: {e}") from e

    def login_anonymous(self) -> None:
        """Authenticate with SASL ANONYMOUS (RFC 4505)."""
        logger.info("Logging in anonymously...")
        try:
            self.conn.authenticate("ANONYMOUS", lambda _challenge: b"anonymous")
        except imaplib.IMAP4.error as e:
            raise AuthenticationError(f"Anonymous login failed: {e}") from e

    def select(self, mailbox: str | None = None) -> int:
        """Open a mailbox read-only.

        Returns:
            Number of messages in the mailbox.
        """
        mailbox = mailbox or self._url.mailbox
        logger.info(f"Selecting mailbox: {mailbox}")

        try:
            typ, data = self.conn.select(_quote_mailbox(mailbox), readonly=True)
        except imaplib.IMAP4.error as e:
            raise MailStoreError(f"Failed to select mailbox {mailbox}: {e}") from e

        if typ != "OK":
            raise MailStoreError(f"Failed to select mailbox {mailbox}: {data}")

        try:
            return int(data[0])
        except (TypeError, ValueError, IndexError):
            return 0

    def supports_thread(self) -> bool:
        """True if the server advertises THREAD=REFERENCES."""
        return f"THREAD={THREAD_ALGORITHM}" in self.conn.capabilities

    def thread(self) -> list:
        """Return the server's thread structure for the selected mailbox.

        Raises:
            ThreadUnsupportedError: If the server cannot thread by references.
        """
        if not self.supports_thread():
            raise ThreadUnsupportedError(
                f"Your IMAP server {self._url.host} does not support UID THREAD (RFC 5256)"
            )

        try:
            typ, data = self.conn.uid("THREAD", THREAD_ALGORITHM, "UTF-8", "ALL")
        except imaplib.IMAP4.error as e:
            raise ThreadUnsupportedError(f"UID THREAD failed: {e}") from e

        if typ != "OK":
            raise ThreadUnsupportedError(f"UID THREAD failed: {data}")

        payload = b"".join(chunk for chunk in data if isinstance(chunk, bytes))
        try:
            return parse_thread_response(payload)
        except ThreadResponseError as e:
            raise MailStoreError(f"Malformed THREAD response: {e}") from e

    def list_uids(self) -> list[int]:
        """Return every UID in the selected mailbox."""
        try:
            typ, data = self.conn.uid("SEARCH", None, "ALL")
        except imaplib.IMAP4.error as e:
            raise MailStoreError(f"UID SEARCH failed: {e}") from e

        if typ != "OK":
            raise MailStoreError(f"UID SEARCH failed: {data}")

        if not data or not data[0]:
            return []
        return [int(x) for x in data[0].split()]

    def fetch_messages(self) -> Iterator[tuple[int, bytes]]:
        """Stream (uid, raw bytes) for every message in the mailbox.

        The generator issues one FETCH per batch and yields each message
        before requesting the next batch. It cannot be restarted.
        """
        uids = self.list_uids()
        logger.info(f"Fetching {len(uids)} messages")

        for start in range(0, len(uids), self._fetch_batch_size):
            batch = uids[start : start + self._fetch_batch_size]
            uid_set = ",".join(str(uid) for uid in batch)

            try:
                typ, data = self.conn.uid("FETCH", uid_set, "(UID BODY.PEEK[])")
            except imaplib.IMAP4.error as e:
                raise MailStoreError(f"UID FETCH {uid_set} failed: {e}") from e
            except OSError as e:
                raise ConnectionFailedError(f"Connection lost during UID FETCH {uid_set}: {e}") from e

            if typ != "OK":
                raise MailStoreError(f"UID FETCH {uid_set} failed: {data}")

            yield from _iter_fetch_response(data)

    def __enter__(self) -> "ImapSession":
        return self

    def __exit__(self, *exc_info) -> None:
        self.logout()

    def logout(self) -> None:
        """Log out, waiting at most logout_timeout seconds for the server."""
        if self._conn is None:
            return

        conn, self._conn = self._conn, None
        try:
            conn.sock.settimeout(self._logout_timeout)
            conn.logout()
        except (OSError, imaplib.IMAP4.error) as e:
            logger.debug(f"Logout did not complete cleanly: {e}")


def _iter_fetch_response(data: list) -> Iterator[tuple[int, bytes]]:
    """Pick (uid, body) pairs out of imaplib's FETCH response list.

    Message data arrives as (envelope, literal) tuples followed by a bytes
    item closing the message. Servers may put the UID item after the
    literal, in which case it is found in that closing item.
    """
    for idx, item in enumerate(data):
        if not isinstance(item, tuple) or len(item) < 2:
            continue

        envelope, body = item[0], item[1]
        match = _UID_RE.search(envelope)
        if match is None and idx + 1 < len(data) and isinstance(data[idx + 1], bytes):
            match = _UID_RE.search(data[idx + 1])

        if match is None:
            logger.warning(f"FETCH response without UID: {envelope[:80]!r}")
            continue

        yield int(match.group(1)), body


def _quote_mailbox(mailbox: str) -> str:
    """Quote a mailbox name for the wire if it contains spaces or quotes."""
    if mailbox.startswith('"') or not re.search(r'[\s"]', mailbox):
        return mailbox
    escaped = mailbox.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'
