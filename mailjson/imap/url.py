"""Mailbox address parsing.

Accepted form: ``imap[s]://[user[:password]@]host[:port][/mailbox]``
"""

from dataclasses import dataclass
from urllib.parse import unquote, urlsplit

DEFAULT_PORTS = {"imap": 143, "imaps": 993}
DEFAULT_MAILBOX = "INBOX"


class InvalidMailboxURLError(ValueError):
    """The mailbox address could not be understood."""

    pass


@dataclass(frozen=True)
class MailboxURL:
    """A parsed mailbox address."""

    scheme: str
    host: str
    port: int
    username: str | None = None
    password: str | None = None
    mailbox: str = DEFAULT_MAILBOX

    @property
    def secure(self) -> bool:
        """True when the connection is wrapped in TLS from the start."""
        return self.scheme == "imaps"

    def __str__(self) -> str:
        user = f"{self.username}@" if self.username else ""
        return f"{self.scheme}://{user}{self.host}:{self.port}/{self.mailbox}"


def parse_mailbox_url(value: str) -> MailboxURL:
    """Parse a mailbox address.

    The user part may itself contain ``@`` (e.g. ``me@example.com:secret@host``);
    everything up to the last ``@`` is taken as userinfo.

    Raises:
        InvalidMailboxURLError: On an unsupported scheme, missing host or bad port.
    """
    try:
        parts = urlsplit(value.strip())
    except ValueError as e:
        raise InvalidMailboxURLError(str(e)) from e

    scheme = parts.scheme.lower()
    if scheme not in DEFAULT_PORTS:
        raise InvalidMailboxURLError(
            f"Unsupported scheme {parts.scheme!r}, expected imap or imaps"
        )

    userinfo, _, hostport = parts.netloc.rpartition("@")
    host, _, port_text = hostport.partition(":")
    if not host:
        raise InvalidMailboxURLError(f"No host in {value!r}")

    if port_text:
        if not port_text.isdigit():
            raise InvalidMailboxURLError(f"Invalid port {port_text!r}")
        port = int(port_text)
    else:
        port = DEFAULT_PORTS[scheme]

    username = password = None
    if userinfo:
        user_text, has_password, password_text = userinfo.partition(":")
        username = unquote(user_text)
        password = unquote(password_text) if has_password else None

    mailbox = unquote(parts.path.lstrip("/")) or DEFAULT_MAILBOX

    return MailboxURL(
        scheme=scheme,
        host=host,
        port=port,
        username=username,
        password=password,
        mailbox=mailbox,
    )
