"""Credential resolution for IMAP logins.

Credentials come from the mailbox URL, optionally overridden by a
``~/.netrc`` machine entry so the password never has to appear on the
command line.

Usage:
    from mailjson.auth import resolve_credentials

    creds = resolve_credentials(mailbox_url)
    if creds is None:
        ...  # anonymous login
"""

import netrc
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from mailjson.config.paths import NETRC_FILE
from mailjson.imap.url import MailboxURL

__all__ = ["Credentials", "resolve_credentials"]


@dataclass(frozen=True)
class Credentials:
    """Username/password pair for IMAP LOGIN."""

    username: str
    password: str

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, password='***')"


def resolve_credentials(
    url: MailboxURL,
    *,
    use_netrc: bool = True,
    netrc_file: Path | None = None,
) -> Credentials | None:
    """Work out which credentials to log in with.

    Args:
        url: Parsed mailbox address.
        use_netrc: Consult the netrc file for a matching machine entry.
        netrc_file: Override the netrc location (defaults to ~/.netrc).

    Returns:
        Credentials, or None when the URL carries no user (anonymous login).
    """
    if url.username is None:
        return None

    username = url.username
    password = url.password or ""

    if use_netrc:
        entry = _netrc_lookup(url.host, netrc_file or NETRC_FILE)
        if entry is not None:
            username, password = entry
            logger.info(f"Using {username} from {netrc_file or NETRC_FILE}")

    return Credentials(username=username, password=password)


def _netrc_lookup(host: str, path: Path) -> tuple[str, str] | None:
    """Return (login, password) for host from a netrc file, if present."""
    if not path.is_file():
        return None

    try:
        authenticators = netrc.netrc(str(path)).authenticators(host)
    except (netrc.NetrcParseError, OSError) as e:
        logger.warning(f"Ignoring unreadable netrc file {path}: {e}")
        return None

    if authenticators is None:
        return None

    login, _account, password = authenticators
    if not login:
        return None
    return login, password or ""
