"""IMAP access: mailbox URLs, the session wrapper and THREAD parsing."""

from .session import (
    AuthenticationError,
    ConnectionFailedError,
    ImapSession,
    LoginNotPresentedError,
    MailStoreError,
    ThreadUnsupportedError,
)
from .thread_response import ThreadResponseError, parse_thread_response
from .url import InvalidMailboxURLError, MailboxURL, parse_mailbox_url

__all__ = [
    "ImapSession",
    "MailStoreError",
    "ConnectionFailedError",
    "AuthenticationError",
    "LoginNotPresentedError",
    "ThreadUnsupportedError",
    "ThreadResponseError",
    "parse_thread_response",
    "InvalidMailboxURLError",
    "MailboxURL",
    "parse_mailbox_url",
]
