"""mailjson: mirror an IMAP mailbox into a conversation-grouped JSON archive."""

__version__ = "0.3.0"
