"""Data models for the conversation archive.

Serialized key names (``Id``, ``Count``, ``Msgs``, ``Header``, ``UID``,
``Date``, ``Body``) are the JSON format read by the landing page and must
not change.
"""

from dataclasses import dataclass, field, replace


@dataclass(frozen=True)
class Address:
    """One parsed mailbox from a To/From/Cc header."""

    name: str
    address: str

    def to_dict(self) -> dict:
        return {"Name": self.name, "Address": self.address}


# A header is kept as its text, a list of texts when repeated,
# or a list of addresses for To/From/Cc
HeaderValue = str | list[str] | list[Address]


@dataclass
class Message:
    """A normalized message.

    ``header`` is None for placeholders standing in for messages whose
    raw bytes were never fetched.
    """

    uid: int
    date: str = ""
    body: str = ""
    header: dict[str, HeaderValue] | None = None

    def pruned(self) -> "Message":
        """Copy of this message with the body emptied, for the summary index."""
        return replace(self, body="")

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        header = None
        if self.header is not None:
            header = {name: _header_value_to_json(value) for name, value in self.header.items()}

        return {
            "Header": header,
            "UID": self.uid,
            "Date": self.date,
            "Body": self.body,
        }


@dataclass
class Conversation:
    """One flattened thread: an ordered list of messages.

    ``id`` is the SHA-1 hex digest of the first message's raw bytes.
    """

    id: str
    messages: list[Message] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.messages)

    def summary(self) -> "SummaryEntry":
        """Index entry: id, count and the first message without its body."""
        return SummaryEntry(id=self.id, count=self.count, message=self.messages[0].pruned())

    def to_dict(self) -> dict:
        return {
            "Id": self.id,
            "Count": self.count,
            "Msgs": [message.to_dict() for message in self.messages],
        }


@dataclass
class SummaryEntry:
    """A conversation as listed in mail.json."""

    id: str
    count: int
    message: Message

    def to_dict(self) -> dict:
        return {
            "Id": self.id,
            "Count": self.count,
            "Msgs": [self.message.to_dict()],
        }


def _header_value_to_json(value: HeaderValue) -> str | list:
    if isinstance(value, list):
        return [item.to_dict() if isinstance(item, Address) else item for item in value]
    return value
