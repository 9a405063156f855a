"""Assembly of conversations from flattened UID sequences."""

import hashlib
from collections.abc import Iterable, Iterator, Sequence

from loguru import logger

from mailjson.archive.models import Conversation, Message
from mailjson.archive.normalize import MessageNormalizer
from mailjson.storage.rawstore import RawStore


def conversation_id(raw: bytes) -> str:
    """SHA-1 hex digest of a message's raw bytes."""
    return hashlib.sha1(raw).hexdigest()


def placeholder_message(uid: int) -> Message:
    """Stand-in for a message whose raw bytes were never fetched."""
    return Message(uid=uid, header=None, body=f"Missing {uid}")


class ConversationBuilder:
    """Builds one Conversation per flattened thread.

    The first UID of a thread names the conversation: its raw bytes are
    hashed into the conversation id. When those bytes are missing, the
    placeholder body text (``"Missing <uid>"``) is hashed instead, so the
    id stays stable across runs.

    Example:
        builder = ConversationBuilder(RawStore(Path("raw")))
        conversation = builder.build([101, 102, 103])
    """

    def __init__(self, raw_store: RawStore, normalizer: MessageNormalizer | None = None):
        self._raw_store = raw_store
        self._normalizer = normalizer or MessageNormalizer()

    def build(self, uids: Sequence[int]) -> Conversation:
        """Build a conversation from an ordered, non-empty UID sequence."""
        if not uids:
            raise ValueError("Cannot build a conversation from an empty thread")

        primary_raw = self._raw_store.get(uids[0])
        if primary_raw is None:
            conv_id = conversation_id(placeholder_message(uids[0]).body.encode("utf-8"))
        else:
            conv_id = conversation_id(primary_raw)

        conversation = Conversation(id=conv_id)
        for idx, uid in enumerate(uids):
            raw = primary_raw if idx == 0 else self._raw_store.get(uid)
            conversation.messages.append(self._message(uid, raw))

        return conversation

    def build_all(self, threads: Iterable[Sequence[int]]) -> Iterator[Conversation]:
        """Build conversations one thread at a time, in thread order."""
        for uids in threads:
            yield self.build(uids)

    def _message(self, uid: int, raw: bytes | None) -> Message:
        if raw is None:
            logger.warning(f"Not fetched: {uid}")
            return placeholder_message(uid)
        return self._normalizer.normalize(uid, raw)
