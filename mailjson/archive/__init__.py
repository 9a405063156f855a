"""Conversation archive: thread flattening, normalization and JSON output."""

from .builder import ConversationBuilder, conversation_id, placeholder_message
from .models import Address, Conversation, Message, SummaryEntry
from .normalize import MessageNormalizer, MimeExtractionError
from .threads import Branch, Leaf, flatten, flatten_threads
from .writer import ArchiveWriter

__all__ = [
    "Address",
    "ArchiveWriter",
    "Branch",
    "Conversation",
    "ConversationBuilder",
    "Leaf",
    "Message",
    "MessageNormalizer",
    "MimeExtractionError",
    "SummaryEntry",
    "conversation_id",
    "flatten",
    "flatten_threads",
    "placeholder_message",
]
