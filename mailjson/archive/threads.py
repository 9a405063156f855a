"""Flattening of the server's reply-thread tree into conversations.

The THREAD response is a list whose elements are UIDs or nested lists,
to any depth. Each top-level element is one conversation; its UIDs are
collected depth-first, left to right:

    [[101, [102, 103]], 200]  ->  [[101, 102, 103], [200]]
"""

from collections.abc import Sequence
from dataclasses import dataclass

from loguru import logger


@dataclass(frozen=True)
class Leaf:
    """A single message UID."""

    uid: int


@dataclass(frozen=True)
class Branch:
    """An ordered group of child nodes."""

    children: Sequence


ThreadNode = Leaf | Branch


def to_node(value: object) -> ThreadNode | None:
    """Classify a raw thread element, or return None if it is neither kind."""
    # bool is an int subclass but never a UID
    if isinstance(value, int) and not isinstance(value, bool) and value > 0:
        return Leaf(value)
    if isinstance(value, (list, tuple)):
        return Branch(value)
    return None


def flatten(value: object) -> list[int]:
    """Collect every UID under a thread element, depth-first.

    Unrecognized elements are skipped with a warning. Uses an explicit
    stack, so nesting depth is not limited by the recursion limit.
    """
    uids: list[int] = []
    stack = [value]

    while stack:
        item = stack.pop()
        node = to_node(item)
        if isinstance(node, Leaf):
            uids.append(node.uid)
        elif isinstance(node, Branch):
            stack.extend(reversed(node.children))
        else:
            logger.warning(f"Unhandled thread node: {type(item).__name__} {item!r}")

    return uids


def flatten_threads(root: object) -> list[list[int]]:
    """Turn a THREAD structure into one UID list per top-level element.

    Elements that contribute no UID at all are dropped, since a
    conversation needs at least one message.
    """
    if not isinstance(root, (list, tuple)):
        logger.warning(f"Unhandled thread structure: {type(root).__name__}")
        return []

    conversations = []
    for element in root:
        uids = flatten(element)
        if uids:
            conversations.append(uids)
    return conversations
