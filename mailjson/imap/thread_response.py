"""Parser for the untagged ``THREAD`` response (RFC 5256).

The server answers ``UID THREAD`` with a run of parenthesized lists, e.g.
``(3 6 (4 23)(44 7 96))(200)``. Each top-level list is one thread; nested
lists are branches of the reply tree. Numbers become ints, anything else
is kept as a string so callers can decide what to do with it.
"""

import re

_TOKEN_RE = re.compile(r"\(|\)|[^\s()]+")


class ThreadResponseError(ValueError):
    """The THREAD response has unbalanced parentheses."""

    pass


def parse_thread_response(data: bytes | str | None) -> list:
    """Turn a THREAD response payload into nested Python lists.

    Example:
        >>> parse_thread_response(b"(101 (102 103))(200)")
        [[101, [102, 103]], [200]]

    Raises:
        ThreadResponseError: On unbalanced parentheses.
    """
    if not data:
        return []
    if isinstance(data, bytes):
        data = data.decode("ascii", errors="replace")

    root: list = []
    stack: list[list] = [root]

    for token in _TOKEN_RE.findall(data):
        if token == "(":
            child: list = []
            stack[-1].append(child)
            stack.append(child)
        elif token == ")":
            if len(stack) == 1:
                raise ThreadResponseError(f"Unexpected ')' in {data!r}")
            stack.pop()
        elif token.isdigit():
            stack[-1].append(int(token))
        else:
            stack[-1].append(token)

    if len(stack) != 1:
        raise ThreadResponseError(f"Unclosed '(' in {data!r}")

    return root
