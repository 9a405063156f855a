"""Header pruning table.

Transport, list-management, threading and client metadata is dropped
from every archived message to keep mail.json small. Names are matched
case-insensitively.
"""

HEADER_DENYLIST: frozenset[str] = frozenset(
    name.lower()
    for name in (
        "Accept-Language",
        "Content-Disposition",
        "Content-Language",
        "Content-Transfer-Encoding",
        "Content-Type",
        "Delivered-To",
        "DKIM-Signature",
        "Errors-To",
        "In-Reply-To",
        "List-Archive",
        "List-Help",
        "List-Id",
        "List-Post",
        "List-Subscribe",
        "List-Unsubscribe",
        "Message-Id",
        "MIME-Version",
        "Precedence",
        "Received",
        "References",
        "Reply-To",
        "Resent-Cc",
        "Resent-Date",
        "Resent-From",
        "Resent-Message-Id",
        "Resent-Sender",
        "Resent-To",
        "Return-Path",
        "Sender",
        "Thread-Index",
        "Thread-Topic",
        "User-Agent",
    )
)

# Extension headers, always dropped
PRUNED_PREFIX = "x-"

# Headers replaced by a parsed address list
ADDRESS_HEADERS = ("To", "From", "Cc")


def canonical_header_name(name: str) -> str:
    """Capitalize each dash-separated word: ``message-ID`` -> ``Message-Id``."""
    return "-".join(word[:1].upper() + word[1:].lower() for word in name.strip().split("-"))


def is_pruned(name: str, denylist: frozenset[str] = HEADER_DENYLIST) -> bool:
    """True if the header never makes it into the archive."""
    lowered = name.strip().lower()
    return lowered in denylist or lowered.startswith(PRUNED_PREFIX)
