"""Normalization of raw messages into archive records.

Parses RFC 2822 bytes with Python's email package, prunes headers,
canonicalizes the date, parses address headers and extracts a plain
text body. Malformed input never raises: the worst outcome is a
message whose body describes what went wrong.
"""

import re
from datetime import datetime
from email import policy
from email.errors import HeaderParseError
from email.header import decode_header, make_header
from email.message import Message as MIMEMessage
from email.parser import BytesParser
from email.utils import getaddresses

import html2text
from loguru import logger

from mailjson.archive.headers import (
    ADDRESS_HEADERS,
    HEADER_DENYLIST,
    canonical_header_name,
    is_pruned,
)
from mailjson.archive.models import Address, HeaderValue, Message

# RFC 1123 with numeric zone: "Mon, 02 Jan 2006 15:04:05 -0700"
RFC1123Z_FORMAT = "%a, %d %b %Y %H:%M:%S %z"

_FOLD_RE = re.compile(r"\r?\n[ \t]+")
_HEADER_END_RE = re.compile(rb"^\r?\n|\r?\n\r?\n")


class MimeExtractionError(Exception):
    """No readable text could be extracted from a multipart message."""

    pass


class MessageNormalizer:
    """Turns raw message bytes into a :class:`Message`.

    Holds no per-message state; one instance can normalize any number
    of messages.

    Example:
        normalizer = MessageNormalizer()
        message = normalizer.normalize(101, raw_bytes)
    """

    def __init__(self, denylist: frozenset[str] = HEADER_DENYLIST):
        self._denylist = denylist
        # BytesParser with the compat32 policy copes with real-world
        # malformed mail better than the "email" policy.
        self._parser = BytesParser(policy=policy.compat32)

    def normalize(self, uid: int, raw: bytes) -> Message:
        msg = self._parser.parsebytes(raw)
        headers = self._collect_headers(msg)

        if msg.get_content_maintype() == "multipart":
            try:
                body = extract_text(msg)
            except MimeExtractionError as e:
                logger.warning(f"UID {uid}: {e}")
                body = str(e)
            else:
                if "Subject" in headers:
                    headers["Subject"] = [decode_words(headers["Subject"][0])]
        else:
            body = _raw_body(raw)

        raw_date = headers.pop("Date", [""])[0]
        date = raw_date
        if raw_date:
            parsed = parse_date(raw_date)
            if parsed is None:
                logger.debug(f"UID {uid}: didn't grok date {raw_date!r}")
            else:
                date = parsed.isoformat()

        header: dict[str, HeaderValue] = {}
        for name, values in headers.items():
            header[name] = values[0] if len(values) == 1 else values

        for name in ADDRESS_HEADERS:
            if name not in headers:
                continue
            addresses = parse_address_list(", ".join(headers[name]))
            if addresses is None:
                logger.debug(f"UID {uid}: dropping unparsable {name} header")
                del header[name]
            else:
                header[name] = addresses

        return Message(uid=uid, date=date, body=body, header=header)

    def _collect_headers(self, msg: MIMEMessage) -> dict[str, list[str]]:
        """Kept headers by canonical name, values in order of appearance."""
        collected: dict[str, list[str]] = {}
        for name, value in msg.raw_items():
            if is_pruned(name, self._denylist):
                continue
            collected.setdefault(canonical_header_name(name), []).append(_header_text(value))
        return collected


def parse_date(value: str) -> datetime | None:
    """Parse an RFC 1123 date with numeric zone, or return None."""
    try:
        return datetime.strptime(value.strip(), RFC1123Z_FORMAT)
    except ValueError:
        return None


def parse_address_list(value: str) -> list[Address] | None:
    """Parse a comma-separated address list, or return None if any entry is bad."""
    pairs = getaddresses([value])
    if not pairs:
        return None

    addresses = []
    for name, addr in pairs:
        if not addr or "@" not in addr:
            return None
        addresses.append(Address(name=decode_words(name), address=addr))
    return addresses


def decode_words(value: str) -> str:
    """Decode RFC 2047 encoded words (``=?utf-8?q?...?=``), if any."""
    if "=?" not in value:
        return value
    try:
        return str(make_header(decode_header(value)))
    except (HeaderParseError, LookupError, UnicodeDecodeError):
        return value


def extract_text(msg: MIMEMessage) -> str:
    """Return the first text/plain part, else the first text/html part as text.

    Raises:
        MimeExtractionError: If the structure is broken or holds no text.
    """
    if not msg.is_multipart():
        reason = "boundary not found" if msg.defects else "no parts"
        raise MimeExtractionError(f"cannot parse {msg.get_content_type()} body: {reason}")

    body_plain = None
    body_html = None

    for part in msg.walk():
        # Skip multipart containers themselves
        if part.get_content_maintype() == "multipart":
            continue
        if part.get_content_disposition() == "attachment":
            continue

        content_type = part.get_content_type()
        if content_type == "text/plain" and body_plain is None:
            body_plain = _decode_part(part)
        elif content_type == "text/html" and body_html is None:
            body_html = _decode_part(part)

    if body_plain is not None:
        return body_plain
    if body_html is not None:
        return html_to_text(body_html)

    raise MimeExtractionError(f"no text part in {msg.get_content_type()} message")


def html_to_text(html: str) -> str:
    converter = html2text.HTML2Text()
    converter.unicode_snob = True
    converter.body_width = 0
    return converter.handle(html)


def _decode_part(part: MIMEMessage) -> str:
    payload = part.get_payload(decode=True) or b""
    charset = part.get_content_charset() or "utf-8"
    try:
        return payload.decode(charset, errors="replace")
    except LookupError as e:
        raise MimeExtractionError(f"unknown charset {charset!r}") from e


def _header_text(value: str) -> str:
    """Unfold a raw header value and recover any 8-bit bytes as UTF-8."""
    text = _FOLD_RE.sub(" ", value).strip()
    return text.encode("utf-8", "surrogateescape").decode("utf-8", errors="replace")


def _raw_body(raw: bytes) -> str:
    """Single-part body exactly as sent, without transfer decoding."""
    match = _HEADER_END_RE.search(raw)
    if match is None:
        return ""
    return raw[match.end() :].decode("utf-8", errors="replace")
