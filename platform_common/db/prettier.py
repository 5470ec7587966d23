"""Render parameterized SQL as a single readable log line.

Bound arguments are interpolated into the query text for logging only. The
result is never sent to the database.

Usage:
    pretty("SELECT * FROM users WHERE id = $1 AND name = $2", PLACEHOLDER_DOLLAR, 42, "Alice")
    # 'SELECT * FROM users WHERE id = 42 AND name = "Alice"'
"""

import re
from typing import Any

PLACEHOLDER_DOLLAR = "$"
PLACEHOLDER_QUESTION = "?"

# Double-quoted literal escapes, in the style of Go's %q.
_ESCAPES = {
    '"': '\\"',
    "\\": "\\\\",
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
}


def _quote(text: str, from_bytes: bool) -> str:
    out = []
    for ch in text:
        escaped = _ESCAPES.get(ch)
        code = ord(ch)
        if escaped is not None:
            out.append(escaped)
        elif from_bytes and 0xDC80 <= code <= 0xDCFF:
            # undecodable byte, kept by surrogateescape
            out.append(f"\\x{code - 0xDC00:02x}")
        elif code < 0x20 or code == 0x7F:
            out.append(f"\\x{code:02x}")
        elif ch.isprintable():
            out.append(ch)
        elif code <= 0xFFFF:
            out.append(f"\\u{code:04x}")
        else:
            out.append(f"\\U{code:08x}")
    return '"' + "".join(out) + '"'


def quote(text: str) -> str:
    """Double-quote text, escaping quotes, backslashes and non-printable characters.

    ASCII controls become \\xHH, other non-printable code points \\uHHHH or
    \\UHHHHHHHH.
    """
    return _quote(text, from_bytes=False)


def quote_bytes(data: bytes) -> str:
    """Quote bytes as UTF-8 text. Bytes that are not valid UTF-8 become \\xHH."""
    return _quote(data.decode("utf-8", errors="surrogateescape"), from_bytes=True)


def render_value(value: Any) -> str:
    """Render one bound argument: text and bytes quoted, anything else via str()."""
    if isinstance(value, str):
        return quote(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return quote_bytes(bytes(value))
    try:
        return str(value)
    except Exception:
        try:
            return repr(value)
        except Exception:
            return f"<{type(value).__name__}>"


def pretty(query: str, placeholder: str, *args: Any) -> str:
    """Interpolate args into query and flatten it onto one line.

    Each argument i (1-based) replaces every occurrence of the token
    placeholder+i. Tokens are matched with their full index, so $1 never
    rewrites the prefix of $10, and substituted text is not scanned again.
    Unbound placeholders stay verbatim.
    """
    if args:
        rendered = [render_value(arg) for arg in args]
        token = re.compile(re.escape(placeholder) + r"([1-9][0-9]*)")

        def substitute(match: "re.Match[str]") -> str:
            index = int(match.group(1))
            if index <= len(rendered):
                return rendered[index - 1]
            return match.group(0)

        query = token.sub(substitute, query)

    query = query.replace("\t", "")
    query = query.replace("\n", " ")
    return query.strip()


__all__ = [
    "PLACEHOLDER_DOLLAR",
    "PLACEHOLDER_QUESTION",
    "pretty",
    "quote",
    "quote_bytes",
    "render_value",
]
