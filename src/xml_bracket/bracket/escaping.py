r"""Reserved character escaping for bracket notation.

Braces delimit every node in bracket notation, so literal braces and
backslashes in names, attribute keys, attribute values and text are escaped
with a backslash. The backslash rule emits ``\\}`` (backslash, backslash,
closing brace); the trailing brace is part of the output format.
"""

import re
from typing import Dict

ESCAPE_TABLE: Dict[str, str] = {
    "{": "\\{",
    "}": "\\}",
    "\\": "\\\\}",
}

_TRANSLATION = str.maketrans(ESCAPE_TABLE)

# Longest sequence first so that "\\}" is never read as "\" followed by "\}"
_ESCAPED_SEQUENCE = re.compile(r"\\\\\}|\\\{|\\\}")
_UNESCAPE_TABLE = {escaped: raw for raw, escaped in ESCAPE_TABLE.items()}


def escape(text: str) -> str:
    r"""Escape ``{``, ``}`` and ``\`` for use inside bracket notation.

    Each character is substituted once, so the braces added by the backslash
    rule are not escaped again.
    """
    return text.translate(_TRANSLATION)


def unescape(text: str) -> str:
    """Reverse :func:`escape`."""
    return _ESCAPED_SEQUENCE.sub(lambda m: _UNESCAPE_TABLE[m.group(0)], text)
