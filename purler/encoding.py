"""Percent-encoding helpers for purl components."""

from __future__ import annotations

import re
from urllib.parse import quote, unquote

# Characters left as-is besides ASCII letters, digits and "_.-~",
# which `quote` never encodes.
SAFE_CHARS = "+"

_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def percent_encode(value: str) -> str:
    """Encodes a single component value for the canonical form.

    Every character outside ``A-Z a-z 0-9 + . - _ ~`` is UTF-8 encoded as
    ``%XX``, so separators such as ``/``, ``@``, ``?`` and ``#`` never
    leak into a segment.

    Args:
        value: The decoded component value.

    Returns:
        The percent-encoded value.
    """
    return quote(value, safe=SAFE_CHARS)


def percent_decode(value: str) -> str:
    """Strictly decodes a percent-encoded component value.

    Args:
        value: The raw, possibly encoded value.

    Returns:
        The decoded value.

    Raises:
        ValueError: If the value holds a malformed escape or the escaped
            bytes are not valid UTF-8.
    """
    if "%" not in value:
        return value
    bad = _BAD_ESCAPE.search(value)
    if bad:
        raise ValueError(f"malformed percent-encoding at position {bad.start()} in '{value}'")
    try:
        return unquote(value, errors="strict")
    except UnicodeDecodeError as e:
        raise ValueError(f"percent-encoded bytes in '{value}' are not valid UTF-8") from e
