"""Splits raw purl strings into decoded components.

The decoder only deals with the structure of the string:
``pkg:type/namespace/name@version?qualifiers#subpath``. Legality rules
and case folding are left to `purler.normalizer`.
"""

from __future__ import annotations

import logging
import re
from typing import List, NamedTuple, Optional, Tuple

from .encoding import percent_decode
from .exceptions import MissingComponentError, ParseError
from .types import fold_case

logger = logging.getLogger(__name__)

SCHEME = "pkg"

_PORT = re.compile(r":\d+$")


class DecodedPurl(NamedTuple):
    """Components of a purl string, percent-decoded but not yet normalized."""

    type: str
    namespace: Tuple[str, ...]
    name: str
    version: Optional[str]
    qualifiers: List[Tuple[str, str]]
    subpath: Tuple[str, ...]


def _decode(value: str, component: str) -> str:
    try:
        return percent_decode(value)
    except ValueError as e:
        raise ParseError(str(e), component) from e


def _decode_segment(value: str, component: str) -> str:
    segment = _decode(value, component)
    if "/" in segment:
        raise ParseError(f"segment '{value}' decodes to a value containing '/'", component)
    return segment


def split_qualifiers(raw: str) -> List[Tuple[str, str]]:
    """Splits an encoded ``key=value&key=value`` string into decoded pairs.

    Pairs are split on their first "=", so values may contain "=". A bare
    key maps to an empty value. Empty pairs are skipped.

    Raises:
        ParseError: On malformed escapes or a key repeated (case-insensitively).
    """
    pairs: List[Tuple[str, str]] = []
    seen = set()
    for pair in raw.split("&"):
        if not pair:
            continue
        key, _, value = pair.partition("=")
        key = _decode(key, "qualifiers")
        folded = fold_case(key.strip())
        if folded in seen:
            raise ParseError(f"duplicate qualifier key '{folded}'", "qualifiers")
        seen.add(folded)
        pairs.append((key, _decode(value, "qualifiers")))
    return pairs


def decode(raw: str) -> DecodedPurl:
    """Decodes a raw purl string.

    Args:
        raw: A purl such as ``pkg:npm/%40angular/animation@12.3.1``.

    Returns:
        The decoded components. Namespace and subpath are returned as
        segment tuples; empty segments are left for the normalizer to drop.

    Raises:
        MissingComponentError: If `raw` is None.
        ParseError: If the string is not a structurally valid purl.
    """
    if raw is None:
        raise MissingComponentError("a purl string is required", "purl")
    if not isinstance(raw, str):
        raise ParseError(f"expected a string, got {type(raw).__name__}")
    if not raw.strip():
        raise ParseError("purl string is empty")

    scheme, colon, remainder = raw.partition(":")
    if not colon or fold_case(scheme) != SCHEME:
        raise ParseError(f"'{raw}' does not start with the '{SCHEME}:' scheme", "scheme")

    has_authority = remainder.startswith("//")
    remainder = remainder.lstrip("/")

    remainder, _, raw_subpath = remainder.partition("#")
    remainder, _, raw_qualifiers = remainder.partition("?")

    segments = [segment for segment in remainder.split("/") if segment]
    if not segments:
        raise ParseError("a type is required", "type")

    purl_type = segments[0]
    if has_authority and ("@" in purl_type or _PORT.search(purl_type)):
        raise ParseError(f"'{purl_type}' is a URL authority with user info or a port", "scheme")
    if len(segments) < 2:
        raise ParseError(f"'{raw}' has no name after the type", "name")

    name, at, version = segments[-1].rpartition("@")
    if not at:
        name, version = segments[-1], ""
    name = _decode(name, "name")
    if not name.strip():
        raise ParseError("a name is required", "name")

    decoded = DecodedPurl(
        type=purl_type,
        namespace=tuple(_decode_segment(segment, "namespace") for segment in segments[1:-1]),
        name=name,
        version=_decode(version, "version") or None,
        qualifiers=split_qualifiers(raw_qualifiers),
        subpath=tuple(_decode_segment(segment, "subpath") for segment in raw_subpath.split("/")),
    )
    logger.debug(f"Decoded '{raw}' into {decoded}")
    return decoded
