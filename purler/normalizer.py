"""Validates and normalizes purl components.

Both construction paths end here: `PackageURL.from_string` feeds it the
output of `purler.decoder.decode`, and field-based construction feeds it
whatever the caller passed. Components are expected decoded unless
``encoded=True`` is given.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any, Iterable, NamedTuple, Optional, Tuple, Union

from .decoder import split_qualifiers
from .encoding import percent_decode
from .exceptions import MissingComponentError, ParseError, ValidationError
from .qualifiers import Qualifiers
from .types import fold_case, get_type_policy

logger = logging.getLogger(__name__)

TYPE_PATTERN = re.compile(r"^[A-Za-z.+-][A-Za-z0-9.+-]*$")
QUALIFIER_KEY_PATTERN = re.compile(r"^[A-Za-z.+_-][A-Za-z0-9.+_-]*$")

_DOT_SEGMENTS = (".", "..")

Segments = Union[str, Iterable[str], None]


class Components(NamedTuple):
    """Normalized purl components."""

    type: str
    namespace: Tuple[str, ...]
    name: str
    version: Optional[str]
    qualifiers: Qualifiers
    subpath: Tuple[str, ...]


def _require_str(value: Any, component: str) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"expected a string, got {type(value).__name__}", component)
    return value


def _decode(value: str, component: str, encoded: bool) -> str:
    if not encoded:
        return value
    try:
        return percent_decode(value)
    except ValueError as e:
        raise ValidationError(str(e), component) from e


def normalize_type(value: Any) -> str:
    """Checks the type grammar and lower-cases the type."""
    value = _require_str(value, "type").strip()
    if not value:
        raise ValidationError("a type is required", "type")
    if value[0].isdigit():
        raise ValidationError(f"'{value}' must not start with a digit", "type")
    if not TYPE_PATTERN.match(value):
        raise ValidationError(
            f"'{value}' may only contain ASCII letters, digits, '.', '+' and '-'", "type"
        )
    return fold_case(value)


def normalize_segments(value: Segments, component: str, encoded: bool = False) -> Tuple[str, ...]:
    """Normalizes a namespace or subpath into a tuple of segments.

    A string is split on "/", a sequence is taken segment by segment. Each
    segment is decoded (when `encoded`), trimmed, and dropped when empty.
    For the subpath, "." and ".." segments are dropped as well.
    """
    if value is None:
        return ()
    if isinstance(value, str):
        raw_segments = value.split("/")
    else:
        raw_segments = [_require_str(segment, component) for segment in value]

    segments = []
    for raw_segment in raw_segments:
        segment = _decode(raw_segment, component, encoded)
        if "/" in segment:
            raise ValidationError(f"segment '{raw_segment}' must not contain '/'", component)
        segment = segment.strip()
        if not segment or (component == "subpath" and segment in _DOT_SEGMENTS):
            if segment:
                logger.debug(f"Dropping '{segment}' segment from {component}")
            continue
        segments.append(segment)
    return tuple(segments)


def normalize_name(value: Any, encoded: bool = False) -> str:
    name = _decode(_require_str(value, "name"), "name", encoded).strip()
    if not name:
        raise ValidationError("a name is required", "name")
    return name


def normalize_version(value: Any, encoded: bool = False) -> Optional[str]:
    if value is None:
        return None
    return _decode(_require_str(value, "version"), "version", encoded) or None


def normalize_qualifiers(value: Any, encoded: bool = False) -> Qualifiers:
    """Validates qualifier keys, lower-cases them and drops empty values.

    Args:
        value: A mapping of keys to values, or an encoded
            ``key=value&...`` string, or None.
        encoded: Whether mapping keys and values are percent-encoded.
            A string is always treated as encoded.

    Returns:
        The key-sorted `Qualifiers` mapping.

    Raises:
        ValidationError: On an illegal key, a non-string value, or two keys
            that only differ by case.
    """
    if value is None:
        return Qualifiers()
    if isinstance(value, str):
        try:
            items = split_qualifiers(value)
        except ParseError as e:
            raise ValidationError(e.reason, e.component) from e
        encoded = False
    elif isinstance(value, Mapping):
        items = list(value.items())
    else:
        raise ValidationError(f"expected a mapping, got {type(value).__name__}", "qualifiers")

    normalized = {}
    for raw_key, raw_value in items:
        key = fold_case(_decode(_require_str(raw_key, "qualifiers"), "qualifiers", encoded).strip())
        if not key:
            raise ValidationError("qualifier keys must not be empty", "qualifiers")
        if not QUALIFIER_KEY_PATTERN.match(key):
            raise ValidationError(
                f"key '{key}' may only contain ASCII letters, digits, '.', '+', '_' and '-' "
                "and must not start with a digit",
                "qualifiers",
            )
        if key in normalized:
            raise ValidationError(f"duplicate qualifier key '{key}'", "qualifiers")
        if raw_value is not None:
            raw_value = _decode(_require_str(raw_value, "qualifiers"), "qualifiers", encoded)
        normalized[key] = raw_value

    dropped = [key for key, item in normalized.items() if not item]
    if dropped:
        logger.debug(f"Dropping qualifiers without a value: {dropped}")
    return Qualifiers((key, item) for key, item in normalized.items() if item)


def normalize(
    type: Any,
    namespace: Segments,
    name: Any,
    version: Any = None,
    qualifiers: Any = None,
    subpath: Segments = None,
    encoded: bool = False,
) -> Components:
    """Validates and normalizes all six purl components.

    Args:
        type: The package type, e.g. "npm".
        namespace: A "/"-delimited string or a sequence of segments.
        name: The package name.
        version: The version, or None.
        qualifiers: A mapping or an encoded query string, or None.
        subpath: A "/"-delimited string or a sequence of segments.
        encoded: Whether the values are still percent-encoded.

    Returns:
        The normalized `Components`, with the type policy applied.

    Raises:
        MissingComponentError: If `type` or `name` is None.
        ValidationError: If any component is illegal.
    """
    if type is None:
        raise MissingComponentError("a type is required", "type")
    if name is None:
        raise MissingComponentError("a name is required", "name")

    components = Components(
        type=normalize_type(type),
        namespace=normalize_segments(namespace, "namespace", encoded),
        name=normalize_name(name, encoded),
        version=normalize_version(version, encoded),
        qualifiers=normalize_qualifiers(qualifiers, encoded),
        subpath=normalize_segments(subpath, "subpath", encoded),
    )
    return get_type_policy(components.type).apply(components)
