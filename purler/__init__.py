"""Purler: package URL (purl) parsing, validation and canonicalization."""

import logging

from .config import PURLER_CONFIG, apply_type_policies
from .exceptions import MissingComponentError, PackageURLError, ParseError, ValidationError
from .purl import PackageURL, build, is_canonical_equal, is_coordinates_equal, parse
from .qualifiers import Qualifiers
from .types import StandardTypes, TypePolicy, register_type_policy

apply_type_policies(PURLER_CONFIG)
logging.getLogger(__name__).setLevel(PURLER_CONFIG["logging_level_int"])

__all__ = [
    "build",
    "is_canonical_equal",
    "is_coordinates_equal",
    "MissingComponentError",
    "PackageURL",
    "PackageURLError",
    "parse",
    "ParseError",
    "Qualifiers",
    "register_type_policy",
    "StandardTypes",
    "TypePolicy",
    "ValidationError",
]
