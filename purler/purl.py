"""PURL model and helpers."""

from __future__ import annotations

import logging
from typing import Any, ClassVar, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_serializer, model_validator

from .decoder import decode
from .encoding import percent_encode
from .normalizer import Segments, normalize
from .qualifiers import Qualifiers

logger = logging.getLogger(__name__)


class PackageURL(BaseModel):
    """Represents a Package URL (purl).

    A purl is a URI that represents a software package in a mostly
    unambiguous way.
    See: https://github.com/package-url/purl-spec

    Instances are immutable and always normalized: every construction path
    (`from_string`, `build`, or keyword construction) runs the same
    validation and normalization, so equal identifiers compare equal no
    matter how they were written.

    Attributes:
        type: The package "type" or package management system, lower-cased.
        namespace: Some name prefix such as a Maven groupid, a Docker image owner, etc.
            Segments are joined with "/".
        name: The name of the package.
        version: The version of the package.
        qualifiers: Extra qualifying data for a package such as an OS, architecture, etc.
            A read-only mapping iterated in key order.
        subpath: Extra subpath within a package, relative to the package root.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    scheme: ClassVar[str] = "pkg"

    type: str
    namespace: Optional[str] = None
    name: str
    version: Optional[str] = None
    qualifiers: Qualifiers = Field(default_factory=Qualifiers)
    subpath: Optional[str] = None

    _canonical: Optional[str] = PrivateAttr(default=None)

    @model_validator(mode="before")
    @classmethod
    def normalize_components(cls, data: Any) -> Any:
        """Runs the normalizer over keyword input.

        Accepts an extra ``encoded`` flag for percent-encoded component
        values. Errors from the normalizer propagate unchanged.
        """
        if not isinstance(data, dict):
            return data
        components = normalize(
            data.get("type"),
            data.get("namespace"),
            data.get("name"),
            version=data.get("version"),
            qualifiers=data.get("qualifiers"),
            subpath=data.get("subpath"),
            encoded=data.get("encoded", False),
        )
        return {
            "type": components.type,
            "namespace": "/".join(components.namespace) or None,
            "name": components.name,
            "version": components.version,
            "qualifiers": components.qualifiers,
            "subpath": "/".join(components.subpath) or None,
        }

    @field_serializer("qualifiers")
    def dump_qualifiers(self, qualifiers: Qualifiers) -> Dict[str, str]:
        return dict(qualifiers)

    @classmethod
    def from_string(cls, purl: str) -> PackageURL:
        """Parses a purl string.

        Args:
            purl: A raw purl, e.g. ``pkg:maven/org.apache.commons/io@1.3.4``.

        Returns:
            The normalized PackageURL.

        Raises:
            MissingComponentError: If `purl` is None.
            ParseError: If the string is structurally malformed.
            ValidationError: If a decoded component is illegal.
        """
        decoded = decode(purl)
        instance = cls(
            type=decoded.type,
            namespace=decoded.namespace,
            name=decoded.name,
            version=decoded.version,
            qualifiers=dict(decoded.qualifiers),
            subpath=decoded.subpath,
        )
        logger.debug(f"Parsed '{purl}' as {instance}")
        return instance

    @classmethod
    def build(
        cls,
        type: str,
        namespace: Segments = None,
        name: Optional[str] = None,
        version: Optional[str] = None,
        qualifiers: Any = None,
        subpath: Segments = None,
        encoded: bool = False,
    ) -> PackageURL:
        """Builds a PackageURL from discrete components.

        Args:
            type: The package type.
            namespace: A "/"-delimited string or a sequence of segments.
            name: The package name (required).
            version: The package version.
            qualifiers: A mapping of qualifier keys to values, or an encoded
                ``key=value&...`` string.
            subpath: A "/"-delimited string or a sequence of segments.
            encoded: Whether the values are percent-encoded and must be
                decoded first.

        Raises:
            MissingComponentError: If `type` or `name` is None.
            ValidationError: If any component is illegal.
        """
        return cls(
            type=type,
            namespace=namespace,
            name=name,
            version=version,
            qualifiers=qualifiers,
            subpath=subpath,
            encoded=encoded,
        )

    @property
    def namespace_segments(self) -> Tuple[str, ...]:
        return tuple(self.namespace.split("/")) if self.namespace else ()

    @property
    def subpath_segments(self) -> Tuple[str, ...]:
        return tuple(self.subpath.split("/")) if self.subpath else ()

    def _serialize(self, with_qualifiers: bool, with_subpath: bool) -> str:
        purl = f"{self.scheme}:{self.type}/"
        if self.namespace:
            purl += "/".join(percent_encode(segment) for segment in self.namespace_segments) + "/"
        purl += percent_encode(self.name)
        if self.version is not None:
            purl += f"@{percent_encode(self.version)}"
        if with_qualifiers and self.qualifiers:
            purl += f"?{self.qualifiers.to_query(percent_encode)}"
        if with_subpath and self.subpath:
            purl += "#" + "/".join(percent_encode(segment) for segment in self.subpath_segments)
        return purl

    def to_string(self) -> str:
        """Returns the canonical purl string.

        Computed on first use and memoized. Concurrent first calls may both
        compute it; they produce the same string.
        """
        if self._canonical is None:
            self._canonical = self._serialize(with_qualifiers=True, with_subpath=True)
        return self._canonical

    canonicalize = to_string

    def coordinates(self) -> str:
        """Returns the canonical string without qualifiers and subpath."""
        return self._serialize(with_qualifiers=False, with_subpath=False)

    def to_dict(self) -> Dict[str, Any]:
        """Returns the components as a plain dictionary."""
        return self.model_dump()

    def model_copy(self, *, update: Optional[Dict[str, Any]] = None, deep: bool = False) -> PackageURL:
        """Returns a copy with `update` applied.

        The copy is validated and normalized like any new instance and
        starts with an empty canonical string cache.
        """
        return type(self).model_validate({**self.to_dict(), **(update or {})})

    def is_coordinates_equal(self, other: PackageURL) -> bool:
        """True if type, namespace, name and version match."""
        return (
            self.type == other.type
            and self.namespace == other.namespace
            and self.name == other.name
            and self.version == other.version
        )

    def is_canonical_equal(self, other: PackageURL) -> bool:
        """True if all components match, qualifiers compared as a mapping."""
        return (
            self.is_coordinates_equal(other)
            and self.qualifiers == other.qualifiers
            and self.subpath == other.subpath
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PackageURL):
            return NotImplemented
        return self.is_canonical_equal(other)

    def __hash__(self) -> int:
        return hash(self.to_string())

    def __str__(self) -> str:
        return self.to_string()


def parse(purl: str) -> PackageURL:
    """Parses a purl string. See `PackageURL.from_string`."""
    return PackageURL.from_string(purl)


def build(
    type: str,
    namespace: Segments = None,
    name: Optional[str] = None,
    version: Optional[str] = None,
    qualifiers: Any = None,
    subpath: Segments = None,
    encoded: bool = False,
) -> PackageURL:
    """Builds a purl from discrete components. See `PackageURL.build`."""
    return PackageURL.build(type, namespace, name, version, qualifiers, subpath, encoded=encoded)


def is_coordinates_equal(a: PackageURL, b: PackageURL) -> bool:
    return a.is_coordinates_equal(b)


def is_canonical_equal(a: PackageURL, b: PackageURL) -> bool:
    return a.is_canonical_equal(b)
