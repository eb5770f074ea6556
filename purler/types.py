"""Package types and the per-type normalization and legality table.

Every ecosystem-specific exception to the generic purl rules lives in
`TYPE_POLICIES`. The normalizer looks a type up here and never special-cases
a type name itself, so supporting a new ecosystem means registering a
`TypePolicy`, either in code with `register_type_policy` or through the
``[tool.purler.types.<type>]`` table in ``pyproject.toml``.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from .exceptions import ValidationError

if TYPE_CHECKING:
    from .normalizer import Components

logger = logging.getLogger(__name__)


class StandardTypes:
    """Well-known purl type names."""

    ALPM = "alpm"
    APK = "apk"
    BITBUCKET = "bitbucket"
    BITNAMI = "bitnami"
    CARGO = "cargo"
    COCOAPODS = "cocoapods"
    COMPOSER = "composer"
    CONAN = "conan"
    CONDA = "conda"
    CPAN = "cpan"
    CRAN = "cran"
    DEB = "deb"
    DOCKER = "docker"
    GEM = "gem"
    GENERIC = "generic"
    GITHUB = "github"
    GOLANG = "golang"
    HACKAGE = "hackage"
    HEX = "hex"
    HUGGINGFACE = "huggingface"
    LUAROCKS = "luarocks"
    MAVEN = "maven"
    MLFLOW = "mlflow"
    NPM = "npm"
    NUGET = "nuget"
    OCI = "oci"
    PUB = "pub"
    PYPI = "pypi"
    QPKG = "qpkg"
    RPM = "rpm"
    SWID = "swid"
    SWIFT = "swift"


def fold_case(value: str) -> str:
    """Lower-cases a component value.

    `str.lower` applies the Unicode default case mapping and never consults
    the process locale, so e.g. "I" always becomes "i".
    """
    return value.lower()


# Receives and returns `Components`.
Rule = Callable[[Any], Any]


class TypePolicy(BaseModel):
    """Normalization flags and legality rules for one purl type.

    Attributes:
        lowercase_namespace: Lower-case every namespace segment.
        lowercase_name: Lower-case the name.
        lowercase_version: Lower-case the version.
        dash_underscores: Replace "_" with "-" in the name.
        requires_namespace: Reject purls without a namespace.
        requires_version: Reject purls without a version.
        rules: Extra callables run last. Each receives the normalized
            components and returns them, possibly adjusted, or raises
            `ValidationError`.
    """

    model_config = ConfigDict(frozen=True)

    lowercase_namespace: bool = False
    lowercase_name: bool = False
    lowercase_version: bool = False
    dash_underscores: bool = False
    requires_namespace: bool = False
    requires_version: bool = False
    rules: Tuple[Rule, ...] = ()

    def apply(self, components: Components) -> Components:
        """Applies this policy to already normalized components."""
        namespace = components.namespace
        name = components.name
        version = components.version

        if self.lowercase_namespace:
            namespace = tuple(fold_case(segment) for segment in namespace)
        if self.lowercase_name:
            name = fold_case(name)
        if self.dash_underscores:
            name = name.replace("_", "-")
        if self.lowercase_version and version is not None:
            version = fold_case(version)

        if self.requires_namespace and not namespace:
            raise ValidationError(f"a namespace is required for '{components.type}' purls", "namespace")
        if self.requires_version and version is None:
            raise ValidationError(f"a version is required for '{components.type}' purls", "version")

        components = components._replace(namespace=namespace, name=name, version=version)
        for rule in self.rules:
            components = rule(components)
        return components


def _conan_channel(components: Components) -> Components:
    """A conan namespace (the user) and the channel qualifier go together."""
    has_channel = "channel" in components.qualifiers
    if components.namespace and not has_channel:
        raise ValidationError("a conan namespace requires the 'channel' qualifier", "qualifiers")
    if has_channel and not components.namespace:
        raise ValidationError("the conan 'channel' qualifier requires a namespace", "namespace")
    return components


def _mlflow_registry_case(components: Components) -> Components:
    """Databricks model names are case-insensitive, Azure ML ones are not."""
    repository_url = components.qualifiers.get("repository_url", "")
    if "databricks" in fold_case(repository_url):
        return components._replace(name=fold_case(components.name))
    return components


_AUTHORITY_SEGMENT = re.compile(r"@|:\d+$")


def _no_authority(components: Components) -> Components:
    """Rejects a leading namespace segment shaped like user@host or host:port."""
    if components.namespace and _AUTHORITY_SEGMENT.search(components.namespace[0]):
        raise ValidationError(
            f"'{components.namespace[0]}' looks like a URL authority, which purls never carry",
            "namespace",
        )
    return components


_CASE_INSENSITIVE = TypePolicy(lowercase_namespace=True, lowercase_name=True)
_HOSTED_REPOSITORY = TypePolicy(lowercase_namespace=True, lowercase_name=True, requires_namespace=True)

DEFAULT_TYPE_POLICY = TypePolicy()

TYPE_POLICIES: Dict[str, TypePolicy] = {
    StandardTypes.ALPM: _CASE_INSENSITIVE,
    StandardTypes.APK: _CASE_INSENSITIVE,
    StandardTypes.BITBUCKET: _HOSTED_REPOSITORY,
    StandardTypes.COMPOSER: _CASE_INSENSITIVE,
    StandardTypes.CONAN: TypePolicy(rules=(_conan_channel,)),
    StandardTypes.CRAN: TypePolicy(requires_version=True),
    StandardTypes.DEB: _CASE_INSENSITIVE,
    StandardTypes.GENERIC: TypePolicy(rules=(_no_authority,)),
    StandardTypes.GITHUB: _HOSTED_REPOSITORY,
    StandardTypes.GOLANG: _CASE_INSENSITIVE,
    StandardTypes.HEX: _CASE_INSENSITIVE,
    StandardTypes.HUGGINGFACE: TypePolicy(lowercase_version=True),
    StandardTypes.MLFLOW: TypePolicy(rules=(_mlflow_registry_case,)),
    StandardTypes.PYPI: TypePolicy(lowercase_name=True, dash_underscores=True),
    StandardTypes.RPM: TypePolicy(lowercase_namespace=True),
    StandardTypes.SWIFT: TypePolicy(requires_namespace=True, requires_version=True),
}


def get_type_policy(purl_type: str) -> TypePolicy:
    """Returns the policy for a lower-cased type, or the permissive default."""
    return TYPE_POLICIES.get(purl_type, DEFAULT_TYPE_POLICY)


def register_type_policy(purl_type: str, policy: TypePolicy) -> None:
    """Adds or replaces the policy used for `purl_type`."""
    purl_type = fold_case(purl_type.strip())
    if purl_type in TYPE_POLICIES:
        logger.debug(f"Replacing type policy for '{purl_type}'")
    TYPE_POLICIES[purl_type] = policy


def policy_from_settings(settings: Dict[str, Any], base: Optional[TypePolicy] = None) -> TypePolicy:
    """Builds a policy from a plain settings table, ignoring unknown flags.

    Used for ``[tool.purler.types.<type>]`` tables. Rules cannot be expressed
    in TOML, so only the boolean flags are read; they are laid over `base`,
    which keeps its rules.
    """
    known = set(TypePolicy.model_fields) - {"rules"}
    flags = {}
    for key, value in settings.items():
        if key not in known:
            logger.warning(f"Ignoring unknown type policy flag '{key}'. Allowed: {sorted(known)}")
            continue
        if not isinstance(value, bool):
            logger.warning(f"Ignoring non-boolean value for type policy flag '{key}': {value!r}")
            continue
        flags[key] = value
    return (base or DEFAULT_TYPE_POLICY).model_copy(update=flags)
