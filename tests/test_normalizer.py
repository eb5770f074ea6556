"""Tests for component normalization."""
import pytest

from purler.exceptions import MissingComponentError, ValidationError
from purler.normalizer import (
    Components,
    normalize,
    normalize_name,
    normalize_qualifiers,
    normalize_segments,
    normalize_type,
    normalize_version,
)
from purler.qualifiers import Qualifiers


@pytest.mark.parametrize("value,expected", [("npm", "npm"), ("NPM", "npm"), (" Maven ", "maven"), ("a.b+c-d", "a.b+c-d"), ("-x", "-x")])
def test_normalize_type(value: str, expected: str) -> None:
    assert normalize_type(value) == expected


@pytest.mark.parametrize("value", ["", "   ", "0invalid", "invalid^type", "in valid", "n%70m", "type_with_underscore"])
def test_normalize_type_rejects(value: str) -> None:
    with pytest.raises(ValidationError) as exc_info:
        normalize_type(value)
    assert exc_info.value.component == "type"


def test_type_is_folded_without_locale() -> None:
    """Dotted/dotless i must never appear when lower-casing ASCII types."""
    assert normalize_type("PYPI") == "pypi"
    assert normalize_type("LUAROCKS") == "luarocks"


def test_normalize_namespace_segments() -> None:
    assert normalize_segments("/a//b/ c /", "namespace") == ("a", "b", "c")
    assert normalize_segments(["a", " ", "b"], "namespace") == ("a", "b")
    assert normalize_segments(None, "namespace") == ()
    assert normalize_segments("", "namespace") == ()


def test_namespace_keeps_dot_segments() -> None:
    assert normalize_segments("./..", "namespace") == (".", "..")


def test_subpath_drops_dot_segments() -> None:
    assert normalize_segments("/a/./b/../c/", "subpath") == ("a", "b", "c")
    assert normalize_segments(". / ..", "subpath") == ()


def test_encoded_segments_are_decoded() -> None:
    assert normalize_segments("%40angular", "namespace", encoded=True) == ("@angular",)
    assert normalize_segments("a/%2E%2E/b", "subpath", encoded=True) == ("a", "b")


def test_decoded_segments_are_not_decoded_again() -> None:
    assert normalize_segments("100%25", "namespace") == ("100%25",)


@pytest.mark.parametrize("value,encoded", [(["a/b"], False), ("invalid/%2F/subpath", True)])
def test_segment_with_slash_is_rejected(value, encoded: bool) -> None:
    with pytest.raises(ValidationError) as exc_info:
        normalize_segments(value, "subpath", encoded=encoded)
    assert exc_info.value.component == "subpath"


def test_bad_encoding_in_encoded_segment() -> None:
    with pytest.raises(ValidationError):
        normalize_segments("%zz", "subpath", encoded=True)


def test_normalize_name() -> None:
    assert normalize_name("  Base64 ") == "Base64"
    assert normalize_name("a%2Fb", encoded=True) == "a/b"
    with pytest.raises(ValidationError):
        normalize_name("")


def test_normalize_version() -> None:
    assert normalize_version(None) is None
    assert normalize_version("") is None
    assert normalize_version(" 1.0 ") == " 1.0 "
    assert normalize_version("sha256%3Aabc", encoded=True) == "sha256:abc"
    with pytest.raises(ValidationError):
        normalize_version(1.0)


def test_normalize_qualifiers_lowercases_and_sorts() -> None:
    qualifiers = normalize_qualifiers({"Distro": "jessie", "ARCH": "i386"})
    assert isinstance(qualifiers, Qualifiers)
    assert list(qualifiers.items()) == [("arch", "i386"), ("distro", "jessie")]


def test_normalize_qualifiers_drops_empty_values() -> None:
    assert normalize_qualifiers({"a": None, "b": "", "c": "1"}) == {"c": "1"}


def test_normalize_qualifiers_from_query_string() -> None:
    assert normalize_qualifiers("b=2&A=%201") == {"a": " 1", "b": "2"}


def test_normalize_qualifiers_query_string_duplicates() -> None:
    with pytest.raises(ValidationError) as exc_info:
        normalize_qualifiers("a=1&A=2")
    assert str(exc_info.value) == "qualifiers: duplicate qualifier key 'a'"


def test_normalize_qualifiers_query_string_bad_escape() -> None:
    with pytest.raises(ValidationError):
        normalize_qualifiers("a=%zz")


def test_normalize_qualifiers_encoded_mapping() -> None:
    assert normalize_qualifiers({"url": "a%2Fb"}, encoded=True) == {"url": "a/b"}
    assert normalize_qualifiers({"url": "a%2Fb"}) == {"url": "a%2Fb"}


@pytest.mark.parametrize(
    "qualifiers",
    [
        {"key": "one", "KEY": "two"},
        {"key": "one", "Key": None},
        {"": "value"},
        {"in production": "true"},
        {"1key": "value"},
        {"key": 1},
        {1: "value"},
        ["key=value"],
    ],
)
def test_normalize_qualifiers_rejects(qualifiers) -> None:
    with pytest.raises(ValidationError) as exc_info:
        normalize_qualifiers(qualifiers)
    assert exc_info.value.component == "qualifiers"


def test_normalize_applies_type_policy() -> None:
    components = normalize("PyPI", None, "Django_Package", "1.0", {"Extension": "whl"}, None)
    assert components == Components(
        type="pypi",
        namespace=(),
        name="django-package",
        version="1.0",
        qualifiers=Qualifiers([("extension", "whl")]),
        subpath=(),
    )


def test_normalize_missing_required_arguments() -> None:
    """Missing arguments are reported before any grammar check."""
    with pytest.raises(MissingComponentError):
        normalize(None, None, None)
    with pytest.raises(MissingComponentError) as exc_info:
        normalize("0invalid", None, None)
    assert exc_info.value.component == "name"
