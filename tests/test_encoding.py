"""Tests for percent-encoding helpers."""
import pytest

from purler.encoding import percent_decode, percent_encode


def test_unreserved_characters_are_not_encoded() -> None:
    assert percent_encode("Az09+.-_~") == "Az09+.-_~"


@pytest.mark.parametrize(
    "value,expected",
    [
        ("a/b", "a%2Fb"),
        ("@angular", "%40angular"),
        ("sha256:abc", "sha256%3Aabc"),
        ("a b", "a%20b"),
        ("k=v&x?y#z", "k%3Dv%26x%3Fy%23z"),
        ("100%", "100%25"),
        ("café", "caf%C3%A9"),
    ],
)
def test_reserved_characters_are_encoded(value: str, expected: str) -> None:
    assert percent_encode(value) == expected


def test_decode_accepts_lower_and_upper_hex() -> None:
    assert percent_decode("%e2%82%AC") == "€"


def test_decode_leaves_plus_alone() -> None:
    assert percent_decode("a+b%2Bc") == "a+b+c"


def test_decode_without_escapes_is_identity() -> None:
    assert percent_decode("plain") == "plain"


@pytest.mark.parametrize("value", ["%", "%2", "abc%G0", "%%41"])
def test_decode_rejects_malformed_escapes(value: str) -> None:
    with pytest.raises(ValueError):
        percent_decode(value)


def test_decode_rejects_invalid_utf8() -> None:
    with pytest.raises(ValueError):
        percent_decode("%FF%FE")
