"""Read-only, key-sorted qualifier mapping."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Dict, Iterable, Iterator, Tuple


class Qualifiers(Mapping):
    """An immutable mapping of qualifier keys to values, iterated in key order.

    Keys are expected to be already normalized (lower-cased and validated);
    see `purler.normalizer.normalize_qualifiers`. Compares equal to any
    mapping holding the same items, regardless of its ordering.
    """

    __slots__ = ("_items",)

    def __init__(self, items: Iterable[Tuple[str, str]] = ()):
        self._items: Dict[str, str] = dict(sorted(items))

    def __getitem__(self, key: str) -> str:
        return self._items[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __hash__(self) -> int:
        return hash(tuple(self._items.items()))

    def __repr__(self) -> str:
        return f"Qualifiers({self._items!r})"

    def to_query(self, encode) -> str:
        """Joins the entries as ``key=value`` pairs with "&", in key order.

        Args:
            encode: Callable applied to each value.
        """
        return "&".join(f"{key}={encode(value)}" for key, value in self._items.items())
