"""Inventory: an immutable set of object identities managed as one application."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from kapply.models.identity import ObjectIdentity


class Inventory:
    """Immutable, deduplicated set of ObjectIdentity.

    Equality is set equality. Iteration yields identities in sorted order
    so that anything derived from an Inventory is deterministic.
    """

    __slots__ = ("_items",)

    def __init__(self, identities: Iterable[ObjectIdentity] = ()) -> None:
        self._items: frozenset[ObjectIdentity] = frozenset(identities)

    def union(self, other: Inventory) -> Inventory:
        return Inventory(self._items | other._items)

    def difference(self, other: Inventory) -> Inventory:
        """Identities in this inventory that are not in *other*."""
        return Inventory(self._items - other._items)

    def contains(self, identity: ObjectIdentity) -> bool:
        return identity in self._items

    def is_empty(self) -> bool:
        return not self._items

    def sorted(self) -> list[ObjectIdentity]:
        return sorted(self._items)

    def __contains__(self, identity: object) -> bool:
        return identity in self._items

    def __iter__(self) -> Iterator[ObjectIdentity]:
        return iter(self.sorted())

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Inventory):
            return NotImplemented
        return self._items == other._items

    def __hash__(self) -> int:
        return hash(self._items)

    def __or__(self, other: Inventory) -> Inventory:
        return self.union(other)

    def __sub__(self, other: Inventory) -> Inventory:
        return self.difference(other)

    def __repr__(self) -> str:
        return f"Inventory([{', '.join(str(i) for i in self.sorted())}])"


def union(*inventories: Inventory) -> Inventory:
    """Union of any number of inventories; no arguments yields an empty Inventory."""
    merged: set[ObjectIdentity] = set()
    for inv in inventories:
        merged.update(inv._items)
    return Inventory(merged)


def difference(a: Inventory, b: Inventory) -> Inventory:
    return a.difference(b)
