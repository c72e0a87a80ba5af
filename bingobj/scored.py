"""A list of items paired with scores that sorts by score cheaply."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any


class ScoredVec:
    """Items with scalar scores; positional access follows the sort order.

    Sorting reorders only the (score, insertion index) pairs, so the items
    themselves are never moved.
    """

    def __init__(self) -> None:
        self._pairs: list[tuple[Any, int]] = []
        self._items: list[Any] = []

    def __len__(self) -> int:
        return len(self._pairs)

    def __iter__(self) -> Iterator[tuple[Any, Any]]:
        for value, idx in self._pairs:
            yield value, self._items[idx]

    def clear(self) -> None:
        """Remove every entry."""
        self._pairs.clear()
        self._items.clear()

    def push(self, value: Any, item: Any) -> None:
        """Append ``item`` with score ``value``."""
        self._pairs.append((value, len(self._items)))
        self._items.append(item)

    def value(self, i: int) -> Any:
        """Score at position ``i`` in the current order."""
        return self._pairs[i][0]

    def set_value(self, i: int, value: Any) -> None:
        """Replace the score at position ``i``."""
        self._pairs[i] = (value, self._pairs[i][1])

    def item(self, i: int) -> Any:
        """Item at position ``i`` in the current order."""
        return self._items[self._pairs[i][1]]

    @property
    def items(self) -> list[Any]:
        """Items in insertion order."""
        return list(self._items)

    def sort(self, descending: bool = True) -> None:
        """Order by score, ties broken by insertion index in the same direction."""
        self._pairs.sort(reverse=descending)

    def sorted_items(self) -> list[Any]:
        """Items in the current order."""
        return [self._items[idx] for _, idx in self._pairs]

    def append(self, other: "ScoredVec", start: int = 0) -> None:
        """Append the entries of ``other``, scoring the i-th as ``(i + 300) * start``."""
        for i in range(len(other)):
            self.push(float((i + 300) * start), other.item(i))