"""An ordered container of fixed-size byte records."""

from __future__ import annotations

from typing import Any, Callable, Iterator, List

__all__ = ["DataList"]

Match = Callable[[bytes, Any], Any]


class DataList:
    """An ordered sequence of byte records, each exactly ``data_size`` bytes.

    Every record added is copied: the first ``data_size`` bytes of the
    given buffer are stored, so later changes to the caller's buffer do
    not reach the list.
    """

    def __init__(self, data_size: int) -> None:
        if data_size < 0:
            raise ValueError("data_size must not be negative")
        self.data_size = data_size
        self._items: List[bytes] = []

    def _copy(self, data: bytes) -> bytes:
        raw = bytes(data)
        if len(raw) < self.data_size:
            raise ValueError(
                f"record needs {self.data_size} bytes, got {len(raw)}"
            )
        return raw[: self.data_size]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[bytes]:
        return iter(list(self._items))

    def __repr__(self) -> str:
        return f"DataList({self.data_size}, {self._items!r})"

    def add_back(self, data: bytes) -> None:
        """Append a copy of ``data``."""
        self._items.append(self._copy(data))

    def add_front(self, data: bytes) -> None:
        """Insert a copy of ``data`` before the first record."""
        self._items.insert(0, self._copy(data))

    def delete_node(self, data: Any, match: Match) -> bool:
        """Remove the first record for which ``match(record, data)`` is true.

        Returns whether a record was removed.
        """
        for position, record in enumerate(self._items):
            if match(record, data):
                del self._items[position]
                return True
        return False

    def delete_at(self, index: int) -> None:
        """Remove the record at ``index``; raises ``IndexError`` if out of range."""
        self._check_index(index)
        del self._items[index]

    def modify_at(self, index: int, data: bytes) -> None:
        """Replace the record at ``index`` with a copy of ``data``."""
        self._check_index(index)
        self._items[index] = self._copy(data)

    def have_same(self, data: Any, match: Match) -> bool:
        """Return whether ``match(record, data)`` is true for some record."""
        return any(match(record, data) for record in self._items)

    def have_same_cmp(self, data: bytes) -> bool:
        """Return whether some record's bytes differ from those of ``data``.

        Only the first ``data_size`` bytes of ``data`` are compared.
        """
        probe = self._copy(data)
        return any(record != probe for record in self._items)

    def foreach(self, func: Callable[[bytes], Any]) -> None:
        """Call ``func`` on every record in order."""
        for record in list(self._items):
            func(record)

    def sort(self, greater: Callable[[bytes, bytes], Any]) -> None:
        """Selection-sort the records in place.

        ``greater(a, b)`` is true when ``a`` belongs after ``b``. Records
        are only moved when a strictly preferred one is found, so the
        order of equal records follows selection sort, not a stable sort.
        """
        items = self._items
        count = len(items)
        for position in range(count):
            smallest = position
            for candidate in range(position + 1, count):
                if greater(items[smallest], items[candidate]):
                    smallest = candidate
            if smallest != position:
                items[smallest], items[position] = items[position], items[smallest]

    def clear(self) -> None:
        """Remove every record."""
        self._items.clear()

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._items):
            raise IndexError("record index out of range")