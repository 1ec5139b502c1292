from __future__ import annotations

from typing import Any, Iterable


# Marks a position that has never been fetched. Distinct from None, which is
# a legitimate element value.
_UNKNOWN = object()


class SparseCache:
    """Absolute-position element store with holes.

    ``len(cache)`` is the populated extent (highest known position + 1), not
    the number of known elements. Positions below the extent that were never
    fetched stay unknown until a fetch covers them.
    """

    def __init__(self) -> None:
        self._slots: list[Any] = []

    def __len__(self) -> int:
        return len(self._slots)

    def clear(self) -> None:
        self._slots = []

    def known(self, pos: int) -> bool:
        return 0 <= pos < len(self._slots) and self._slots[pos] is not _UNKNOWN

    def get(self, pos: int) -> Any:
        """Return the element at ``pos`` or None when unknown."""

        if not self.known(pos):
            return None
        return self._slots[pos]

    def merge(self, start: int, items: Iterable[Any]) -> int:
        """Write ``items`` at ``[start, start + n)``; return n.

        Positions that already hold an element keep it.
        """

        n = 0
        for n, item in enumerate(items, start=1):
            pos = start + n - 1
            if pos >= len(self._slots):
                self._slots.extend([_UNKNOWN] * (pos + 1 - len(self._slots)))
            if self._slots[pos] is _UNKNOWN:
                self._slots[pos] = item
        return n
