"""In-place views of a single header name inside a header map.

An entry works on the storage of the map it was taken from: the map keeps
its buckets in a list named ``_buckets`` and its slots in an
:class:`~httpparts.index.IndexTable` named ``_index``.
"""

from __future__ import annotations

from typing import Any, Callable, Iterator, List, Optional, Tuple

from .bucket import Bucket
from .index import Danger, Probe
from .keys import MAX_SIZE, MaxSizeReached


def _remove_found(header_map: Any, slot: int, index: int) -> Bucket:
    """Swap-remove the bucket at ``index`` and clear its ``slot``."""
    buckets: List[Bucket] = header_map._buckets
    last = buckets.pop()
    if index < len(buckets):
        removed = buckets[index]
        buckets[index] = last
        header_map._index.remove(slot, len(buckets), index, last.hash)
    else:
        removed = last
        header_map._index.remove(slot, None, None, None)
    return removed


class OccupiedEntry:
    """A header name that is present in the map, with all of its values."""

    __slots__ = ("_map", "_slot", "_position", "_removed")

    def __init__(self, header_map: Any, slot: int, index: int) -> None:
        self._map = header_map
        self._slot = slot
        self._position = index
        self._removed = False

    @property
    def _bucket(self) -> Bucket:
        if self._removed:
            raise RuntimeError("entry has already been removed from the map")
        return self._map._buckets[self._position]

    def key(self) -> str:
        """The header name of this entry."""
        return self._bucket.key

    def get(self) -> Any:
        """The first value stored under the name."""
        return self._bucket.value

    def set_first(self, value: Any) -> Any:
        """Replace only the first value, keeping the others; return the old one."""
        return self._bucket.set_first(value)

    def insert(self, value: Any) -> Any:
        """Make ``value`` the only value and return the previous first value."""
        return self._bucket.replace(value)[0]

    def insert_mult(self, value: Any) -> Iterator[Any]:
        """Make ``value`` the only value and return every previous value."""
        return iter(self._bucket.replace(value))

    def append(self, value: Any) -> None:
        """Add ``value`` after the values already stored under the name."""
        self._bucket.append(value)

    def remove(self) -> Any:
        """Remove the name and all its values; return the first value."""
        return self.remove_entry()[1]

    def remove_entry(self) -> Tuple[str, Any]:
        """Remove the name and all its values; return the name and first value."""
        bucket = self._take()
        return bucket.key, bucket.value

    def remove_entry_mult(self) -> Tuple[str, Iterator[Any]]:
        """Remove the name and return it with an iterator over all its values."""
        bucket = self._take()
        return bucket.key, iter(list(bucket))

    def _take(self) -> Bucket:
        self._bucket  # raises if already removed
        removed = _remove_found(self._map, self._slot, self._position)
        self._removed = True
        return removed

    def __iter__(self) -> Iterator[Any]:
        return iter(self._bucket)

    def or_insert(self, default: Any) -> Any:
        """The first value; ``default`` is ignored as the name is present."""
        return self.get()

    def or_insert_with(self, factory: Callable[[], Any]) -> Any:
        """The first value; ``factory`` is not called as the name is present."""
        return self.get()

    def __repr__(self) -> str:
        if self._removed:
            return "OccupiedEntry(<removed>)"
        return f"OccupiedEntry({self.key()!r}, {list(self)!r})"


class VacantEntry:
    """A header name that is absent from the map, with the slot it belongs in."""

    __slots__ = ("_map", "_key", "_hash", "_probe", "_used")

    def __init__(self, header_map: Any, key: str, hash_value: int, probe: Probe) -> None:
        self._map = header_map
        self._key = key
        self._hash = hash_value
        self._probe = probe
        self._used = False

    def key(self) -> str:
        """The header name this entry would be stored under."""
        return self._key

    def _store(self, value: Any) -> int:
        if self._used:
            raise RuntimeError("vacant entry has already been filled")
        buckets: List[Bucket] = self._map._buckets
        index = len(buckets)
        if index >= MAX_SIZE:
            raise MaxSizeReached()
        buckets.append(Bucket(self._key, value, self._hash))
        table = self._map._index
        table.shift_insert(self._probe.slot, index, self._hash)
        if self._probe.danger and table.danger is Danger.GREEN:
            table.danger = Danger.YELLOW
        self._used = True
        return index

    def insert(self, value: Any) -> Any:
        """Store ``value`` under the name and return it."""
        index = self._store(value)
        return self._map._buckets[index].value

    def insert_entry(self, value: Any) -> OccupiedEntry:
        """Store ``value`` under the name and return the now occupied entry."""
        index = self._store(value)
        return OccupiedEntry(self._map, self._probe.slot, index)

    def or_insert(self, default: Any) -> Any:
        """Store ``default`` under the name and return it."""
        return self.insert(default)

    def or_insert_with(self, factory: Callable[[], Any]) -> Any:
        """Store the result of ``factory()`` under the name and return it."""
        return self.insert(factory())

    def __repr__(self) -> str:
        return f"VacantEntry({self._key!r})"