"""A multimap from HTTP header names to values."""

from __future__ import annotations

import copy as _copy
from operator import length_hint
from typing import Any, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from .bucket import Bucket
from .entry import OccupiedEntry, VacantEntry
from .index import (
    Danger,
    IndexTable,
    LOAD_FACTOR_THRESHOLD,
    Probe,
    to_raw_capacity,
    usable_capacity,
)
from .keys import MAX_SIZE, InvalidHeaderName, MaxSizeReached, normalize_name
from .views import GetAll, iter_grouped, iter_items

_INITIAL_RAW_CAPACITY = 8


def _next_power_of_two(n: int) -> int:
    return 1 if n <= 1 else 1 << (n - 1).bit_length()


class HeaderMap:
    """Header names mapped to one or more values each.

    Names are matched case-insensitively and stored in lower case. Values are
    kept in insertion order per name; names are kept roughly in insertion
    order, except that removing a name moves the last name into its place.
    """

    def __init__(self, items: Optional[Iterable[Tuple[Any, Any]]] = None) -> None:
        self._buckets: List[Bucket] = []
        self._index = IndexTable(0)
        if items is not None:
            self.extend(items)

    @classmethod
    def with_capacity(cls, capacity: int) -> "HeaderMap":
        """An empty map with room for about ``capacity`` headers."""
        header_map = cls()
        if capacity > 0:
            raw = _next_power_of_two(to_raw_capacity(capacity))
            if raw > MAX_SIZE:
                raise MaxSizeReached()
            header_map._index = IndexTable(raw)
        return header_map

    @classmethod
    def from_mapping(cls, mapping: Mapping[Any, Any]) -> "HeaderMap":
        """Build a map from a mapping of header names to values."""
        pairs = [(normalize_name(name), value) for name, value in mapping.items()]
        return cls(pairs)

    # ----- sizes -----

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._buckets)

    def keys_len(self) -> int:
        """The number of distinct names."""
        return len(self._buckets)

    def is_empty(self) -> bool:
        return not self._buckets

    def clear(self) -> None:
        """Remove everything, keeping the allocated capacity."""
        self._buckets = []
        self._index.clear()

    def capacity(self) -> int:
        """How many names fit before the map grows."""
        return self._index.capacity()

    def reserve(self, additional: int) -> None:
        """Make room for at least ``additional`` more names."""
        cap = len(self._buckets) + additional
        raw = to_raw_capacity(cap)
        if raw > len(self._index):
            raw = _next_power_of_two(raw)
            if raw > MAX_SIZE:
                raise MaxSizeReached()
            if not self._buckets:
                self._index = IndexTable(raw)
            else:
                self._index.grow(raw)

    # ----- lookup -----

    def _key_at(self, index: int) -> str:
        return self._buckets[index].key

    @staticmethod
    def _lookup_name(key: Any) -> Optional[str]:
        try:
            return normalize_name(key)
        except InvalidHeaderName:
            return None

    def _find(self, key: Any) -> Optional[Tuple[int, int]]:
        name = self._lookup_name(key)
        if name is None or not self._buckets:
            return None
        return self._index.find(name, self._key_at)

    def _bucket_for(self, key: Any) -> Optional[Bucket]:
        found = self._find(key)
        return None if found is None else self._buckets[found[1]]

    def get(self, key: Any, default: Any = None) -> Any:
        """The first value under ``key``, or ``default``."""
        bucket = self._bucket_for(key)
        return default if bucket is None else bucket.value

    def get_all(self, key: Any) -> GetAll:
        """A view of every value under ``key``."""
        return GetAll(self._bucket_for(key))

    def __contains__(self, key: Any) -> bool:
        return self._find(key) is not None

    def __getitem__(self, key: Any) -> Any:
        bucket = self._bucket_for(key)
        if bucket is None:
            raise KeyError(f"no entry found for key {key!r}")
        return bucket.value

    # ----- iteration -----

    def __iter__(self) -> Iterator[str]:
        return self.keys()

    def items(self) -> Iterator[Tuple[str, Any]]:
        """Every ``(name, value)`` pair; a name repeats once per value."""
        return iter_items(self._buckets)

    def keys(self) -> Iterator[str]:
        """Each distinct name once."""
        return (bucket.key for bucket in self._buckets)

    def values(self) -> Iterator[Any]:
        """Every value."""
        return (value for _, value in iter_items(self._buckets))

    def drain(self) -> Iterator[Tuple[Optional[str], Any]]:
        """Empty the map, returning its contents grouped by name.

        A pair whose name is ``None`` belongs to the name yielded before it.
        """
        contents = list(iter_grouped(self._buckets))
        level = self._index.danger
        self._buckets = []
        self._index.clear()
        if level is not Danger.GREEN:
            self._index.danger = level
        return iter(contents)

    # ----- insertion -----

    def _reserve_one(self) -> None:
        size = len(self._buckets)
        table = self._index
        if table.danger is Danger.YELLOW:
            load_factor = size / len(table)
            if load_factor >= LOAD_FACTOR_THRESHOLD:
                table.danger = Danger.GREEN
                table.grow(len(table) * 2)
            else:
                table.danger = Danger.RED
                for bucket in self._buckets:
                    bucket.hash = table.hash(bucket.key)
                table.rebuild([bucket.hash for bucket in self._buckets])
        elif size == table.capacity():
            if size == 0:
                self._index = IndexTable(_INITIAL_RAW_CAPACITY)
            else:
                table.grow(len(table) * 2)

    def _probe(self, name: str) -> Tuple[int, Probe]:
        self._reserve_one()
        hash_value = self._index.hash(name)
        return hash_value, self._index.probe(name, hash_value, self._key_at)

    def _push(self, name: str, hash_value: int, probe: Probe, value: Any) -> None:
        index = len(self._buckets)
        if index >= MAX_SIZE:
            raise MaxSizeReached()
        self._buckets.append(Bucket(name, value, hash_value))
        table = self._index
        if probe.displaces:
            table.shift_insert(probe.slot, index, hash_value)
            if probe.danger and table.danger is Danger.GREEN:
                table.danger = Danger.YELLOW
        else:
            table.place(probe.slot, index, hash_value)

    def entry(self, key: Any) -> Union[OccupiedEntry, VacantEntry]:
        """The entry for ``key``, for in-place manipulation."""
        name = normalize_name(key)
        hash_value, probe = self._probe(name)
        if probe.occupied:
            return OccupiedEntry(self, probe.slot, probe.index)
        return VacantEntry(self, name, hash_value, probe)

    def insert(self, key: Any, value: Any) -> Any:
        """Make ``value`` the only value under ``key``.

        Returns the previous first value, or ``None`` if the name was absent.
        """
        name = normalize_name(key)
        hash_value, probe = self._probe(name)
        if probe.occupied:
            return self._buckets[probe.index].replace(value)[0]
        self._push(name, hash_value, probe, value)
        return None

    def append(self, key: Any, value: Any) -> bool:
        """Add ``value`` after any values under ``key``.

        Returns ``True`` if the name was already present.
        """
        name = normalize_name(key)
        hash_value, probe = self._probe(name)
        if probe.occupied:
            self._buckets[probe.index].append(value)
            return True
        self._push(name, hash_value, probe, value)
        return False

    def remove(self, key: Any) -> Any:
        """Remove ``key`` with all its values; return the first, or ``None``."""
        found = self._find(key)
        if found is None:
            return None
        slot, index = found
        return OccupiedEntry(self, slot, index).remove()

    def extend(self, items: Any) -> None:
        """Add headers from another map, a mapping or ``(name, value)`` pairs.

        Another ``HeaderMap`` replaces the values of the names it holds;
        mappings and pairs are appended.
        """
        if isinstance(items, HeaderMap):
            self.extend_grouped(iter_grouped(items._buckets))
            return
        if isinstance(items, Mapping):
            items = items.items()
        hint = length_hint(items)
        self.reserve(hint if self.is_empty() else (hint + 1) // 2)
        for name, value in items:
            self.append(name, value)

    def extend_grouped(self, items: Iterable[Tuple[Optional[Any], Any]]) -> None:
        """Add pairs shaped like the output of :meth:`drain`.

        A named pair replaces all values under that name; a pair whose name
        is ``None`` is appended to the name before it.
        """
        entry: Optional[OccupiedEntry] = None
        for name, value in items:
            if name is None:
                if entry is None:
                    raise ValueError("expected a header name, but got None")
                entry.append(value)
                continue
            found = self.entry(name)
            if isinstance(found, OccupiedEntry):
                found.insert(value)
                entry = found
            else:
                entry = found.insert_entry(value)

    # ----- misc -----

    def copy(self) -> "HeaderMap":
        """A new map with the same headers; values themselves are shared."""
        duplicate = type(self)()
        duplicate._buckets = [
            Bucket(bucket.key, bucket.value, bucket.hash, list(bucket.extra))
            for bucket in self._buckets
        ]
        duplicate._index = _copy.deepcopy(self._index)
        return duplicate

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HeaderMap):
            return NotImplemented
        if len(self) != len(other):
            return False
        return all(self.get_all(key) == other.get_all(key) for key in self.keys())

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        body = ", ".join(f"{name!r}: {value!r}" for name, value in self.items())
        return f"HeaderMap({{{body}}})"