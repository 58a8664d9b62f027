"""The open-addressing index that maps header names to entry positions.

The table stores, for each slot, the position of an entry together with a
15-bit hash of its name. Collisions are resolved with Robin Hood probing and
deletions use backward shifting, so lookups stop as soon as they pass the
point where the wanted name would have been placed.
"""

from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass
from enum import Enum
from itertools import chain, islice
from typing import Callable, Iterable, Iterator, NamedTuple, Optional, Sequence, Tuple

from .keys import MAX_SIZE, MaxSizeReached

_FNV_OFFSET_BASIS = 0xCBF29CE484222325
_FNV_PRIME = 0x100000001B3
_U64 = (1 << 64) - 1
_HASH_MASK = MAX_SIZE - 1

# Number of slots shifted by one insertion before collisions look suspicious.
DISPLACEMENT_THRESHOLD = 128
# Distance from the ideal slot beyond which an insertion looks suspicious.
FORWARD_SHIFT_THRESHOLD = 512
# Below this load factor a suspicious table switches to keyed hashing
# instead of growing.
LOAD_FACTOR_THRESHOLD = 0.2


def fnv1a_64(data: bytes | bytearray | memoryview) -> int:
    """The 64-bit FNV-1a hash of ``data``."""
    value = _FNV_OFFSET_BASIS
    for byte in bytes(data):
        value = ((value ^ byte) * _FNV_PRIME) & _U64
    return value


def usable_capacity(raw_capacity: int) -> int:
    """How many entries a table with ``raw_capacity`` slots may hold."""
    return raw_capacity - raw_capacity // 4


def to_raw_capacity(n: int) -> int:
    """How many slots are needed to hold ``n`` entries."""
    return n + n // 3


def desired_pos(mask: int, hash_value: int) -> int:
    """The ideal slot for a hash value."""
    return hash_value & mask


def probe_distance(mask: int, hash_value: int, current: int) -> int:
    """How many steps ``current`` lies past the ideal slot for ``hash_value``."""
    return (current - desired_pos(mask, hash_value)) & mask


class Danger(Enum):
    """How suspicious the collision pattern of a table looks.

    A table starts green. Heavy collisions turn it yellow; a yellow table
    either grows back to green or, if it is sparsely filled, turns red and
    switches to a keyed hash that outside input cannot predict.
    """

    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"


@dataclass(frozen=True)
class Probe:
    """Where a name belongs in the table.

    ``index`` is set when the name is already present. Otherwise ``slot`` is
    where it goes: ``displaces`` tells whether the occupant there has to be
    shifted forward, and ``danger`` whether the slot lies suspiciously far
    from the ideal one.
    """

    slot: int
    index: Optional[int] = None
    danger: bool = False
    displaces: bool = False

    @property
    def occupied(self) -> bool:
        return self.index is not None


class _Pos(NamedTuple):
    index: int
    hash: int


class IndexTable:
    """Slots mapping name hashes to positions in an external entry list."""

    def __init__(self, raw_capacity: int = 0) -> None:
        if raw_capacity > MAX_SIZE:
            raise MaxSizeReached()
        if raw_capacity < 0 or raw_capacity & (raw_capacity - 1):
            raise ValueError(f"raw capacity must be a power of two, got {raw_capacity}")
        self._slots: list[Optional[_Pos]] = [None] * raw_capacity
        self._mask = raw_capacity - 1 if raw_capacity else 0
        self._danger = Danger.GREEN
        self._hash_key = b""

    def __len__(self) -> int:
        return len(self._slots)

    @property
    def mask(self) -> int:
        return self._mask

    @property
    def danger(self) -> Danger:
        return self._danger

    @danger.setter
    def danger(self, level: Danger) -> None:
        if level is Danger.RED:
            self._hash_key = os.urandom(16)
        self._danger = level

    def capacity(self) -> int:
        """How many entries fit before the table should grow."""
        return usable_capacity(len(self._slots))

    def hash(self, name: str) -> int:
        """The 15-bit hash of a normalised header name."""
        data = name.encode("utf-8")
        if self._danger is Danger.RED:
            digest = hashlib.blake2b(data, key=self._hash_key, digest_size=8).digest()
            value = int.from_bytes(digest, "little")
        else:
            value = fnv1a_64(data)
        return value & _HASH_MASK

    def _walk(self, start: int) -> Iterator[int]:
        size = len(self._slots)
        return chain(range(start, size), range(0, start))

    def probe(self, name: str, hash_value: int, key_at: Callable[[int], str]) -> Probe:
        """Find the slot holding ``name``, or the slot it should be stored in.

        ``key_at`` returns the name stored at an entry position.
        """
        dist = 0
        for slot in self._walk(desired_pos(self._mask, hash_value)):
            pos = self._slots[slot]
            danger = dist >= FORWARD_SHIFT_THRESHOLD and self._danger is not Danger.RED
            if pos is None:
                return Probe(slot, danger=danger)
            if probe_distance(self._mask, pos.hash, slot) < dist:
                return Probe(slot, danger=danger, displaces=True)
            if pos.hash == hash_value and key_at(pos.index) == name:
                return Probe(slot, index=pos.index)
            dist += 1
        raise MaxSizeReached("index table is full")

    def find(self, name: str, key_at: Callable[[int], str]) -> Optional[Tuple[int, int]]:
        """Return ``(slot, index)`` for ``name``, or ``None`` if it is absent."""
        if not self._slots:
            return None
        hash_value = self.hash(name)
        dist = 0
        for slot in self._walk(desired_pos(self._mask, hash_value)):
            pos = self._slots[slot]
            if pos is None or dist > probe_distance(self._mask, pos.hash, slot):
                return None
            if pos.hash == hash_value and key_at(pos.index) == name:
                return slot, pos.index
            dist += 1
        return None

    @staticmethod
    def _make_pos(index: int, hash_value: int) -> _Pos:
        if not 0 <= index < MAX_SIZE:
            raise ValueError(f"entry index {index} out of range")
        return _Pos(index, hash_value)

    def place(self, slot: int, index: int, hash_value: int) -> None:
        """Store an entry position in a vacant slot."""
        self._slots[slot] = self._make_pos(index, hash_value)

    def _shift(self, slot: int, pos: _Pos) -> int:
        displaced = 0
        for current_slot in self._walk(slot):
            current = self._slots[current_slot]
            self._slots[current_slot] = pos
            if current is None:
                return displaced
            displaced += 1
            pos = current
        raise MaxSizeReached("index table is full")

    def shift_insert(self, slot: int, index: int, hash_value: int) -> int:
        """Store a position at ``slot``, shifting occupants forward.

        Returns how many occupants were shifted. Shifting too many marks a
        green table yellow.
        """
        displaced = self._shift(slot, self._make_pos(index, hash_value))
        if displaced >= DISPLACEMENT_THRESHOLD and self._danger is Danger.GREEN:
            self._danger = Danger.YELLOW
        return displaced

    def remove(
        self,
        slot: int,
        moved_from: Optional[int],
        moved_to: Optional[int],
        moved_hash: Optional[int],
    ) -> None:
        """Empty ``slot`` after its entry was swap-removed from the entry list.

        If the swap moved another entry from position ``moved_from`` to
        ``moved_to``, pass its hash too so its slot can be updated; otherwise
        pass ``None`` for all three.
        """
        self._slots[slot] = None

        if moved_from is not None:
            for current_slot in self._walk(desired_pos(self._mask, moved_hash)):
                pos = self._slots[current_slot]
                if pos is not None and pos.index == moved_from:
                    self._slots[current_slot] = _Pos(moved_to, moved_hash)
                    break

        size = len(self._slots)
        last = slot
        for current_slot in islice(self._walk((slot + 1) % size), size - 1):
            pos = self._slots[current_slot]
            if pos is None or probe_distance(self._mask, pos.hash, current_slot) == 0:
                break
            self._slots[last] = pos
            self._slots[current_slot] = None
            last = current_slot

    def grow(self, new_raw_capacity: int) -> None:
        """Resize to ``new_raw_capacity`` slots, keeping every position."""
        if new_raw_capacity > MAX_SIZE:
            raise MaxSizeReached()
        if new_raw_capacity <= 0 or new_raw_capacity & (new_raw_capacity - 1):
            raise ValueError(
                f"raw capacity must be a power of two, got {new_raw_capacity}"
            )
        old = self._slots
        first_ideal = next(
            (
                slot
                for slot, pos in enumerate(old)
                if pos is not None and probe_distance(self._mask, pos.hash, slot) == 0
            ),
            0,
        )
        self._slots = [None] * new_raw_capacity
        self._mask = new_raw_capacity - 1
        for pos in chain(old[first_ideal:], old[:first_ideal]):
            if pos is not None:
                self._reinsert_in_order(pos)

    def _reinsert_in_order(self, pos: _Pos) -> None:
        for slot in self._walk(desired_pos(self._mask, pos.hash)):
            if self._slots[slot] is None:
                self._slots[slot] = pos
                return
        raise MaxSizeReached("index table is full")

    def rebuild(self, hashes: Sequence[int] | Iterable[int]) -> None:
        """Refill the slots from scratch; entry ``i`` has hash ``hashes[i]``."""
        self._slots = [None] * len(self._slots)
        for index, hash_value in enumerate(hashes):
            pos = self._make_pos(index, hash_value)
            dist = 0
            for slot in self._walk(desired_pos(self._mask, hash_value)):
                current = self._slots[slot]
                if current is None:
                    self._slots[slot] = pos
                    break
                if probe_distance(self._mask, current.hash, slot) < dist:
                    self._shift(slot, pos)
                    break
                dist += 1
            else:
                raise MaxSizeReached("index table is full")

    def clear(self) -> None:
        """Empty every slot and return to the green state."""
        self._slots = [None] * len(self._slots)
        self._danger = Danger.GREEN