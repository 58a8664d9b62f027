import pytest

from httpparts.index import (
    Danger,
    IndexTable,
    desired_pos,
    fnv1a_64,
    probe_distance,
    to_raw_capacity,
    usable_capacity,
)
from httpparts.keys import MAX_SIZE, MaxSizeReached

NAMES = [
    "host",
    "accept",
    "content-length",
    "content-type",
    "cookie",
    "x-hello",
    "x-world",
    "user-agent",
    "location",
    "etag",
    "vary",
    "via",
]


class _Store:
    """A list of names indexed by a table, as a header map would use it."""

    def __init__(self, table):
        self.table = table
        self.names = []

    def key_at(self, index):
        return self.names[index]

    def add(self, name):
        hash_value = self.table.hash(name)
        probe = self.table.probe(name, hash_value, self.key_at)
        if probe.occupied:
            return probe.index
        index = len(self.names)
        self.names.append(name)
        if probe.displaces:
            self.table.shift_insert(probe.slot, index, hash_value)
        else:
            self.table.place(probe.slot, index, hash_value)
        return index

    def remove(self, name):
        slot, index = self.table.find(name, self.key_at)
        last = len(self.names) - 1
        if index != last:
            moved = self.names[last]
            self.names[index] = moved
            self.table.remove(slot, last, index, self.table.hash(moved))
        else:
            self.table.remove(slot, None, None, None)
        self.names.pop()


def _filled(raw=16, names=NAMES):
    store = _Store(IndexTable(raw))
    for name in names:
        store.add(name)
    return store


def test_fnv_offset_basis_for_empty_input():
    assert fnv1a_64(b"") == 0xCBF29CE484222325


def test_fnv_known_vector():
    assert fnv1a_64(b"a") == 0xAF63DC4C8601EC8C


def test_fnv_accepts_bytearray_and_stays_in_64_bits():
    assert fnv1a_64(bytearray(b"content-type")) == fnv1a_64(b"content-type")
    assert 0 <= fnv1a_64(b"x" * 100) < 1 << 64
    assert fnv1a_64(b"host") != fnv1a_64(b"hosu")


def test_usable_capacity_documented_values():
    assert usable_capacity(8) == 6
    assert usable_capacity(16) == 12


def test_raw_capacity_leaves_room_for_requested_entries():
    for n in range(1, 1000):
        raw = 1 << (to_raw_capacity(n) - 1).bit_length()
        assert usable_capacity(raw) >= n


def test_to_raw_capacity_value():
    assert to_raw_capacity(10) == 13


def test_probe_distance_round_trips_with_desired_pos():
    mask = 15
    for hash_value in range(0, 200, 7):
        assert probe_distance(mask, hash_value, desired_pos(mask, hash_value)) == 0
        for current in range(16):
            dist = probe_distance(mask, hash_value, current)
            assert 0 <= dist <= mask
            assert (desired_pos(mask, hash_value) + dist) & mask == current


def test_table_capacity_matches_with_capacity_example():
    table = IndexTable(16)
    assert len(table) == 16
    assert table.capacity() == 12
    assert table.mask == 15


def test_empty_table():
    table = IndexTable()
    assert len(table) == 0
    assert table.capacity() == 0
    assert table.find("host", lambda i: "host") is None
    with pytest.raises(MaxSizeReached):
        table.probe("host", table.hash("host"), lambda i: "host")


def test_invalid_raw_capacities():
    with pytest.raises(ValueError):
        IndexTable(12)
    with pytest.raises(MaxSizeReached):
        IndexTable(MAX_SIZE * 2)


def test_green_hash_is_deterministic_and_bounded():
    small, large = IndexTable(8), IndexTable(64)
    for name in NAMES:
        value = small.hash(name)
        assert 0 <= value < MAX_SIZE
        assert value == large.hash(name)
        assert value == fnv1a_64(name.encode()) & (MAX_SIZE - 1)


def test_red_hash_is_bounded_and_stable_within_table():
    table = IndexTable(8)
    table.danger = Danger.RED
    for name in NAMES:
        assert 0 <= table.hash(name) < MAX_SIZE
        assert table.hash(name) == table.hash(name)


def test_insert_and_find_every_name():
    store = _filled()
    for index, name in enumerate(store.names):
        found = store.table.find(name, store.key_at)
        assert found is not None
        assert found[1] == index
    assert store.table.find("missing", store.key_at) is None


def test_probe_reports_existing_entries():
    store = _filled()
    for index, name in enumerate(NAMES):
        probe = store.table.probe(name, store.table.hash(name), store.key_at)
        assert probe.occupied
        assert probe.index == index
    assert store.add("host") == 0
    assert len(store.names) == len(NAMES)


def test_remove_keeps_remaining_names_findable():
    store = _filled()
    for victim in ["cookie", "via", "host", "etag", "x-world", "accept"]:
        store.remove(victim)
        assert store.table.find(victim, store.key_at) is None
        for index, name in enumerate(store.names):
            assert store.table.find(name, store.key_at)[1] == index


def test_remove_everything_empties_table():
    store = _filled()
    for name in list(NAMES):
        store.remove(name)
    assert store.names == []
    for name in NAMES:
        assert store.table.find(name, store.key_at) is None


def test_grow_preserves_positions():
    store = _filled()
    store.table.grow(64)
    assert len(store.table) == 64
    assert store.table.mask == 63
    for index, name in enumerate(store.names):
        assert store.table.find(name, store.key_at)[1] == index


def test_grow_beyond_max_size():
    table = IndexTable(16)
    with pytest.raises(MaxSizeReached):
        table.grow(MAX_SIZE * 2)


def test_rebuild_with_keyed_hash():
    store = _filled()
    store.table.danger = Danger.RED
    store.table.rebuild([store.table.hash(name) for name in store.names])
    assert store.table.danger is Danger.RED
    for index, name in enumerate(store.names):
        assert store.table.find(name, store.key_at)[1] == index


def test_robin_hood_displacement():
    table = IndexTable(16)
    names = []
    key_at = names.__getitem__

    def add(name, hash_value):
        probe = table.probe(name, hash_value, key_at)
        names.append(name)
        if probe.displaces:
            table.shift_insert(probe.slot, len(names) - 1, hash_value)
        else:
            table.place(probe.slot, len(names) - 1, hash_value)
        return probe

    add("x", 1)
    add("y", 0)
    probe = add("z", 0)
    assert probe.displaces
    assert probe.slot == 1
    for index, (name, hash_value) in enumerate([("x", 1), ("y", 0), ("z", 0)]):
        again = table.probe(name, hash_value, key_at)
        assert again.index == index


def test_many_displacements_turn_table_yellow():
    table = IndexTable(256)
    for index in range(129):
        table.place(index + 1, index, 1)
    assert table.shift_insert(1, 129, 1) == 129
    assert table.danger is Danger.YELLOW


def test_displacement_does_not_downgrade_red():
    table = IndexTable(256)
    table.danger = Danger.RED
    for index in range(129):
        table.place(index + 1, index, 1)
    table.shift_insert(1, 129, 1)
    assert table.danger is Danger.RED


def test_long_forward_shift_is_flagged_unless_red():
    table = IndexTable(1024)
    names = [f"n{i}" for i in range(512)]
    for index in range(512):
        table.place(index, index, 0)
    probe = table.probe("fresh", 0, names.__getitem__)
    assert not probe.occupied
    assert probe.slot == 512
    assert probe.danger
    table.danger = Danger.RED
    assert not table.probe("fresh", 0, names.__getitem__).danger


def test_clear_resets_slots_and_danger():
    store = _filled()
    store.table.danger = Danger.YELLOW
    store.table.clear()
    assert store.table.danger is Danger.GREEN
    assert len(store.table) == 16
    for name in NAMES:
        assert store.table.find(name, store.key_at) is None


def test_place_rejects_out_of_range_index():
    table = IndexTable(8)
    with pytest.raises(ValueError):
        table.place(0, MAX_SIZE, 0)