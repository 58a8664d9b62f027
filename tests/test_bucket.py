import pytest

from httpparts.bucket import Bucket


@pytest.fixture
def host_bucket():
    bucket = Bucket("host", "hello")
    bucket.append("goodbye")
    bucket.append("again")
    return bucket


def test_single_value_bucket():
    bucket = Bucket("host", "world")
    assert list(bucket) == ["world"]
    assert list(reversed(bucket)) == ["world"]
    assert len(bucket) == 1


def test_iteration_is_insertion_order(host_bucket):
    assert list(host_bucket) == ["hello", "goodbye", "again"]


def test_reversed_is_reverse_insertion_order(host_bucket):
    assert list(reversed(host_bucket)) == ["again", "goodbye", "hello"]
    assert list(reversed(host_bucket)) == list(host_bucket)[::-1]


def test_len_counts_every_value(host_bucket):
    assert len(host_bucket) == 3
    host_bucket.append("more")
    assert len(host_bucket) == 4
    assert list(host_bucket)[-1] == "more"


def test_append_keeps_first_value():
    bucket = Bucket("host", "world")
    bucket.append("earth")
    assert bucket.value == "world"
    assert list(bucket) == ["world", "earth"]


def test_replace_returns_all_previous_values(host_bucket):
    previous = host_bucket.replace("earth")
    assert previous == ["hello", "goodbye", "again"]
    assert list(host_bucket) == ["earth"]
    assert len(host_bucket) == 1


def test_replace_single_value():
    bucket = Bucket("host", "hello.world")
    assert bucket.replace("earth") == ["hello.world"]
    assert bucket.value == "earth"


def test_set_first_keeps_extra_values(host_bucket):
    previous = host_bucket.set_first("hi")
    assert previous == "hello"
    assert list(host_bucket) == ["hi", "goodbye", "again"]


def test_key_and_hash_are_kept():
    bucket = Bucket("content-length", "123", hash=7)
    bucket.append("456")
    bucket.replace("789")
    assert bucket.key == "content-length"
    assert bucket.hash == 7


def test_buckets_do_not_share_extra_lists():
    first = Bucket("a", "a")
    second = Bucket("b", "b")
    first.append("x")
    assert list(second) == ["b"]
    assert list(first) == ["a", "x"]


def test_equality_compares_contents():
    left = Bucket("a", "a")
    right = Bucket("a", "a")
    left.append("b")
    right.append("b")
    assert left == right
    right.append("c")
    assert not left == right