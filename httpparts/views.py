"""Read-only views and iterators over header buckets."""

from __future__ import annotations

from typing import Any, Iterable, Iterator, Optional, Tuple

from .bucket import Bucket


class GetAll:
    """All values stored under one header name, in insertion order.

    A view over a missing name holds no values and is falsy.
    """

    __slots__ = ("_bucket",)

    def __init__(self, bucket: Optional[Bucket] = None) -> None:
        self._bucket = bucket

    def __iter__(self) -> Iterator[Any]:
        if self._bucket is None:
            return iter(())
        return iter(self._bucket)

    def __reversed__(self) -> Iterator[Any]:
        if self._bucket is None:
            return iter(())
        return reversed(self._bucket)

    def __len__(self) -> int:
        return 0 if self._bucket is None else len(self._bucket)

    def __bool__(self) -> bool:
        return self._bucket is not None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GetAll):
            return NotImplemented
        return list(self) == list(other)

    __hash__ = None  # type: ignore[assignment]

    def first(self) -> Any:
        """The first value, or ``None`` when the name has no values."""
        return None if self._bucket is None else self._bucket.value

    def __repr__(self) -> str:
        return f"GetAll({list(self)!r})"


def iter_items(buckets: Iterable[Bucket]) -> Iterator[Tuple[str, Any]]:
    """Yield ``(name, value)`` once for every value of every bucket."""
    for bucket in buckets:
        for value in bucket:
            yield bucket.key, value


def iter_grouped(buckets: Iterable[Bucket]) -> Iterator[Tuple[Optional[str], Any]]:
    """Yield ``(name, value)`` for the first value of each bucket, then
    ``(None, value)`` for each further value under the same name."""
    for bucket in buckets:
        yield bucket.key, bucket.value
        for value in bucket.extra:
            yield None, value