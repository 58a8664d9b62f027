"""Storage for one header name and every value associated with it."""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import chain
from typing import Any, Iterator, List


@dataclass
class Bucket:
    """A header name with its hash and its values in insertion order.

    ``value`` is the first value. Any further values live in ``extra``, in the
    order they were appended. A bucket always holds at least one value.
    """

    key: str
    value: Any
    hash: int = 0
    extra: List[Any] = field(default_factory=list)

    def __iter__(self) -> Iterator[Any]:
        return chain((self.value,), self.extra)

    def __reversed__(self) -> Iterator[Any]:
        return chain(reversed(self.extra), (self.value,))

    def __len__(self) -> int:
        return 1 + len(self.extra)

    def append(self, value: Any) -> None:
        """Add ``value`` after every value already held."""
        self.extra.append(value)

    def replace(self, value: Any) -> List[Any]:
        """Make ``value`` the only value and return all previous ones in order."""
        previous = [self.value, *self.extra]
        self.value = value
        self.extra = []
        return previous

    def set_first(self, value: Any) -> Any:
        """Swap the first value for ``value``, keeping the rest; return the old one."""
        previous = self.value
        self.value = value
        return previous