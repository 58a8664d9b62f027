"""An immutable text value that is stored and compared as UTF-8 bytes."""

from __future__ import annotations

from functools import total_ordering


@total_ordering
class ByteStr:
    """Text whose UTF-8 encoding is kept alongside it.

    Length, ordering and equality follow the encoded bytes. Instances also
    compare equal to a plain ``str`` holding the same text.
    """

    __slots__ = ("_text", "_bytes")

    def __init__(self, text: str = "") -> None:
        if not isinstance(text, str):
            raise TypeError(f"ByteStr expects str, got {type(text).__name__}")
        self._text = text
        self._bytes = text.encode("utf-8")

    @classmethod
    def from_utf8(cls, data: bytes | bytearray | memoryview) -> "ByteStr":
        """Build from bytes, raising ``UnicodeDecodeError`` if they are not UTF-8."""
        raw = bytes(data)
        instance = cls(raw.decode("utf-8"))
        return instance

    def as_bytes(self) -> bytes:
        """The UTF-8 encoding of the text."""
        return self._bytes

    def is_empty(self) -> bool:
        return not self._bytes

    def __len__(self) -> int:
        return len(self._bytes)

    def __str__(self) -> str:
        return self._text

    def __bytes__(self) -> bytes:
        return self._bytes

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ByteStr):
            return self._bytes == other._bytes
        if isinstance(other, str):
            return self._text == other
        return NotImplemented

    def __lt__(self, other: object) -> bool:
        if isinstance(other, ByteStr):
            return self._bytes < other._bytes
        if isinstance(other, str):
            return self._bytes < other.encode("utf-8")
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._text)

    def __repr__(self) -> str:
        return f"ByteStr({self._text!r})"