"""Header-name normalisation and the errors raised by header maps."""

from __future__ import annotations

from .byte_str import ByteStr

# Largest number of entries a header map may hold.
MAX_SIZE = 1 << 15

# Longest header name accepted.
MAX_HEADER_NAME_LEN = (1 << 16) - 1

_TOKEN_CHARS = frozenset(
    "!#$%&'*+-.^_`|~"
    "0123456789"
    "abcdefghijklmnopqrstuvwxyz"
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
)


class MaxSizeReached(Exception):
    """Raised when a header map would grow beyond its maximum capacity."""

    def __init__(self, message: str = "max size reached") -> None:
        super().__init__(message)


class InvalidHeaderName(ValueError):
    """Raised when a value cannot be used as an HTTP header name."""

    def __init__(self, message: str = "invalid HTTP header name") -> None:
        super().__init__(message)


def normalize_name(name: str | bytes | bytearray | ByteStr) -> str:
    """Validate a header name and return it in lower case.

    A name must be a non-empty HTTP token no longer than
    ``MAX_HEADER_NAME_LEN`` characters.
    """
    if isinstance(name, ByteStr):
        text = str(name)
    elif isinstance(name, str):
        text = name
    elif isinstance(name, (bytes, bytearray)):
        try:
            text = bytes(name).decode("ascii")
        except UnicodeDecodeError:
            raise InvalidHeaderName() from None
    else:
        raise TypeError(f"header name must be str or bytes, got {type(name).__name__}")

    if not text or len(text) > MAX_HEADER_NAME_LEN:
        raise InvalidHeaderName()
    if not _TOKEN_CHARS.issuperset(text):
        raise InvalidHeaderName()
    return text.lower()