"""Ordered, case-insensitive HTTP header multimap with entry views."""

__version__ = "0.1.0"

__all__ = ["byte_str", "keys", "index", "bucket", "views", "entry", "header_map"]