# httpparts

`httpparts` provides `HeaderMap`, a multimap for HTTP headers.

- **Header names are case-insensitive.** A name must be a non-empty HTTP token. It may be given as `str`, ASCII `bytes` or a `ByteStr`, and it is stored in lower case.
- **A name can hold several values.** `insert` replaces every value held under a name. `append` adds one more value after the existing ones.
- **Order is deterministic.** Names are iterated roughly in the order they were first added. Removing a name moves the last name into its place. The values under a name always keep the order in which they were added.
- **Size is bounded.** The internal slot table is capped at 32,768 slots. A map that would need to grow past that raises `MaxSizeReached`.

Values can be any Python object. The map does not check or convert them.

## Installation

```
pip install httpparts
```

## Usage

```python
from httpparts.header_map import HeaderMap

headers = HeaderMap()
headers.insert("Host", "example.com")
headers.insert("Accept", "text/plain")
headers.append("accept", "text/html")

headers["host"]                      # "example.com"
list(headers.get_all("ACCEPT"))      # ["text/plain", "text/html"]
len(headers)                         # 3 values
headers.keys_len()                   # 2 names
"content-length" in headers          # False
headers.get("content-length", "0")   # "0"

previous = headers.insert("accept", "*/*")   # "text/plain"; all old values replaced
headers.remove("host")                       # "example.com"
```

You can build a map in several ways:

- `HeaderMap(pairs)` takes an iterable of `(name, value)` pairs and appends each one.
- `HeaderMap.from_mapping(mapping)` takes a mapping of names to values.
- `HeaderMap.with_capacity(n)` returns an empty map with room for about `n` names.

Iterating over a map gives you its names in several forms:

- Iterating over the map itself, or calling `keys()`, yields each name once.
- `items()` yields a `(name, value)` pair for every value.
- `values()` yields every value.

`get_all(name)` returns a `GetAll` view from `httpparts.views`. The view supports `len()`, iteration, `reversed()` and `first()`. It is falsy when the name is absent.

Other methods:

- `copy()` returns an independent map. The values themselves are shared with the original.
- `==` compares two maps by the values held under each name.

### Entries

`entry(name)` returns one of two objects from `httpparts.entry`:

- an `OccupiedEntry` when the name is present;
- a `VacantEntry` when it is absent.

```python
from httpparts.entry import OccupiedEntry

counts = HeaderMap()
for name in ["content-length", "x-hello", "Content-Length"]:
    entry = counts.entry(name)
    if isinstance(entry, OccupiedEntry):
        entry.insert(entry.get() + 1)
    else:
        entry.insert(1)

counts["content-length"]   # 2
```

`OccupiedEntry` has these methods:

- `key` returns the name.
- `get` returns the first value.
- `set_first` replaces only the first value.
- `insert` replaces all values and returns the old first value.
- `insert_mult` replaces all values and returns an iterator over the old ones.
- `append` adds a value after the existing ones.
- `remove`, `remove_entry` and `remove_entry_mult` delete the name.
- Iterating over the entry yields its values.

`VacantEntry` has these methods:

- `key` returns the name.
- `insert` stores a value and returns it.
- `insert_entry` stores a value and returns the new `OccupiedEntry`.

Both entry types have `or_insert(default)` and `or_insert_with(factory)`. On an occupied entry they return the first value. On a vacant entry they store the default, or the result of calling `factory`, and return it.

### Draining and extending

`drain()` empties the map and returns `(name, value)` pairs. Only the first value of each name comes with the name. The values after it come as `(None, value)`.

`extend_grouped()` accepts pairs in that same shape. A named pair replaces the values under its name, and each `None` pair is appended to the name before it.

`extend()` accepts several kinds of input:

- another `HeaderMap`, whose names replace matching names in this map;
- a mapping of names to values, which are appended;
- an iterable of pairs, which are appended.

```python
source = HeaderMap([("cookie", "a"), ("cookie", "b")])
target = HeaderMap()
target.extend_grouped(source.drain())
list(target.get_all("cookie"))   # ["a", "b"]
```

### Errors

These errors are defined in `httpparts.keys`:

- `InvalidHeaderName` is a subclass of `ValueError`. `insert`, `append`, `entry` and `from_mapping` raise it when given an invalid name. Lookups with an invalid name act as if the name were missing.
- `MaxSizeReached` is raised when the map cannot grow any further.

Two more cases raise built-in errors:

- Looking up a missing name with `[]` raises `KeyError`.
- `extend_grouped` raises `ValueError` if the first pair has no name.

### Other modules

- `httpparts.byte_str.ByteStr` holds immutable text. Its length, ordering and equality are based on the UTF-8 bytes. `ByteStr.from_utf8` rejects bytes that are not valid UTF-8.
- `httpparts.index` contains the Robin Hood hash table used by the map. It uses FNV-1a hashing and switches to a keyed hash when collisions look adversarial.

## What this package does not do

`httpparts` only stores headers. It has no request or response types and no status codes or methods. It does not parse or serialise HTTP messages, and it does no networking.