"""bencode value model — the four-variant value tree and its plain projection.

    Str   — immutable byte string, length implied by content
    Int   — signed 64-bit integer
    List  — ordered sequence of values
    Dict  — byte-string keys to values, always iterated in ascending key order

Values are immutable once built.  The constructors enforce the format's
invariants (string length, int64 range, unique keys), so any tree that
exists can be encoded without further checks.  Containers also record
their nesting depth, so depth limits are checked without walking the tree.
"""

from __future__ import annotations

from typing import (
    Any,
    Dict as _PyDict,
    Iterable,
    Iterator,
    List as _PyList,
    Mapping,
    Optional,
    Tuple,
    Union,
)

from ._constants import DEFAULT_MAX_DEPTH, INT64_MAX, INT64_MIN
from ._errors import (
    ERR_DUPLICATE_KEY,
    ERR_INTEGER_OVERFLOW,
    ERR_NESTING_TOO_DEEP,
    ERR_STRING_LENGTH_MISMATCH,
    ERR_UNSUPPORTED_TYPE,
    BencodeError,
)


class _Frozen:
    __slots__ = ()

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("{} is immutable".format(type(self).__name__))

    def __delattr__(self, name: str) -> None:
        raise AttributeError("{} is immutable".format(type(self).__name__))

    @property
    def depth(self) -> int:
        """Container nesting depth; 0 for scalars, 1 for a flat list or dict."""
        return 0

    def plain(self) -> Any:
        """Project this value to plain Python objects (see to_plain)."""
        return to_plain(self)


class Str(_Frozen):
    """A bencode byte string.

    `length`, when given, is the length the producer claims for `data`
    (for example the prefix read off the wire).  It must match.
    """

    __slots__ = ("_data",)

    def __init__(self, data: Union[bytes, bytearray, memoryview],
                 length: Optional[int] = None) -> None:
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise BencodeError(ERR_UNSUPPORTED_TYPE,
                               "Str requires bytes, got {}".format(type(data).__name__))
        raw = bytes(data)
        if length is not None and length != len(raw):
            raise BencodeError(
                ERR_STRING_LENGTH_MISMATCH,
                "declared length {} but content is {} bytes".format(length, len(raw)),
            )
        object.__setattr__(self, "_data", raw)

    @property
    def data(self) -> bytes:
        return self._data

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Str):
            return NotImplemented
        return self._data == other._data

    def __hash__(self) -> int:
        return hash((Str, self._data))

    def __repr__(self) -> str:
        return "Str({!r})".format(self._data)


class Int(_Frozen):
    """A bencode integer, range-checked to int64."""

    __slots__ = ("_value",)

    def __init__(self, value: int) -> None:
        # bool is a subclass of int; True is not a bencode integer.
        if isinstance(value, bool) or not isinstance(value, int):
            raise BencodeError(ERR_UNSUPPORTED_TYPE,
                               "Int requires int, got {}".format(type(value).__name__))
        if value < INT64_MIN or value > INT64_MAX:
            raise BencodeError(ERR_INTEGER_OVERFLOW,
                               "integer {} outside int64 range".format(value))
        object.__setattr__(self, "_value", value)

    @property
    def value(self) -> int:
        return self._value

    def __int__(self) -> int:
        return self._value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Int):
            return NotImplemented
        return self._value == other._value

    def __hash__(self) -> int:
        return hash((Int, self._value))

    def __repr__(self) -> str:
        return "Int({})".format(self._value)


class List(_Frozen):
    """An ordered bencode list."""

    __slots__ = ("_items", "_depth")

    def __init__(self, items: Iterable["Value"] = ()) -> None:
        stored = tuple(items)
        for item in stored:
            _require_value(item)
        object.__setattr__(self, "_items", stored)
        object.__setattr__(self, "_depth", _outer_depth(stored))

    @property
    def items(self) -> Tuple["Value", ...]:
        return self._items

    @property
    def depth(self) -> int:
        return self._depth

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator["Value"]:
        return iter(self._items)

    def __getitem__(self, index: int) -> "Value":
        return self._items[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, List):
            return NotImplemented
        return self._items == other._items

    def __hash__(self) -> int:
        return hash((List, self._items))

    def __repr__(self) -> str:
        return "List([{}])".format(", ".join(repr(v) for v in self._items))


KeyLike = Union[bytes, str, Str]


def _key_bytes(key: KeyLike) -> bytes:
    if isinstance(key, Str):
        return key.data
    if isinstance(key, (bytes, bytearray)):
        return bytes(key)
    if isinstance(key, str):
        return key.encode("utf-8")
    raise BencodeError(ERR_UNSUPPORTED_TYPE,
                       "dict key must be bytes or str, got {}".format(type(key).__name__))


class Dict(_Frozen):
    """A bencode dictionary.

    Built from a mapping or from (key, value) pairs.  A key seen twice is
    an error, never an overwrite; note that "a" and b"a" are the same key.
    Iteration order is ascending unsigned-byte order of the keys no matter
    how the dictionary was built.
    """

    __slots__ = ("_entries", "_index", "_depth")

    def __init__(self, entries: Union[Mapping[KeyLike, "Value"],
                                      Iterable[Tuple[KeyLike, "Value"]]] = ()) -> None:
        pairs = entries.items() if isinstance(entries, (Mapping, Dict)) else entries
        index: _PyDict[bytes, Value] = {}
        for key, val in pairs:
            kb = _key_bytes(key)
            if kb in index:
                raise BencodeError(ERR_DUPLICATE_KEY,
                                   "duplicate key {!r}".format(kb))
            index[kb] = _require_value(val)
        object.__setattr__(self, "_index", index)
        # bytes compare as unsigned octets, which is exactly canonical order.
        object.__setattr__(self, "_entries", tuple(sorted(index.items())))
        object.__setattr__(self, "_depth", _outer_depth(index.values()))

    @property
    def depth(self) -> int:
        return self._depth

    def items(self) -> Tuple[Tuple[bytes, "Value"], ...]:
        """Entries as (key, value) pairs in canonical key order."""
        return self._entries

    def keys(self) -> _PyList[bytes]:
        return [k for k, _ in self._entries]

    def get(self, key: KeyLike, default: Optional["Value"] = None) -> Optional["Value"]:
        return self._index.get(_key_bytes(key), default)

    def __getitem__(self, key: KeyLike) -> "Value":
        return self._index[_key_bytes(key)]

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, (bytes, bytearray, str, Str)):
            return False
        return _key_bytes(key) in self._index

    def __iter__(self) -> Iterator[bytes]:
        return (k for k, _ in self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Dict):
            return NotImplemented
        return self._entries == other._entries

    def __hash__(self) -> int:
        return hash((Dict, self._entries))

    def __repr__(self) -> str:
        body = ", ".join("{!r}: {!r}".format(k, v) for k, v in self._entries)
        return "Dict({{{}}})".format(body)


Value = Union[Str, Int, List, Dict]

_VALUE_TYPES = (Str, Int, List, Dict)


def _require_value(val: Any) -> "Value":
    if not isinstance(val, _VALUE_TYPES):
        raise BencodeError(ERR_UNSUPPORTED_TYPE,
                           "expected a bencode value, got {}".format(type(val).__name__))
    return val


def _outer_depth(items: Iterable["Value"]) -> int:
    return 1 + max((v.depth for v in items), default=0)


def check_depth(value: Any, max_depth: int) -> None:
    """Raise ERR_NESTING_TOO_DEEP if value nests deeper than max_depth.

    Containers record their depth when built, so this never recurses.
    Non-values are left for the caller to reject.
    """
    if isinstance(value, _VALUE_TYPES) and value.depth > max_depth:
        raise BencodeError(ERR_NESTING_TOO_DEEP,
                           "value nests {} levels, max depth is {}".format(value.depth, max_depth))


# ── Plain projection ─────────────────────────────────────────

def to_plain(value: Value, *, max_depth: int = DEFAULT_MAX_DEPTH) -> Any:
    """Project a value tree to plain Python objects.

        Str  → bytes
        Int  → int
        List → list
        Dict → dict with bytes keys, inserted in canonical order
    """
    check_depth(value, max_depth)
    return _to_plain(value)


def _to_plain(value: Value) -> Any:
    if isinstance(value, Str):
        return value.data
    if isinstance(value, Int):
        return value.value
    if isinstance(value, List):
        return [_to_plain(v) for v in value]
    if isinstance(value, Dict):
        return {k: _to_plain(v) for k, v in value.items()}
    raise BencodeError(ERR_UNSUPPORTED_TYPE,
                       "not a bencode value: {}".format(type(value).__name__))


def from_plain(obj: Any, *, max_depth: int = DEFAULT_MAX_DEPTH) -> Value:
    """Lift plain Python objects into a value tree.

    bytes/bytearray and str (UTF-8) become Str, int becomes Int, list and
    tuple become List, dict becomes Dict.  Values already in the model pass
    through, provided they fit within max_depth at their position.  bool,
    float, None and anything else are rejected.
    """
    return _from_plain(obj, 0, max_depth)


def _from_plain(obj: Any, depth: int, max_depth: int) -> Value:
    if isinstance(obj, _VALUE_TYPES):
        check_depth(obj, max_depth - depth)
        return obj

    if isinstance(obj, (bytes, bytearray)):
        return Str(obj)

    if isinstance(obj, str):
        return Str(obj.encode("utf-8"))

    # bool before int, same trap as everywhere else.
    if isinstance(obj, bool):
        raise BencodeError(ERR_UNSUPPORTED_TYPE, "bool has no bencode form")

    if isinstance(obj, int):
        return Int(obj)

    if isinstance(obj, (list, tuple)):
        if depth + 1 > max_depth:
            raise BencodeError(ERR_NESTING_TOO_DEEP, "depth exceeds {}".format(max_depth))
        return List(_from_plain(v, depth + 1, max_depth) for v in obj)

    if isinstance(obj, dict):
        if depth + 1 > max_depth:
            raise BencodeError(ERR_NESTING_TOO_DEEP, "depth exceeds {}".format(max_depth))
        return Dict((k, _from_plain(v, depth + 1, max_depth)) for k, v in obj.items())

    raise BencodeError(ERR_UNSUPPORTED_TYPE,
                       "unsupported type: {}".format(type(obj).__name__))
