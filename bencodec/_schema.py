"""Schema binding — typed records to and from bencode dictionaries.

A Descriptor is a static table declared once per record type: for each
record attribute it names the wire key and the converter that turns the
attribute into a value and back.  The same table drives both directions,

    bind(value, DESCRIPTOR)    Dict  → record
    unbind(record, DESCRIPTOR) record → Dict

and nothing inspects the record class at run time.

Missing keys follow one of two policies, chosen per call:

    lenient (default)  absent key → the field's default, else its zero value
    strict             absent key → ERR_MISSING_REQUIRED_FIELD, unless the
                       field is declared optional

Keys the descriptor does not mention are ignored in both modes, so old
readers keep working when new keys appear.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, List as _PyList, Optional, Tuple

from ._constants import DEFAULT_MAX_DEPTH
from ._core import Buffer, encode, loads
from ._errors import ERR_MISSING_REQUIRED_FIELD, ERR_TYPE_MISMATCH, BencodeError
from ._value import Dict, Int, List, Str, Value

logger = logging.getLogger(__name__)


class _Missing:
    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


def _child(path: str, key: str) -> str:
    return key if not path else "{}.{}".format(path, key)


def _mismatch(path: str, expected: str, found: Any) -> BencodeError:
    return BencodeError(
        ERR_TYPE_MISMATCH,
        "{}: expected {}, found {}".format(path or "<root>", expected, type(found).__name__),
        path=path or None,
    )


# ── Converters ───────────────────────────────────────────────

class Converter:
    """Converts one kind of field between a value and a Python object."""

    expected = "value"

    def to_value(self, obj: Any, path: str) -> Value:
        raise NotImplementedError

    def from_value(self, value: Value, path: str, strict: bool) -> Any:
        raise NotImplementedError

    def zero(self) -> Any:
        return None


class _BytesConverter(Converter):
    expected = "Str"

    def to_value(self, obj: Any, path: str) -> Value:
        if not isinstance(obj, (bytes, bytearray)):
            raise _mismatch(path, "bytes", obj)
        return Str(obj)

    def from_value(self, value: Value, path: str, strict: bool) -> Any:
        if not isinstance(value, Str):
            raise _mismatch(path, self.expected, value)
        return value.data

    def zero(self) -> Any:
        return b""


class _TextConverter(Converter):
    """UTF-8 text carried in a Str."""

    expected = "Str"

    def to_value(self, obj: Any, path: str) -> Value:
        if not isinstance(obj, str):
            raise _mismatch(path, "str", obj)
        return Str(obj.encode("utf-8"))

    def from_value(self, value: Value, path: str, strict: bool) -> Any:
        if not isinstance(value, Str):
            raise _mismatch(path, self.expected, value)
        try:
            return value.data.decode("utf-8")
        except UnicodeDecodeError:
            raise BencodeError(ERR_TYPE_MISMATCH,
                               "{}: expected UTF-8 text".format(path or "<root>"),
                               path=path or None)

    def zero(self) -> Any:
        return ""


class _IntConverter(Converter):
    expected = "Int"

    def to_value(self, obj: Any, path: str) -> Value:
        if isinstance(obj, bool) or not isinstance(obj, int):
            raise _mismatch(path, "int", obj)
        return Int(obj)

    def from_value(self, value: Value, path: str, strict: bool) -> Any:
        if not isinstance(value, Int):
            raise _mismatch(path, self.expected, value)
        return value.value

    def zero(self) -> Any:
        return 0


class _RawConverter(Converter):
    """Keeps the value tree as-is, for fields with no fixed shape."""

    def to_value(self, obj: Any, path: str) -> Value:
        if not isinstance(obj, (Str, Int, List, Dict)):
            raise _mismatch(path, "bencode value", obj)
        return obj

    def from_value(self, value: Value, path: str, strict: bool) -> Any:
        return value


BYTES: Converter = _BytesConverter()
TEXT: Converter = _TextConverter()
INT: Converter = _IntConverter()
RAW: Converter = _RawConverter()


class ListOf(Converter):
    """A List whose elements all use the same converter."""

    expected = "List"

    def __init__(self, item: Converter) -> None:
        self.item = item

    def to_value(self, obj: Any, path: str) -> Value:
        if not isinstance(obj, (list, tuple)):
            raise _mismatch(path, "list", obj)
        return List(self.item.to_value(x, "{}[{}]".format(path, i))
                    for i, x in enumerate(obj))

    def from_value(self, value: Value, path: str, strict: bool) -> Any:
        if not isinstance(value, List):
            raise _mismatch(path, self.expected, value)
        return [self.item.from_value(x, "{}[{}]".format(path, i), strict)
                for i, x in enumerate(value)]

    def zero(self) -> Any:
        return []


# ── Fields and descriptors ───────────────────────────────────

class Field:
    """One row of a descriptor: record attribute ↔ wire key ↔ converter.

    `key` defaults to `attr`.  `default` replaces the converter's zero
    value when the key is absent; it is shared between records, so keep
    it immutable.
    """

    __slots__ = ("attr", "key", "converter", "optional", "default", "_key_bytes")

    def __init__(self, attr: str, converter: Converter, key: Optional[str] = None, *,
                 optional: bool = False, default: Any = MISSING) -> None:
        self.attr = attr
        self.key = key if key is not None else attr
        self.converter = converter
        self.optional = optional
        self.default = default
        self._key_bytes = self.key.encode("utf-8")

    @property
    def key_bytes(self) -> bytes:
        return self._key_bytes

    def missing_value(self) -> Any:
        if self.default is not MISSING:
            return self.default
        return self.converter.zero()

    def __repr__(self) -> str:
        return "Field({!r}, key={!r})".format(self.attr, self.key)


class Descriptor(Converter):
    """The field table for one record type.

    `factory` is called with one keyword argument per field (a dataclass
    works as-is).  Descriptors nest: a Descriptor is itself a converter,
    so a field can hold a record or, via ListOf, a list of records.
    """

    expected = "Dict"

    def __init__(self, factory: Callable[..., Any], fields: Iterable[Field]) -> None:
        self.factory = factory
        self.fields: Tuple[Field, ...] = tuple(fields)
        keys = [f.key_bytes for f in self.fields]
        if len(set(keys)) != len(keys):
            raise ValueError("duplicate wire key in descriptor for {!r}".format(factory))
        attrs = [f.attr for f in self.fields]
        if len(set(attrs)) != len(attrs):
            raise ValueError("duplicate attribute in descriptor for {!r}".format(factory))
        self._keys = frozenset(keys)

    def from_value(self, value: Value, path: str, strict: bool) -> Any:
        if not isinstance(value, Dict):
            raise _mismatch(path, self.expected, value)

        kwargs = {}
        for f in self.fields:
            fpath = _child(path, f.key)
            item = value.get(f.key_bytes)
            if item is None:
                if strict and not f.optional:
                    raise BencodeError(ERR_MISSING_REQUIRED_FIELD,
                                       "{}: required field is missing".format(fpath),
                                       path=fpath)
                logger.debug("%s: absent, using default", fpath)
                kwargs[f.attr] = f.missing_value()
                continue
            kwargs[f.attr] = f.converter.from_value(item, fpath, strict)

        if logger.isEnabledFor(logging.DEBUG):
            unknown = [k for k in value if k not in self._keys]
            if unknown:
                logger.debug("%s: ignoring unknown keys %r", path or "<root>", unknown)

        return self.factory(**kwargs)

    def to_value(self, obj: Any, path: str) -> Value:
        entries: _PyList[Tuple[bytes, Value]] = []
        for f in self.fields:
            fpath = _child(path, f.key)
            try:
                attr = getattr(obj, f.attr)
            except AttributeError:
                raise _mismatch(path, getattr(self.factory, "__name__", "record"), obj)
            # None means "not set"; the key is left out.
            if attr is None:
                continue
            entries.append((f.key_bytes, f.converter.to_value(attr, fpath)))
        # Entry order is irrelevant: the encoder sorts keys.
        return Dict(entries)

    def __repr__(self) -> str:
        name = getattr(self.factory, "__name__", repr(self.factory))
        return "Descriptor({}, {})".format(name, [f.key for f in self.fields])


# ── Public API ───────────────────────────────────────────────

def bind(value: Value, schema: Descriptor, *, strict: bool = False) -> Any:
    """Convert a decoded Dict into a record described by schema."""
    return schema.from_value(value, "", strict)


def unbind(record: Any, schema: Descriptor) -> Dict:
    """Convert a record into a Dict keyed by the schema's wire keys."""
    return schema.to_value(record, "")


def unmarshal(buffer: Buffer, schema: Descriptor, *, strict: bool = False,
              max_depth: int = DEFAULT_MAX_DEPTH) -> Any:
    """Decode a whole buffer and bind it to a record."""
    return bind(loads(buffer, max_depth=max_depth), schema, strict=strict)


def marshal(record: Any, schema: Descriptor) -> bytes:
    """Encode a record canonically."""
    return encode(unbind(record, schema))
