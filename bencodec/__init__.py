"""bencodec — canonical bencode codec with typed-record binding.

Decode bytes into a value tree, encode a value tree back to canonical
bytes, and bind dictionaries to application records through declared
descriptors.

Quick start:
    >>> from bencodec import loads, encode, Dict, Int, Str
    >>> loads(b"d3:bar4:spam3:fooi42ee")
    Dict({b'bar': Str(b'spam'), b'foo': Int(42)})
    >>> encode(Dict({"foo": Int(42), "bar": Str(b"spam")}))
    b'd3:bar4:spam3:fooi42ee'

Dictionary keys are always emitted in ascending byte order, so equal
values encode to identical bytes whatever order they were built in.
"""

from __future__ import annotations

from ._constants import DEFAULT_MAX_DEPTH, INT64_MAX, INT64_MIN
from ._core import (
    canonicalize,
    decode,
    dumps,
    encode,
    is_canonical,
    loads,
)
from ._errors import (
    BINDING,
    ERR_DUPLICATE_KEY,
    ERR_INTEGER_OVERFLOW,
    ERR_INVALID_TOKEN,
    ERR_LEADING_ZERO,
    ERR_MALFORMED_INTEGER,
    ERR_MALFORMED_LENGTH,
    ERR_MISSING_REQUIRED_FIELD,
    ERR_NESTING_TOO_DEEP,
    ERR_NON_STRING_KEY,
    ERR_STRING_LENGTH_MISMATCH,
    ERR_TRAILING_DATA,
    ERR_TYPE_MISMATCH,
    ERR_UNEXPECTED_EOF,
    ERR_UNSUPPORTED_TYPE,
    SEMANTIC,
    SYNTAX,
    BencodeError,
    category,
)
from ._schema import (
    BYTES,
    INT,
    MISSING,
    RAW,
    TEXT,
    Converter,
    Descriptor,
    Field,
    ListOf,
    bind,
    marshal,
    unbind,
    unmarshal,
)
from ._value import Dict, Int, List, Str, Value, from_plain, to_plain

__version__ = "1.0.0"

__all__ = [
    # Value model
    "Value",
    "Str",
    "Int",
    "List",
    "Dict",
    "to_plain",
    "from_plain",
    # Codec
    "decode",
    "loads",
    "encode",
    "dumps",
    "canonicalize",
    "is_canonical",
    # Schema binding
    "Converter",
    "Descriptor",
    "Field",
    "ListOf",
    "BYTES",
    "TEXT",
    "INT",
    "RAW",
    "MISSING",
    "bind",
    "unbind",
    "marshal",
    "unmarshal",
    # Limits
    "DEFAULT_MAX_DEPTH",
    "INT64_MIN",
    "INT64_MAX",
    # Exception
    "BencodeError",
    "category",
    "SYNTAX",
    "SEMANTIC",
    "BINDING",
    # Error codes
    "ERR_INVALID_TOKEN",
    "ERR_MALFORMED_LENGTH",
    "ERR_MALFORMED_INTEGER",
    "ERR_UNEXPECTED_EOF",
    "ERR_NESTING_TOO_DEEP",
    "ERR_TRAILING_DATA",
    "ERR_LEADING_ZERO",
    "ERR_NON_STRING_KEY",
    "ERR_DUPLICATE_KEY",
    "ERR_STRING_LENGTH_MISMATCH",
    "ERR_INTEGER_OVERFLOW",
    "ERR_UNSUPPORTED_TYPE",
    "ERR_TYPE_MISMATCH",
    "ERR_MISSING_REQUIRED_FIELD",
]
