"""bencode core — single-pass cursor parser and canonical encoder.

The parser walks the buffer once.  Every helper takes the current offset
and returns (value, next_offset), so a container knows exactly where its
next element starts without measuring anything up front.

The encoder is the inverse and is canonical: dictionary keys go out in
ascending unsigned-byte order and integers are re-derived from the int,
so two equal values always encode to identical bytes.  That property is
what content hashes (e.g. a torrent's info hash) rely on.
"""

from __future__ import annotations

from typing import Any, Dict as _PyDict, List as _PyList, Tuple, Union

from ._constants import (
    DEFAULT_MAX_DEPTH,
    INT64_MAX,
    INT64_MIN,
    MAX_INT_DIGITS,
    MAX_LENGTH_DIGITS,
    TOK_COLON,
    TOK_DICT,
    TOK_END,
    TOK_INT,
    TOK_LIST,
    TOK_MINUS,
    TOK_NINE,
    TOK_ZERO,
)
from ._errors import (
    ERR_DUPLICATE_KEY,
    ERR_INTEGER_OVERFLOW,
    ERR_INVALID_TOKEN,
    ERR_LEADING_ZERO,
    ERR_MALFORMED_INTEGER,
    ERR_MALFORMED_LENGTH,
    ERR_NESTING_TOO_DEEP,
    ERR_NON_STRING_KEY,
    ERR_TRAILING_DATA,
    ERR_UNEXPECTED_EOF,
    ERR_UNSUPPORTED_TYPE,
    BencodeError,
)
from ._value import Dict, Int, List, Str, Value, check_depth, from_plain

Buffer = Union[bytes, bytearray, memoryview]


def _is_digit(c: int) -> bool:
    return TOK_ZERO <= c <= TOK_NINE


def _as_bytes(buffer: Any) -> bytes:
    if isinstance(buffer, bytes):
        return buffer
    if isinstance(buffer, (bytearray, memoryview)):
        return bytes(buffer)
    raise BencodeError(ERR_UNSUPPORTED_TYPE,
                       "expected a bytes-like buffer, got {}".format(type(buffer).__name__))


# ── Decode ───────────────────────────────────────────────────

def _decode_str(buf: bytes, off: int) -> Tuple[Str, int]:
    """Decode "<n>:<n bytes>" starting at off."""
    start = off
    while True:
        if off >= len(buf):
            raise BencodeError(ERR_UNEXPECTED_EOF, "unterminated string length",
                               offset=off)
        c = buf[off]
        if c == TOK_COLON:
            break
        if not _is_digit(c):
            raise BencodeError(ERR_MALFORMED_LENGTH,
                               "unexpected byte {!r} in string length".format(bytes([c])),
                               offset=off)
        off += 1
        if off - start > MAX_LENGTH_DIGITS:
            raise BencodeError(ERR_MALFORMED_LENGTH, "string length too long",
                               offset=start)

    digits = buf[start:off]
    if not digits:
        raise BencodeError(ERR_MALFORMED_LENGTH, "missing string length", offset=start)
    # "03:abc" is not the canonical spelling of "3:abc".
    if len(digits) > 1 and digits[0] == TOK_ZERO:
        raise BencodeError(ERR_MALFORMED_LENGTH, "string length has a leading zero",
                           offset=start)

    n = int(digits)
    begin = off + 1
    end = begin + n
    if end > len(buf):
        raise BencodeError(
            ERR_UNEXPECTED_EOF,
            "string declares {} bytes but only {} remain".format(n, len(buf) - begin),
            offset=begin,
        )
    return Str(buf[begin:end], n), end


def _decode_int(buf: bytes, off: int) -> Tuple[Int, int]:
    """Decode "i[-]<digits>e" starting at off (which holds the "i")."""
    start = off
    off += 1
    negative = off < len(buf) and buf[off] == TOK_MINUS
    if negative:
        off += 1

    digit_start = off
    while off < len(buf) and _is_digit(buf[off]):
        off += 1
    if off >= len(buf):
        raise BencodeError(ERR_UNEXPECTED_EOF, "unterminated integer", offset=off)
    if buf[off] != TOK_END:
        raise BencodeError(ERR_MALFORMED_INTEGER,
                           "unexpected byte {!r} in integer".format(buf[off:off + 1]),
                           offset=off)

    digits = buf[digit_start:off]
    if not digits:
        raise BencodeError(ERR_MALFORMED_INTEGER, "integer has no digits", offset=start)
    # Applies to the magnitude, so i-03e is rejected as well as i03e.
    if len(digits) > 1 and digits[0] == TOK_ZERO:
        raise BencodeError(ERR_LEADING_ZERO, "integer has a leading zero", offset=start)
    if negative and digits == b"0":
        raise BencodeError(ERR_LEADING_ZERO, "negative zero", offset=start)
    if len(digits) > MAX_INT_DIGITS:
        raise BencodeError(ERR_INTEGER_OVERFLOW, "integer outside int64 range",
                           offset=start)

    n = -int(digits) if negative else int(digits)
    if n < INT64_MIN or n > INT64_MAX:
        raise BencodeError(ERR_INTEGER_OVERFLOW, "integer outside int64 range",
                           offset=start)
    return Int(n), off + 1


def _decode_one(buf: bytes, off: int, depth: int, max_depth: int) -> Tuple[Value, int]:
    """Decode one value at off.  depth is the nesting level of the caller."""
    if off >= len(buf):
        raise BencodeError(ERR_UNEXPECTED_EOF, "expected a value", offset=off)
    tok = buf[off]

    if _is_digit(tok):
        return _decode_str(buf, off)

    if tok == TOK_INT:
        return _decode_int(buf, off)

    if tok == TOK_LIST:
        if depth + 1 > max_depth:
            raise BencodeError(ERR_NESTING_TOO_DEEP,
                               "nesting exceeds max depth {}".format(max_depth), offset=off)
        start = off
        off += 1
        items: _PyList[Value] = []
        while True:
            if off >= len(buf):
                raise BencodeError(ERR_UNEXPECTED_EOF,
                                   "list opened at {} is not terminated".format(start),
                                   offset=off)
            if buf[off] == TOK_END:
                return List(items), off + 1
            item, off = _decode_one(buf, off, depth + 1, max_depth)
            items.append(item)

    if tok == TOK_DICT:
        if depth + 1 > max_depth:
            raise BencodeError(ERR_NESTING_TOO_DEEP,
                               "nesting exceeds max depth {}".format(max_depth), offset=off)
        start = off
        off += 1
        entries: _PyDict[bytes, Value] = {}
        while True:
            if off >= len(buf):
                raise BencodeError(ERR_UNEXPECTED_EOF,
                                   "dict opened at {} is not terminated".format(start),
                                   offset=off)
            if buf[off] == TOK_END:
                return Dict(entries), off + 1
            if not _is_digit(buf[off]):
                raise BencodeError(ERR_NON_STRING_KEY, "dict key must be a string",
                                   offset=off)
            key_off = off
            key, off = _decode_str(buf, off)
            val, off = _decode_one(buf, off, depth + 1, max_depth)
            # Input order is not checked; only uniqueness is.
            if key.data in entries:
                raise BencodeError(ERR_DUPLICATE_KEY,
                                   "duplicate key {!r}".format(key.data), offset=key_off)
            entries[key.data] = val

    raise BencodeError(ERR_INVALID_TOKEN,
                       "invalid token {!r}".format(buf[off:off + 1]), offset=off)


def decode(buffer: Buffer, offset: int = 0, *,
           max_depth: int = DEFAULT_MAX_DEPTH) -> Tuple[Value, int]:
    """Decode one value starting at offset.

    Returns (value, new_offset), where new_offset is the position just past
    the value.  Bytes after it are left alone; use loads() to require that
    the whole buffer is one value.
    """
    if max_depth < 0:
        raise ValueError("max_depth must be >= 0")
    buf = _as_bytes(buffer)
    if offset < 0:
        raise ValueError("offset must be >= 0")
    return _decode_one(buf, offset, 0, max_depth)


def loads(buffer: Buffer, *, max_depth: int = DEFAULT_MAX_DEPTH) -> Value:
    """Decode a buffer that holds exactly one value."""
    buf = _as_bytes(buffer)
    val, end = decode(buf, 0, max_depth=max_depth)
    if end != len(buf):
        raise BencodeError(ERR_TRAILING_DATA,
                           "{} bytes after the root value".format(len(buf) - end),
                           offset=end)
    return val


# ── Encode ───────────────────────────────────────────────────

def _encode_into(value: Value, out: _PyList[bytes]) -> None:
    if isinstance(value, Str):
        out.append(str(len(value)).encode("ascii"))
        out.append(b":")
        out.append(value.data)
        return

    if isinstance(value, Int):
        out.append(b"i")
        out.append(str(value.value).encode("ascii"))
        out.append(b"e")
        return

    if isinstance(value, List):
        out.append(b"l")
        for item in value:
            _encode_into(item, out)
        out.append(b"e")
        return

    if isinstance(value, Dict):
        out.append(b"d")
        # Dict.items() is already in ascending key order.
        for key, item in value.items():
            out.append(str(len(key)).encode("ascii"))
            out.append(b":")
            out.append(key)
            _encode_into(item, out)
        out.append(b"e")
        return

    raise BencodeError(ERR_UNSUPPORTED_TYPE,
                       "cannot encode {}".format(type(value).__name__))


def encode(value: Value, *, max_depth: int = DEFAULT_MAX_DEPTH) -> bytes:
    """Encode a value tree into canonical bencode bytes.

    A tree nested deeper than max_depth raises ERR_NESTING_TOO_DEEP before
    anything is written.
    """
    check_depth(value, max_depth)
    out: _PyList[bytes] = []
    _encode_into(value, out)
    return b"".join(out)


def dumps(obj: Any, *, max_depth: int = DEFAULT_MAX_DEPTH) -> bytes:
    """Encode plain Python objects (dict/list/bytes/str/int) canonically."""
    return encode(from_plain(obj, max_depth=max_depth), max_depth=max_depth)


def canonicalize(buffer: Buffer, *, max_depth: int = DEFAULT_MAX_DEPTH) -> bytes:
    """Re-encode a buffer in canonical form (sorted keys, minimal integers)."""
    return encode(loads(buffer, max_depth=max_depth), max_depth=max_depth)


def is_canonical(buffer: Buffer, *, max_depth: int = DEFAULT_MAX_DEPTH) -> bool:
    """True if the buffer is already in canonical form.

    Invalid input is not "non-canonical": it raises BencodeError like loads().
    """
    buf = _as_bytes(buffer)
    return canonicalize(buf, max_depth=max_depth) == buf
