"""bencode constants: token bytes, integer range, and nesting limits.

The grammar is:

    value   := string | integer | list | dict
    string  := <decimal-length> ":" <length-bytes>
    integer := "i" ["-"] <digits, no leading zero unless "0"> "e"
    list    := "l" value* "e"
    dict    := "d" (string value)* "e"
"""

from __future__ import annotations

# ── Token bytes (single byte each) ───────────────────────────
# Compared against ints, since indexing bytes yields ints in Python 3.
TOK_INT: int = ord("i")
TOK_LIST: int = ord("l")
TOK_DICT: int = ord("d")
TOK_END: int = ord("e")
TOK_COLON: int = ord(":")
TOK_MINUS: int = ord("-")
TOK_ZERO: int = ord("0")
TOK_NINE: int = ord("9")

# ── Signed 64-bit integer range ──────────────────────────────
# Python ints are arbitrary-precision, so the range is checked explicitly
# both when parsing and when constructing Int values.
INT64_MIN: int = -(2**63)
INT64_MAX: int = 2**63 - 1

# Longest digit run that can still fit in int64 ("9223372036854775808" is
# 19 digits).  Anything longer is rejected before calling int().
MAX_INT_DIGITS: int = 19

# String lengths are bounded by the buffer anyway; this just stops us from
# building a huge int out of a run of digits.
MAX_LENGTH_DIGITS: int = 20

# ── Nesting limit ────────────────────────────────────────────
# The root container sits at depth 1.  Exceeding the limit is an error,
# not a RecursionError.  Overridable per call with max_depth=.
DEFAULT_MAX_DEPTH: int = 64

# Environment variable the CLI reads for its --max-depth default.
ENV_MAX_DEPTH: str = "BENCODEC_MAX_DEPTH"
