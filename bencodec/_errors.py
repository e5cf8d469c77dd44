"""bencode error codes, exception class, and error categories.

Every failure in the codec is a BencodeError carrying one of the ERR_*
codes below.  The first error aborts the whole operation; nothing is
retried and no partial value is returned.
"""

from __future__ import annotations

from typing import Dict, Optional

# ── Syntax errors (parser) ───────────────────────────────────
ERR_INVALID_TOKEN: str = "ERR_INVALID_TOKEN"                  # unknown type byte
ERR_MALFORMED_LENGTH: str = "ERR_MALFORMED_LENGTH"            # bad "<n>:" prefix
ERR_MALFORMED_INTEGER: str = "ERR_MALFORMED_INTEGER"          # bad "i...e" body
ERR_UNEXPECTED_EOF: str = "ERR_UNEXPECTED_EOF"                # buffer ran out
ERR_NESTING_TOO_DEEP: str = "ERR_NESTING_TOO_DEEP"            # exceeds max_depth
ERR_TRAILING_DATA: str = "ERR_TRAILING_DATA"                  # bytes after root

# ── Semantic errors (parser / value construction) ────────────
ERR_LEADING_ZERO: str = "ERR_LEADING_ZERO"                    # i03e, i-0e
ERR_NON_STRING_KEY: str = "ERR_NON_STRING_KEY"                # dict key not a string
ERR_DUPLICATE_KEY: str = "ERR_DUPLICATE_KEY"                  # repeated dict key
ERR_STRING_LENGTH_MISMATCH: str = "ERR_STRING_LENGTH_MISMATCH"
ERR_INTEGER_OVERFLOW: str = "ERR_INTEGER_OVERFLOW"            # outside int64
ERR_UNSUPPORTED_TYPE: str = "ERR_UNSUPPORTED_TYPE"            # no bencode form

# ── Binding errors (schema binder) ───────────────────────────
ERR_TYPE_MISMATCH: str = "ERR_TYPE_MISMATCH"
ERR_MISSING_REQUIRED_FIELD: str = "ERR_MISSING_REQUIRED_FIELD"

SYNTAX: str = "syntax"
SEMANTIC: str = "semantic"
BINDING: str = "binding"

_CATEGORIES: Dict[str, str] = {
    ERR_INVALID_TOKEN: SYNTAX,
    ERR_MALFORMED_LENGTH: SYNTAX,
    ERR_MALFORMED_INTEGER: SYNTAX,
    ERR_UNEXPECTED_EOF: SYNTAX,
    ERR_NESTING_TOO_DEEP: SYNTAX,
    ERR_TRAILING_DATA: SYNTAX,
    ERR_LEADING_ZERO: SEMANTIC,
    ERR_NON_STRING_KEY: SEMANTIC,
    ERR_DUPLICATE_KEY: SEMANTIC,
    ERR_STRING_LENGTH_MISMATCH: SEMANTIC,
    ERR_INTEGER_OVERFLOW: SEMANTIC,
    ERR_UNSUPPORTED_TYPE: SEMANTIC,
    ERR_TYPE_MISMATCH: BINDING,
    ERR_MISSING_REQUIRED_FIELD: BINDING,
}


class BencodeError(Exception):
    """Exception for every bencode decode, encode and binding failure.

    `.code` is one of the ERR_* strings above and is what tests compare
    against.  `.offset` is the byte position where a parse error was
    detected; `.path` is the dotted field path for binding errors.  Either
    may be None.
    """

    def __init__(self, code: str, msg: str = "", *,
                 offset: Optional[int] = None,
                 path: Optional[str] = None) -> None:
        super().__init__(msg or code)
        self.code = code
        self.offset = offset
        self.path = path

    @property
    def category(self) -> str:
        return category(self.code)


def category(code: str) -> str:
    """Return "syntax", "semantic" or "binding" for an error code."""
    try:
        return _CATEGORIES[code]
    except KeyError:
        raise ValueError("unknown error code: {}".format(code))
