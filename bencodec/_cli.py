"""bencodec command-line interface.

Usage:
    python3 -m bencodec decode [--input FILE]
    python3 -m bencodec canon [--input FILE] [--check]
    python3 -m bencodec info [--input FILE] [--strict]
    python3 -m bencodec version

Input is read from FILE or stdin.  Errors are reported on stderr with
their code and the process exits with status 2.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import Any, List, Optional

from . import (
    BencodeError,
    __version__,
    canonicalize,
    loads,
    to_plain,
    unmarshal,
)
from ._constants import DEFAULT_MAX_DEPTH, ENV_MAX_DEPTH
from .metainfo import METAINFO, info_hash

logger = logging.getLogger("bencodec")


def _default_max_depth() -> int:
    raw = os.environ.get(ENV_MAX_DEPTH)
    if not raw:
        return DEFAULT_MAX_DEPTH
    try:
        value = int(raw)
    except ValueError:
        logger.warning("ignoring non-integer %s=%r", ENV_MAX_DEPTH, raw)
        return DEFAULT_MAX_DEPTH
    if value < 0:
        logger.warning("ignoring negative %s=%r", ENV_MAX_DEPTH, raw)
        return DEFAULT_MAX_DEPTH
    return value


def _depth_arg(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError("not an integer: {!r}".format(text))
    if value < 0:
        raise argparse.ArgumentTypeError("must be >= 0, got {}".format(value))
    return value


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bencodec",
        description="bencodec — decode, canonicalize and inspect bencoded data",
    )
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable debug logging")
    sub = parser.add_subparsers(dest="command")

    def add_common(p: argparse.ArgumentParser) -> None:
        p.add_argument("--input", "-i", metavar="FILE",
                       help="Read bencoded data from FILE instead of stdin")
        p.add_argument("--max-depth", type=_depth_arg, default=_default_max_depth(),
                       metavar="N",
                       help="Maximum container nesting (default: ${} or {})".format(
                           ENV_MAX_DEPTH, DEFAULT_MAX_DEPTH))

    # ── decode ──
    decode_p = sub.add_parser("decode", help="Print the decoded value as JSON")
    add_common(decode_p)

    # ── canon ──
    canon_p = sub.add_parser("canon", help="Emit the canonical encoding")
    add_common(canon_p)
    canon_p.add_argument("--check", action="store_true",
                         help="Only report whether the input is already canonical")

    # ── info ──
    info_p = sub.add_parser("info", help="Summarize a torrent metainfo file")
    add_common(info_p)
    info_p.add_argument("--strict", action="store_true",
                        help="Fail on missing required fields instead of defaulting")

    # ── version ──
    sub.add_parser("version", help="Print version and exit")

    return parser


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def _read_input(filepath: Optional[str]) -> bytes:
    """Read raw bytes from a file or stdin."""
    if filepath:
        with open(filepath, "rb") as f:
            return f.read()
    if sys.stdin.isatty():
        print("bencodec: reading from stdin (Ctrl-D to end)...", file=sys.stderr)
    return sys.stdin.buffer.read()


def _text_or_hex(b: bytes) -> Any:
    try:
        return b.decode("utf-8")
    except UnicodeDecodeError:
        return {"hex": b.hex()}


def _jsonable(obj: Any) -> Any:
    """Make a plain projection printable: bytes become text where possible."""
    if isinstance(obj, bytes):
        return _text_or_hex(obj)
    if isinstance(obj, list):
        return [_jsonable(v) for v in obj]
    if isinstance(obj, dict):
        out = {}
        for k, v in obj.items():
            key = _text_or_hex(k)
            out[key if isinstance(key, str) else "0x" + k.hex()] = _jsonable(v)
        return out
    return obj


def _cmd_decode(args: argparse.Namespace) -> int:
    raw = _read_input(args.input)
    value = loads(raw, max_depth=args.max_depth)
    plain = to_plain(value, max_depth=args.max_depth)
    print(json.dumps(_jsonable(plain), indent=2, ensure_ascii=False))
    return 0


def _cmd_canon(args: argparse.Namespace) -> int:
    raw = _read_input(args.input)
    canon = canonicalize(raw, max_depth=args.max_depth)
    if args.check:
        if canon == raw:
            print("canonical")
            return 0
        print("not canonical")
        return 1
    sys.stdout.buffer.write(canon)
    sys.stdout.buffer.flush()
    return 0


def _cmd_info(args: argparse.Namespace) -> int:
    raw = _read_input(args.input)
    meta = unmarshal(raw, METAINFO, strict=args.strict, max_depth=args.max_depth)
    digest = info_hash(raw, max_depth=args.max_depth)
    info = meta.info
    print("announce:     {}".format(meta.announce))
    if info is not None:
        print("name:         {}".format(info.name))
        print("total length: {}".format(info.total_length))
        print("piece length: {}".format(info.piece_length))
        print("pieces:       {}".format(len(info.piece_hashes())))
    print("info hash:    {}".format(digest.hex()))
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if args.command == "version":
        print(f"bencodec {__version__}")
        return

    _setup_logging(args.verbose)

    try:
        if args.command == "decode":
            status = _cmd_decode(args)
        elif args.command == "canon":
            status = _cmd_canon(args)
        else:
            status = _cmd_info(args)
    except BencodeError as e:
        where = " at offset {}".format(e.offset) if e.offset is not None else ""
        print(f"bencodec: error [{e.code}]{where}: {e}", file=sys.stderr)
        sys.exit(2)
    except OSError as e:
        print(f"bencodec: cannot read input: {e}", file=sys.stderr)
        sys.exit(2)
    if status:
        sys.exit(status)


if __name__ == "__main__":
    main()
