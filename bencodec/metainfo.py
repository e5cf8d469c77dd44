"""Torrent metainfo records and their descriptors.

    >>> from bencodec import unmarshal
    >>> from bencodec.metainfo import METAINFO
    >>> meta = unmarshal(data, METAINFO)
    >>> meta.info.name, meta.info.piece_length

Both single-file (`length`) and multi-file (`files`) layouts bind to the
same Info record; whichever is absent is left as None.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from typing import List, Optional

from ._constants import DEFAULT_MAX_DEPTH
from ._core import Buffer, encode, loads
from ._errors import ERR_MISSING_REQUIRED_FIELD, ERR_TYPE_MISMATCH, BencodeError
from ._schema import BYTES, INT, TEXT, Descriptor, Field, ListOf
from ._value import Dict

# Each entry of `pieces` is a SHA-1 digest.
PIECE_HASH_LEN: int = 20


@dataclass(frozen=True)
class FileEntry:
    length: int = 0
    path: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class Info:
    name: str = ""
    piece_length: int = 0
    pieces: bytes = b""
    length: Optional[int] = None
    files: Optional[List[FileEntry]] = None
    private: Optional[int] = None

    @property
    def total_length(self) -> int:
        if self.files:
            return sum(f.length for f in self.files)
        return self.length or 0

    def piece_hashes(self) -> List[bytes]:
        """Split `pieces` into its 20-byte digests."""
        if len(self.pieces) % PIECE_HASH_LEN:
            raise BencodeError(ERR_TYPE_MISMATCH,
                               "info.pieces: length is not a multiple of 20",
                               path="info.pieces")
        return [self.pieces[i:i + PIECE_HASH_LEN]
                for i in range(0, len(self.pieces), PIECE_HASH_LEN)]


@dataclass(frozen=True)
class MetaInfo:
    announce: str = ""
    info: Optional[Info] = None
    announce_list: Optional[List[List[str]]] = None
    comment: Optional[str] = None
    created_by: Optional[str] = None
    creation_date: Optional[int] = None


FILE_ENTRY = Descriptor(FileEntry, [
    Field("length", INT),
    Field("path", ListOf(TEXT)),
])

INFO = Descriptor(Info, [
    Field("name", TEXT),
    Field("piece_length", INT, "piece length"),
    Field("pieces", BYTES),
    # Single-file torrents carry `length`, multi-file ones `files`.
    Field("length", INT, optional=True, default=None),
    Field("files", ListOf(FILE_ENTRY), optional=True, default=None),
    Field("private", INT, optional=True, default=None),
])

METAINFO = Descriptor(MetaInfo, [
    Field("announce", TEXT),
    Field("info", INFO),
    Field("announce_list", ListOf(ListOf(TEXT)), "announce-list", optional=True, default=None),
    Field("comment", TEXT, optional=True, default=None),
    Field("created_by", TEXT, "created by", optional=True, default=None),
    Field("creation_date", INT, "creation date", optional=True, default=None),
])


def info_hash(buffer: Buffer, *, max_depth: int = DEFAULT_MAX_DEPTH) -> bytes:
    """SHA-1 of the canonical encoding of the decoded `info` dictionary.

    Hashes the dictionary as decoded, keys the Info record does not model
    included, so the digest matches the one trackers and peers use.
    """
    root = loads(buffer, max_depth=max_depth)
    if not isinstance(root, Dict):
        raise BencodeError(ERR_TYPE_MISMATCH, "metainfo root must be a Dict")
    info = root.get(b"info")
    if info is None:
        raise BencodeError(ERR_MISSING_REQUIRED_FIELD, "info: required field is missing",
                           path="info")
    if not isinstance(info, Dict):
        raise BencodeError(ERR_TYPE_MISMATCH, "info: expected Dict", path="info")
    return hashlib.sha1(encode(info, max_depth=max_depth)).digest()
