# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Tarball packaging for tombstone releases.

Writes a POSIX ustar archive (512-byte blocks) from in-memory text files,
then gzips it. Only regular files; no directories, links or long names.
"""

import gzip
import time
from typing import Dict, Optional

BLOCK_SIZE = 512

FILE_MODE = 0o644
USTAR_MAGIC = b"ustar\x00"
USTAR_VERSION = b"00"

CHECKSUM_OFFSET = 148
CHECKSUM_LENGTH = 8


def _write_field(header: bytearray, value: bytes, offset: int, length: int) -> None:
    # Always leave room for a terminating NUL
    chunk = value[:length - 1]
    header[offset:offset + len(chunk)] = chunk


def _write_octal(header: bytearray, value: int, offset: int, length: int) -> None:
    _write_field(header, format(value, "o").zfill(length - 1).encode("ascii"), offset, length)


def header_checksum(header: bytes) -> int:
    """Unsigned byte sum with the checksum field counted as eight ASCII spaces."""
    return (
        sum(header[:CHECKSUM_OFFSET])
        + ord(" ") * CHECKSUM_LENGTH
        + sum(header[CHECKSUM_OFFSET + CHECKSUM_LENGTH:BLOCK_SIZE])
    )


def create_header(name: str, size: int, mtime: Optional[int] = None) -> bytes:
    """Build the 512-byte header block for one regular file."""
    if mtime is None:
        mtime = int(time.time())

    header = bytearray(BLOCK_SIZE)
    _write_field(header, name.encode("utf-8"), 0, 100)
    _write_octal(header, FILE_MODE, 100, 8)
    _write_octal(header, 0, 108, 8)         # uid
    _write_octal(header, 0, 116, 8)         # gid
    _write_octal(header, size, 124, 12)
    _write_octal(header, mtime, 136, 12)
    header[CHECKSUM_OFFSET:CHECKSUM_OFFSET + CHECKSUM_LENGTH] = b" " * CHECKSUM_LENGTH
    header[156:157] = b"0"                  # regular file
    header[257:263] = USTAR_MAGIC
    header[263:265] = USTAR_VERSION

    _write_octal(header, header_checksum(header), CHECKSUM_OFFSET, CHECKSUM_LENGTH)
    return bytes(header)


def _pad_to_block(data: bytes) -> bytes:
    remainder = len(data) % BLOCK_SIZE
    if remainder == 0:
        return data
    return data + b"\x00" * (BLOCK_SIZE - remainder)


def create(files: Dict[str, str], mtime: Optional[int] = None) -> bytes:
    """
    Uncompressed archive of `files` (path -> text content).

    Entries are written in mapping order, followed by two zero blocks.
    """
    parts = []
    for name, content in files.items():
        data = content.encode("utf-8")
        parts.append(create_header(name, len(data), mtime))
        parts.append(_pad_to_block(data))

    parts.append(b"\x00" * (BLOCK_SIZE * 2))
    return b"".join(parts)


def build(files: Dict[str, str], mtime: Optional[int] = None) -> bytes:
    """Gzipped archive of `files`, ready to publish."""
    return gzip.compress(create(files, mtime))
