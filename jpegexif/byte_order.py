# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Byte order helpers

Fixed-width integer and float reads at an offset, in either the Intel
("II", little-endian) or Motorola ("MM", big-endian) byte order used by
TIFF structures.

Copyright 2025 DNAi inc.
"""

import struct

from jpegexif.exceptions import ExifFormatError


def endian_prefix(little_endian: bool) -> str:
    """Return the struct byte order prefix for the given order."""
    return '<' if little_endian else '>'


def _unpack(fmt: str, data: bytes, offset: int, little_endian: bool):
    size = struct.calcsize(fmt)
    if offset < 0 or offset + size > len(data):
        raise ExifFormatError(
            f"Read of {size} bytes at offset {offset} outside buffer of {len(data)} bytes"
        )
    return struct.unpack_from(f'{endian_prefix(little_endian)}{fmt}', data, offset)[0]


def read_ushort(data: bytes, offset: int, little_endian: bool) -> int:
    """Read an unsigned 16-bit integer."""
    return _unpack('H', data, offset, little_endian)


def read_short(data: bytes, offset: int, little_endian: bool) -> int:
    """Read a signed 16-bit integer."""
    return _unpack('h', data, offset, little_endian)


def read_uint(data: bytes, offset: int, little_endian: bool) -> int:
    """Read an unsigned 32-bit integer."""
    return _unpack('I', data, offset, little_endian)


def read_int(data: bytes, offset: int, little_endian: bool) -> int:
    """Read a signed 32-bit integer."""
    return _unpack('i', data, offset, little_endian)


def read_float(data: bytes, offset: int, little_endian: bool) -> float:
    """Read an IEEE 754 single precision float."""
    return _unpack('f', data, offset, little_endian)


def read_double(data: bytes, offset: int, little_endian: bool) -> float:
    """Read an IEEE 754 double precision float."""
    return _unpack('d', data, offset, little_endian)
