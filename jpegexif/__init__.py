# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
jpegexif - EXIF metadata and crop factor from JPEG images

Reads the header segments of a JPEG file, walks the TIFF directory tree
inside its APP1 Exif segment and derives the camera crop factor from the
focal plane resolution tags. Pure Python, reading the binary structures
directly.

Copyright 2025 DNAi inc.
"""

__version__ = "0.1.0"
__author__ = "DNAi inc."

from jpegexif.config import ReaderConfig
from jpegexif.crop_factor import calculate_crop_factor, apply_crop_factor
from jpegexif.exceptions import JpegExifError, MetadataReadError, ExifFormatError
from jpegexif.exif_tags import ExifIFD
from jpegexif.jpeg_info import JpegInfo
from jpegexif.jpeg_reader import (
    JpegExifReader,
    read_jpeg,
    read_jpeg_bytes,
    read_jpeg_file,
)

__all__ = [
    "JpegExifReader",
    "read_jpeg",
    "read_jpeg_bytes",
    "read_jpeg_file",
    "JpegInfo",
    "ReaderConfig",
    "ExifIFD",
    "calculate_crop_factor",
    "apply_crop_factor",
    "JpegExifError",
    "MetadataReadError",
    "ExifFormatError",
]
