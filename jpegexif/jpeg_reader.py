# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
JPEG segment reader

Reads a JPEG marker stream sequentially up to the start of the scan data,
picking up the frame size from the Start-Of-Frame segment and handing the
APP1 Exif segment to the EXIF parser. Only the header segments are read;
the compressed image data is never touched.

Based on http://www.media.mit.edu/pia/Research/deepview/exif.html

Copyright 2025 DNAi inc.
"""

import io
import logging
import time
from datetime import timedelta
from pathlib import Path
from typing import BinaryIO, Optional, Union

from jpegexif.config import ReaderConfig
from jpegexif.crop_factor import apply_crop_factor
from jpegexif.exceptions import MetadataReadError
from jpegexif.exif_parser import process_exif
from jpegexif.exif_tags import JpegMarker, SOF_MARKERS
from jpegexif.jpeg_info import JpegInfo

logger = logging.getLogger(__name__)

EXIF_SIGNATURE = b'Exif'


class ByteSource:
    """
    Sequential reader over a binary stream with an optional byte limit.
    
    Once ``limit`` bytes have been consumed the source behaves as if the
    stream had ended.
    """
    
    def __init__(self, stream: BinaryIO, limit: Optional[int] = None):
        self.stream = stream
        self.limit = limit
        self.consumed = 0
    
    def read(self, size: int) -> bytes:
        """Read up to ``size`` bytes, fewer only at end of stream."""
        if self.limit is not None:
            size = min(size, self.limit - self.consumed)
        if size <= 0:
            return b''
        chunks = []
        remaining = size
        while remaining > 0:
            chunk = self.stream.read(remaining)
            if not chunk:
                break
            chunks.append(chunk)
            remaining -= len(chunk)
        data = b''.join(chunks)
        self.consumed += len(data)
        return data
    
    def read_byte(self) -> int:
        """Read one byte, returning -1 at end of stream."""
        data = self.read(1)
        return data[0] if data else -1


def find_next_marker(source: ByteSource) -> int:
    """
    Skip to the next marker and return its code.
    
    A marker is any byte other than 0xFF that follows an 0xFF byte, so
    runs of 0xFF fill bytes are skipped.
    
    Returns:
        Marker code, or -1 if the stream ends first
    """
    prev = 0
    while True:
        marker = source.read_byte()
        if marker < 0:
            return -1
        if marker != JpegMarker.START and prev == JpegMarker.START:
            return marker
        prev = marker


def process_sof(section: bytes, info: JpegInfo) -> None:
    """
    Read the frame size and colour flag from a Start-Of-Frame segment.
    
    Bytes 0-1 are the segment length and byte 2 the sample precision.
    """
    if len(section) < 8:
        logger.debug("Start-Of-Frame segment too short (%d bytes)", len(section))
        return
    info.height = (section[3] << 8) | section[4]
    info.width = (section[5] << 8) | section[6]
    components = section[7]
    info.is_color = components == 3


def scan_segments(stream: BinaryIO, info: JpegInfo, config: Optional[ReaderConfig] = None) -> JpegInfo:
    """
    Walk the marker segments of a JPEG stream into ``info``.
    
    Stops at Start-Of-Scan, End-Of-Image, end of stream or a truncated
    segment; whatever was gathered up to that point is kept.
    
    Args:
        stream: Binary stream positioned at the start of the JPEG
        info: Record to populate
        config: Reader configuration (defaults apply when omitted)
        
    Returns:
        The populated record
    """
    config = config or ReaderConfig()
    source = ByteSource(stream, config.max_bytes)
    
    # ensure SOI marker
    if source.read(2) != bytes((JpegMarker.START, JpegMarker.SOI)):
        logger.debug("Missing JPEG start-of-image marker")
        return info
    
    info.is_valid = True
    
    while True:
        marker = find_next_marker(source)
        if marker < 0:
            logger.debug("End of stream before start of scan")
            return info
        
        length_bytes = source.read(2)
        if len(length_bytes) != 2:
            return info
        item_len = (length_bytes[0] << 8) | length_bytes[1]
        if item_len < 2:
            logger.debug("Bad length %d for marker 0x%02X", item_len, marker)
            return info
        
        payload = source.read(item_len - 2)
        if len(payload) != item_len - 2:
            logger.debug("Segment 0x%02X truncated: %d of %d bytes", marker, len(payload), item_len - 2)
            return info
        section = length_bytes + payload
        
        if marker in (JpegMarker.SOS, JpegMarker.EOI):
            return info
        if marker == JpegMarker.APP1:
            if section[2:6] == EXIF_SIGNATURE:
                process_exif(section, info, config)
        elif marker == JpegMarker.APP13:
            # IPTC, not interpreted
            pass
        elif marker in SOF_MARKERS:
            process_sof(section, info)


def read_jpeg(stream: BinaryIO, config: Optional[ReaderConfig] = None) -> JpegInfo:
    """
    Read the metadata of a JPEG image from a binary stream.
    
    Malformed input never raises; check ``is_valid`` to find out whether
    the stream was a JPEG at all.
    
    Args:
        stream: Binary stream positioned at the start of the JPEG
        config: Reader configuration (defaults apply when omitted)
        
    Returns:
        Populated JpegInfo, including the crop factor and load duration
    """
    then = time.perf_counter()
    info = JpegInfo()
    scan_segments(stream, info, config)
    apply_crop_factor(info)
    info.load_duration = timedelta(seconds=time.perf_counter() - then)
    return info


def read_jpeg_bytes(data: bytes, config: Optional[ReaderConfig] = None) -> JpegInfo:
    """Read the metadata of a JPEG image held in memory."""
    return read_jpeg(io.BytesIO(data), config)


def read_jpeg_file(file_path: Union[str, Path], config: Optional[ReaderConfig] = None) -> JpegInfo:
    """
    Read the metadata of a JPEG file.
    
    Args:
        file_path: Path to the image file
        config: Reader configuration (defaults apply when omitted)
        
    Returns:
        Populated JpegInfo with ``file_name`` and ``file_size`` set
        
    Raises:
        MetadataReadError: If the file cannot be opened or read
    """
    path = Path(file_path)
    try:
        with open(path, 'rb') as f:
            info = read_jpeg(f, config)
            info.file_size = path.stat().st_size
    except OSError as e:
        raise MetadataReadError(f"Failed to read {path}: {e}") from e
    info.file_name = str(path)
    return info


class JpegExifReader:
    """
    Reader for the EXIF metadata of a JPEG image.
    
    Example:
        >>> info = JpegExifReader('image.jpg').read()
        >>> info.model, info.crop_factor
    """
    
    def __init__(
        self,
        file_path: Optional[Union[str, Path]] = None,
        file_data: Optional[bytes] = None,
        config: Optional[ReaderConfig] = None
    ):
        """
        Initialize the reader.
        
        Args:
            file_path: Path to the image file
            file_data: Raw file data (alternative to file_path)
            config: Reader configuration (defaults apply when omitted)
        """
        self.file_path = file_path
        self.file_data = file_data
        self.config = config or ReaderConfig()
    
    def read(self) -> JpegInfo:
        """
        Read the metadata.
        
        Returns:
            Populated JpegInfo
            
        Raises:
            MetadataReadError: If there is nothing to read or the file
                cannot be opened
        """
        if self.file_path:
            return read_jpeg_file(self.file_path, self.config)
        if self.file_data is None:
            raise MetadataReadError("No file path or file data provided")
        return read_jpeg_bytes(self.file_data, self.config)
