# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
EXIF segment parser

Parses the TIFF structure embedded in a JPEG APP1 "Exif" segment and walks
its directory tree (IFD0 -> IFD1, plus the Exif, GPS and MakerNote
sub-directories) into a JpegInfo record.

Segment layout, indices relative to the segment buffer:

    0-1   segment length (big-endian)
    2-7   "Exif\\0\\0"
    8-9   byte order, "II" or "MM"
    10-11 TIFF magic 0x002A
    12-15 offset of IFD0, relative to byte 8

Every offset inside the TIFF structure is relative to byte 8 (the offset
base). Offsets come straight from the file, so each one is bounds-checked
before it is followed, and nesting is capped by the reader configuration.
Malformed structures end the affected branch silently.

Copyright 2025 DNAi inc.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from jpegexif.byte_order import read_ushort, read_uint
from jpegexif.config import ReaderConfig
from jpegexif.exif_tag import ExifTag, ENTRY_SIZE
from jpegexif.exif_tags import ExifIFD
from jpegexif.jpeg_info import JpegInfo

logger = logging.getLogger(__name__)

# Position of the TIFF header in the segment buffer
TIFF_HEADER_OFFSET = 8
TIFF_MAGIC = 0x002A

_POINTER_TAGS = {ifd.value: ifd for ifd in ExifIFD}


class DirectoryBudget:
    """Number of directories one parse may still visit."""
    
    def __init__(self, remaining: int):
        self.remaining = remaining
    
    def take(self) -> bool:
        """Consume one visit, returning False once the budget is spent."""
        if self.remaining <= 0:
            return False
        self.remaining -= 1
        return True


@dataclass(frozen=True)
class ParseContext:
    """
    Immutable state shared by every directory of one EXIF segment.
    
    Attributes:
        section: Segment buffer
        little_endian: Byte order declared by the TIFF header
        offset_base: Position of the TIFF header in ``section``
        length: Usable bytes after ``offset_base``
        config: Reader limits and switches
        budget: Directory visits left for this parse
    """
    section: bytes
    little_endian: bool
    offset_base: int
    length: int
    config: ReaderConfig
    budget: DirectoryBudget = field(compare=False)
    
    @property
    def end(self) -> int:
        """One past the last usable byte."""
        return self.offset_base + self.length


def process_exif(section: bytes, info: JpegInfo, config: Optional[ReaderConfig] = None) -> bool:
    """
    Parse an APP1 Exif segment into ``info``.
    
    The caller has already checked that bytes 2-5 spell "Exif".
    
    Args:
        section: Segment buffer, starting with the two length bytes
        info: Record to populate
        config: Reader configuration (defaults apply when omitted)
        
    Returns:
        True if the header was sound and the directory walk started,
        False if the segment was rejected
    """
    config = config or ReaderConfig()
    
    if len(section) < TIFF_HEADER_OFFSET + 8:
        logger.debug("Exif segment too short for a TIFF header (%d bytes)", len(section))
        return False
    
    if section[6] != 0 or section[7] != 0:
        logger.debug("\"Exif\" not followed by two null bytes")
        return False
    
    byte_order = bytes(section[8:10])
    if byte_order == b'II':
        little_endian = True  # Intel
    elif byte_order == b'MM':
        little_endian = False  # Motorola
    else:
        logger.debug("Unknown TIFF byte order %r", byte_order)
        return False
    
    if read_ushort(section, 10, little_endian) != TIFF_MAGIC:
        logger.debug("Bad TIFF magic number")
        return False
    
    first_ifd = read_uint(section, 12, little_endian)
    if first_ifd < 8 or first_ifd > 16:
        if first_ifd < 16 or first_ifd > len(section) - 16:
            logger.debug("Invalid IFD0 offset %d", first_ifd)
            return False
    
    context = ParseContext(
        section=section,
        little_endian=little_endian,
        offset_base=TIFF_HEADER_OFFSET,
        length=len(section) - TIFF_HEADER_OFFSET,
        config=config,
        budget=DirectoryBudget(config.max_directories),
    )
    process_exif_dir(context, info, first_ifd + TIFF_HEADER_OFFSET, 0, ExifIFD.EXIF)
    return True


def dir_entry_offset(dir_offset: int, index: int) -> int:
    """Position of entry ``index`` of the directory at ``dir_offset``."""
    return dir_offset + 2 + ENTRY_SIZE * index


def process_exif_dir(
    context: ParseContext,
    info: JpegInfo,
    dir_offset: int,
    depth: int,
    ifd: ExifIFD
) -> None:
    """
    Walk one directory and everything reachable from it.
    
    Pointer tags (Exif, GPS, MakerNote) descend into a child directory
    of the matching role; any other valid entry is written into
    ``info``. A non-zero next-IFD link continues with the same role.
    
    Args:
        context: Shared parse state
        info: Record to populate
        dir_offset: Position of the directory in the segment buffer
        depth: Nesting depth, 0 for IFD0
        ifd: Role of this directory
    """
    config = context.config
    section = context.section
    little_endian = context.little_endian
    
    if depth > config.max_depth:
        # corrupted Exif header
        logger.debug("Directory at %d exceeds depth %d", dir_offset, config.max_depth)
        return
    
    if dir_offset < 0 or dir_offset + 2 > len(section):
        logger.debug("Directory at %d lies outside the segment", dir_offset)
        return
    
    if not context.budget.take():
        logger.debug("Directory budget spent, skipping directory at %d", dir_offset)
        return
    
    num_entries = read_ushort(section, dir_offset, little_endian)
    if dir_entry_offset(dir_offset, num_entries) >= dir_offset + context.length:
        logger.debug("Directory at %d too long (%d entries)", dir_offset, num_entries)
        return
    if dir_entry_offset(dir_offset, num_entries) > len(section):
        logger.debug("Directory at %d truncated (%d entries)", dir_offset, num_entries)
        return
    
    for index in range(num_entries):
        exif_tag = ExifTag(
            section,
            dir_entry_offset(dir_offset, index),
            context.offset_base,
            context.length,
            little_endian,
        )
        if not exif_tag.is_valid:
            logger.debug("Skipping invalid entry %r", exif_tag)
            continue
        
        child_ifd = _POINTER_TAGS.get(exif_tag.tag)
        if child_ifd is None:
            exif_tag.populate(info, ifd, config.record_extra_tags)
            continue
        
        dir_start = context.offset_base + exif_tag.pointer(config.maker_note_at_blob)
        if _child_in_bounds(context, dir_start):
            process_exif_dir(context, info, dir_start, depth + 1, child_ifd)
        else:
            logger.debug("%s pointer %d out of bounds", child_ifd.group, dir_start)
    
    # final link defined?
    link_offset = dir_entry_offset(dir_offset, num_entries)
    if link_offset + 4 <= context.end:
        next_offset = read_uint(section, link_offset, little_endian)
        if next_offset > 0:
            sub_dir_start = context.offset_base + next_offset
            if context.offset_base <= sub_dir_start <= context.end:
                process_exif_dir(context, info, sub_dir_start, depth + 1, ifd)
            else:
                logger.debug("Next IFD link %d out of bounds", sub_dir_start)
    
    if config.keep_thumbnail:
        materialize_thumbnail(context, info)


def _child_in_bounds(context: ParseContext, dir_start: int) -> bool:
    if dir_start > context.end:
        return False
    if context.config.strict_bounds:
        return dir_start >= context.offset_base
    return True


def materialize_thumbnail(context: ParseContext, info: JpegInfo) -> None:
    """
    Copy the IFD1 thumbnail out of the segment once its tags are known.
    
    Does nothing when the thumbnail was already copied, when either tag
    is missing, or when the declared range does not fit the segment.
    """
    if info.thumbnail_data is not None:
        return
    if info.thumbnail_offset <= 0 or info.thumbnail_size <= 0:
        return
    start = context.offset_base + info.thumbnail_offset
    end = start + info.thumbnail_size
    if end > len(context.section):
        return
    info.thumbnail_data = bytes(context.section[start:end])
