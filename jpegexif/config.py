# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Reader configuration

Limits and switches for a JPEG/EXIF parse. The defaults reproduce the
standard behaviour of the reader; callers only need a custom instance to
tighten limits or to relax the pointer bounds check.

Copyright 2025 DNAi inc.
"""

from typing import Optional

# EXIF directories never legitimately nest deeper than this
DEFAULT_MAX_DEPTH = 4

# Upper bound on bytes consumed from one stream
DEFAULT_MAX_BYTES = 64 * 1024 * 1024

# Upper bound on directories visited in one EXIF segment
DEFAULT_MAX_DIRECTORIES = 64


class ReaderConfig:
    """
    Configuration for a JPEG metadata read.
    
    Attributes:
        max_depth: Deepest directory nesting that is still followed
        max_bytes: Stop scanning after this many bytes (None for no limit)
        max_directories: Stop walking after visiting this many directories
        strict_bounds: Require Exif/GPS/MakerNote pointers to land at or
            after the TIFF header, like IFD chain links. When False only
            the upper bound is checked.
        keep_thumbnail: Copy the IFD1 thumbnail into the record
        record_extra_tags: Keep tags without a dedicated record field
        maker_note_at_blob: Walk a MakerNote stored as an out-of-line
            UNDEFINED blob at the blob position instead of at the offset
            held in its first value
    """
    
    def __init__(
        self,
        max_depth: int = DEFAULT_MAX_DEPTH,
        max_bytes: Optional[int] = DEFAULT_MAX_BYTES,
        max_directories: int = DEFAULT_MAX_DIRECTORIES,
        strict_bounds: bool = True,
        keep_thumbnail: bool = True,
        record_extra_tags: bool = True,
        maker_note_at_blob: bool = False
    ):
        """
        Initialize reader configuration.
        
        Args:
            max_depth: Deepest directory nesting that is still followed
            max_bytes: Stop scanning after this many bytes (None for no limit)
            max_directories: Stop walking after visiting this many directories
            strict_bounds: Two-sided bounds check on sub-directory pointers
            keep_thumbnail: Copy the IFD1 thumbnail into the record
            record_extra_tags: Keep tags without a dedicated record field
            maker_note_at_blob: Walk MakerNote blobs where they are stored
            
        Raises:
            ValueError: If a limit is negative
        """
        if max_depth < 0:
            raise ValueError("max_depth must not be negative")
        if max_bytes is not None and max_bytes < 0:
            raise ValueError("max_bytes must not be negative")
        if max_directories < 0:
            raise ValueError("max_directories must not be negative")
        self.max_depth = max_depth
        self.max_bytes = max_bytes
        self.max_directories = max_directories
        self.strict_bounds = strict_bounds
        self.keep_thumbnail = keep_thumbnail
        self.record_extra_tags = record_extra_tags
        self.maker_note_at_blob = maker_note_at_blob
    
    def __repr__(self) -> str:
        return (f"ReaderConfig(max_depth={self.max_depth}, max_bytes={self.max_bytes}, "
                f"max_directories={self.max_directories}, "
                f"strict_bounds={self.strict_bounds}, keep_thumbnail={self.keep_thumbnail}, "
                f"record_extra_tags={self.record_extra_tags}, "
                f"maker_note_at_blob={self.maker_note_at_blob})")
