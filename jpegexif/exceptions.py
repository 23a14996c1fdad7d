# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Exception classes for jpegexif

Malformed JPEG or EXIF content never raises: the reader degrades to a
partial record instead. These exceptions cover the remaining failures,
such as a file that cannot be opened or a byte-level read that a caller
failed to bounds-check.

Copyright 2025 DNAi inc.
"""


class JpegExifError(Exception):
    """
    Base exception for all jpegexif errors.
    
    All jpegexif exceptions inherit from this class, allowing
    catch-all error handling for any jpegexif-related errors.
    """
    def __init__(self, message: str = ""):
        """
        Initialize the exception with an optional error message.
        
        Args:
            message: Descriptive error message explaining what went wrong
        """
        self.message = message
        super().__init__(message)


class MetadataReadError(JpegExifError):
    """
    Raised when an image file cannot be read at all.
    
    This exception is raised when:
    - The file does not exist or cannot be opened
    - File permissions prevent reading
    """
    pass


class ExifFormatError(JpegExifError):
    """
    Raised when a fixed-width read falls outside its buffer.
    
    The parser checks every offset before reading, so this signals
    a broken internal invariant rather than a malformed image.
    """
    pass
