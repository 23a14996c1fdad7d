# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
EXIF directory entry decoding

An IFD entry is 12 bytes: tag id (2), value type (2), component count (4)
and either the value itself, when it fits in 4 bytes, or the offset of the
value relative to the TIFF header. This module turns one entry into typed
values and writes the tags the metadata record knows about into it.

Copyright 2025 DNAi inc.
"""

import math
from typing import Any, List

from jpegexif.byte_order import (
    read_ushort,
    read_short,
    read_uint,
    read_int,
    read_float,
    read_double,
)
from jpegexif.exif_tags import (
    ExifIFD,
    ExifTagId,
    ExifTagType,
    GpsTagId,
    TAG_SIZES,
    tag_name,
)
from jpegexif.jpeg_info import JpegInfo

# Entries claiming more values than this are treated as corrupt
MAX_COMPONENTS = 0x10000

ENTRY_SIZE = 12

# UserComment starts with an 8 byte character code
_COMMENT_CODES = {
    b'ASCII\x00\x00\x00': 'ascii',
    b'UNICODE\x00': 'utf-16',
    b'JIS\x00\x00\x00\x00\x00': 'shift_jis',
    b'\x00' * 8: 'ascii',
}

# tag -> (record attribute, value kind)
_EXIF_FIELDS = {
    ExifTagId.IMAGE_DESCRIPTION: ('description', 'string'),
    ExifTagId.MAKE: ('make', 'string'),
    ExifTagId.MODEL: ('model', 'string'),
    ExifTagId.ORIENTATION: ('orientation', 'int'),
    ExifTagId.X_RESOLUTION: ('x_resolution', 'double'),
    ExifTagId.Y_RESOLUTION: ('y_resolution', 'double'),
    ExifTagId.RESOLUTION_UNIT: ('resolution_unit', 'int'),
    ExifTagId.SOFTWARE: ('software', 'string'),
    ExifTagId.DATE_TIME: ('date_time', 'string'),
    ExifTagId.ARTIST: ('artist', 'string'),
    ExifTagId.THUMBNAIL_OFFSET: ('thumbnail_offset', 'int'),
    ExifTagId.THUMBNAIL_LENGTH: ('thumbnail_size', 'int'),
    ExifTagId.COPYRIGHT: ('copyright', 'string'),
    ExifTagId.EXPOSURE_TIME: ('exposure_time', 'double'),
    ExifTagId.F_NUMBER: ('f_number', 'double'),
    ExifTagId.DATE_TIME_ORIGINAL: ('date_time_original', 'string'),
    ExifTagId.FLASH: ('flash', 'int'),
    ExifTagId.FOCAL_LENGTH: ('focal_length', 'double'),
    ExifTagId.USER_COMMENT: ('user_comment', 'comment'),
    ExifTagId.FOCAL_PLANE_X_RESOLUTION: ('focal_plane_x_resolution', 'double'),
    ExifTagId.FOCAL_PLANE_Y_RESOLUTION: ('focal_plane_y_resolution', 'double'),
    ExifTagId.FOCAL_PLANE_RESOLUTION_UNIT: ('focal_plane_resolution_unit', 'int'),
}

_GPS_FIELDS = {
    GpsTagId.LATITUDE_REF: ('gps_latitude_ref', 'string'),
    GpsTagId.LATITUDE: ('gps_latitude', 'triple'),
    GpsTagId.LONGITUDE_REF: ('gps_longitude_ref', 'string'),
    GpsTagId.LONGITUDE: ('gps_longitude', 'triple'),
}


class ExifTag:
    """
    View of a single IFD entry.
    
    The entry is decoded eagerly: after construction ``is_valid`` tells
    whether the type is known, the count is sane and the value bytes lie
    inside the section. Invalid entries expose no data.
    """
    
    def __init__(
        self,
        section: bytes,
        entry_offset: int,
        offset_base: int,
        length: int,
        little_endian: bool
    ):
        """
        Decode the entry at ``entry_offset``.
        
        Args:
            section: Segment buffer holding the TIFF structure
            entry_offset: Position of the 12 byte entry in ``section``
            offset_base: Position of the TIFF header in ``section``
            length: Usable bytes after ``offset_base``
            little_endian: Byte order of the TIFF structure
        """
        self.is_valid = False
        self.little_endian = little_endian
        self.tag = read_ushort(section, entry_offset, little_endian)
        self.type_num = read_ushort(section, entry_offset + 2, little_endian)
        self.components = read_uint(section, entry_offset + 4, little_endian)
        self.value_offset = read_uint(section, entry_offset + 8, little_endian)
        self.format = None
        self.byte_count = 0
        self.data = b''
        
        try:
            self.format = ExifTagType(self.type_num)
        except ValueError:
            return
        
        if self.components == 0 or self.components > MAX_COMPONENTS:
            return
        
        self.byte_count = self.components * TAG_SIZES[self.format]
        if self.byte_count > 4:
            # Bogus pointer offset and/or byte count
            if self.value_offset + self.byte_count > length:
                return
            data_offset = offset_base + self.value_offset
        else:
            data_offset = entry_offset + 8
        
        if data_offset + self.byte_count > len(section):
            return
        
        self.data = bytes(section[data_offset:data_offset + self.byte_count])
        self.is_valid = True
    
    def __repr__(self) -> str:
        return (f"ExifTag(tag=0x{self.tag:04X}, format={self.type_num}, "
                f"components={self.components}, valid={self.is_valid})")
    
    def get_int(self, index: int) -> int:
        """Return value ``index`` as an integer."""
        fmt = self.format
        le = self.little_endian
        if fmt in (ExifTagType.BYTE, ExifTagType.UNDEFINED, ExifTagType.ASCII):
            return self.data[index]
        if fmt == ExifTagType.SBYTE:
            value = self.data[index]
            return value - 0x100 if value > 0x7F else value
        if fmt == ExifTagType.SHORT:
            return read_ushort(self.data, index * 2, le)
        if fmt == ExifTagType.SSHORT:
            return read_short(self.data, index * 2, le)
        if fmt == ExifTagType.LONG:
            return read_uint(self.data, index * 4, le)
        if fmt == ExifTagType.SLONG:
            return read_int(self.data, index * 4, le)
        value = self.get_double(index)
        # NaN and infinities have no integer value
        return int(value) if math.isfinite(value) else 0
    
    def get_double(self, index: int) -> float:
        """
        Return value ``index`` as a float.
        
        Rationals with a zero denominator read as 0.0.
        """
        fmt = self.format
        le = self.little_endian
        if fmt in (ExifTagType.RATIONAL, ExifTagType.SRATIONAL):
            read = read_uint if fmt == ExifTagType.RATIONAL else read_int
            numerator = read(self.data, index * 8, le)
            denominator = read(self.data, index * 8 + 4, le)
            if denominator == 0:
                return 0.0
            return numerator / denominator
        if fmt == ExifTagType.FLOAT:
            return read_float(self.data, index * 4, le)
        if fmt == ExifTagType.DOUBLE:
            return read_double(self.data, index * 8, le)
        return float(self.get_int(index))
    
    def get_string(self) -> str:
        """Return the value as text, cut at the first NUL."""
        null_pos = self.data.find(b'\x00')
        string_data = self.data[:null_pos] if null_pos >= 0 else self.data
        if any(b > 127 for b in string_data):
            try:
                return string_data.decode('utf-8', errors='strict').strip()
            except UnicodeDecodeError:
                pass
        return string_data.decode('ascii', errors='replace').strip()
    
    def get_comment(self) -> str:
        """Return a UserComment value, honouring its character code."""
        code = self.data[:8]
        encoding = _COMMENT_CODES.get(code)
        if encoding is None:
            return self.get_string()
        payload = self.data[8:]
        if encoding == 'utf-16':
            encoding = 'utf-16-le' if self.little_endian else 'utf-16-be'
        return payload.decode(encoding, errors='replace').rstrip('\x00').strip()
    
    def get_values(self) -> List[Any]:
        """Return every component, as floats for fractional types."""
        if self.format in (ExifTagType.RATIONAL, ExifTagType.SRATIONAL,
                           ExifTagType.FLOAT, ExifTagType.DOUBLE):
            return [self.get_double(i) for i in range(self.components)]
        return [self.get_int(i) for i in range(self.components)]
    
    def get_value(self) -> Any:
        """
        Return the natural Python value of the entry.
        
        Strings for ASCII, raw bytes for UNDEFINED, a scalar for single
        component entries and a list otherwise.
        """
        if self.format == ExifTagType.ASCII:
            return self.get_string()
        if self.format == ExifTagType.UNDEFINED:
            return self.data
        values = self.get_values()
        if len(values) == 1:
            return values[0]
        return values
    
    def pointer(self, blob_position: bool = False) -> int:
        """
        Return the child directory offset held by a pointer tag.
        
        The offset is the first stored value of the entry. With
        ``blob_position`` set, an out-of-line UNDEFINED value (a MakerNote
        blob) is taken to be the directory itself, so its position in the
        TIFF structure is returned instead.
        """
        if blob_position and self.format == ExifTagType.UNDEFINED and self.byte_count > 4:
            return self.value_offset
        return self.get_int(0)
    
    def populate(self, info: JpegInfo, ifd: ExifIFD, record_extra: bool = True) -> None:
        """
        Store the entry in the metadata record.
        
        Args:
            info: Record to update
            ifd: Role of the directory holding the entry
            record_extra: Keep tags without a dedicated field in
                ``info.extra_tags``
        """
        if ifd is ExifIFD.EXIF:
            target = _EXIF_FIELDS.get(self.tag)
        elif ifd is ExifIFD.GPS:
            target = _GPS_FIELDS.get(self.tag)
        else:
            target = None
        
        if target is None:
            if record_extra:
                info.extra_tags[tag_name(self.tag, ifd)] = self.get_value()
            return
        
        attr, kind = target
        if kind == 'string':
            value = self.get_string()
        elif kind == 'comment':
            value = self.get_comment()
        elif kind == 'int':
            value = self.get_int(0)
        elif kind == 'double':
            value = self.get_double(0)
        else:
            # degrees, minutes, seconds
            value = [self.get_double(i) if i < self.components else 0.0 for i in range(3)]
        setattr(info, attr, value)
