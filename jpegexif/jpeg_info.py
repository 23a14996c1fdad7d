# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Metadata record produced by the JPEG reader

Copyright 2025 DNAi inc.
"""

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Dict, Any, Optional, List


@dataclass
class JpegInfo:
    """
    Everything the reader learned about one JPEG image.
    
    A fresh record is created for every parse. The segment scanner fills
    the frame fields, the directory walker fills the EXIF fields as it
    meets each tag, and the crop factor post-pass fills the derived
    fields last.
    """
    file_name: str = ""
    file_size: int = 0
    is_valid: bool = False

    # Start-Of-Frame
    width: int = 0
    height: int = 0
    is_color: bool = False

    # IFD0
    orientation: int = 0
    x_resolution: float = 0.0
    y_resolution: float = 0.0
    resolution_unit: int = 0
    date_time: str = ""
    description: str = ""
    make: str = ""
    model: str = ""
    software: str = ""
    artist: str = ""
    copyright: str = ""

    # Exif SubIFD
    date_time_original: str = ""
    user_comment: str = ""
    exposure_time: float = 0.0
    f_number: float = 0.0
    flash: int = 0
    focal_length: float = 0.0
    focal_plane_x_resolution: float = 0.0
    focal_plane_y_resolution: float = 0.0
    focal_plane_resolution_unit: int = 0

    # GPS IFD (degrees, minutes, seconds)
    gps_latitude_ref: str = ""
    gps_latitude: List[float] = field(default_factory=lambda: [0.0, 0.0, 0.0])
    gps_longitude_ref: str = ""
    gps_longitude: List[float] = field(default_factory=lambda: [0.0, 0.0, 0.0])

    # IFD1
    thumbnail_offset: int = 0
    thumbnail_size: int = 0
    thumbnail_data: Optional[bytes] = None

    # Derived
    crop_factor: float = 0.0
    focal_length_with_crop_factor: float = 0.0
    load_duration: timedelta = field(default_factory=timedelta)

    # Decoded tags without a dedicated field, e.g. {'EXIF:LensModel': '...'}
    extra_tags: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """
        Flatten the record into JSON-friendly values.
        
        Thumbnail bytes are reported by length only and the load
        duration is given in seconds.
        
        Returns:
            Dictionary of field names to values
        """
        result: Dict[str, Any] = {}
        for name in self.__dataclass_fields__:
            if name in ('thumbnail_data', 'extra_tags', 'load_duration'):
                continue
            result[name] = getattr(self, name)
        result['thumbnail_data'] = len(self.thumbnail_data) if self.thumbnail_data is not None else None
        result['load_duration'] = self.load_duration.total_seconds()
        for key, value in self.extra_tags.items():
            if isinstance(value, bytes):
                value = value.hex()
            result[key] = value
        return result
