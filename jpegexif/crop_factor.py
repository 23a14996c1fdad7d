# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Crop factor calculation

Derives the sensor size from the focal plane resolution tags and compares
its diagonal with the 36x24mm full frame diagonal. Follows the algorithm
used by hugin (Exiv2Helper.cpp).

Copyright 2025 DNAi inc.
"""

import math

from jpegexif.jpeg_info import JpegInfo

FULL_FRAME_DIAGONAL = math.sqrt(36.0 * 36.0 + 24.0 * 24.0)

# FocalPlaneResolutionUnit -> millimetres per unit
_UNIT_SCALES = {
    3: 10.0,   # centimetre
    4: 1.0,    # millimetre
    5: 0.001,  # micrometre
}
_INCH = 25.4

# Models known to report a wrong focal plane resolution -> sensor size in mm
SENSOR_SIZE_OVERRIDES = {
    "Canon EOS 20D": (22.5, 15.0),
}

MIN_CROP_FACTOR = 0.1
MAX_CROP_FACTOR = 100.0


def calculate_crop_factor(info: JpegInfo, px_width: int, px_height: int) -> float:
    """
    Calculate the crop factor of the camera that took an image.
    
    Args:
        info: Fully populated metadata record
        px_width: Pixel width of the image, used when the record has none
        px_height: Pixel height of the image, used when the record has none
        
    Returns:
        Crop factor, or 0.0 when it cannot be determined
    """
    if info.width > 0 and info.height > 0:
        sensor_pixel_width = float(info.width)
        sensor_pixel_height = float(info.height)
    else:
        sensor_pixel_width = float(px_width)
        sensor_pixel_height = float(px_height)
    
    # force landscape sensor orientation
    if sensor_pixel_width < sensor_pixel_height:
        sensor_pixel_width, sensor_pixel_height = sensor_pixel_height, sensor_pixel_width
    
    # Some cameras (notably Olympus) omit the unit, inches is the default
    resolution_units = _UNIT_SCALES.get(info.focal_plane_resolution_unit, _INCH)
    
    ccd_width = 0.0
    if info.focal_plane_x_resolution != 0:
        ccd_width = sensor_pixel_width / (info.focal_plane_x_resolution / resolution_units)
    
    ccd_height = 0.0
    if info.focal_plane_y_resolution != 0:
        ccd_height = sensor_pixel_height / (info.focal_plane_y_resolution / resolution_units)
    
    # also rejects NaN sizes
    if not ccd_width > 0 or not ccd_height > 0:
        return 0.0
    
    sensor_x, sensor_y = SENSOR_SIZE_OVERRIDES.get(info.model, (ccd_width, ccd_height))
    
    # image and sensor ratio must agree on landscape vs portrait
    sensor_ratio = sensor_x / sensor_y
    image_ratio = _ratio(px_width, px_height)
    if (sensor_ratio > 1 and image_ratio < 1) or (sensor_ratio < 1 and image_ratio > 1):
        sensor_x, sensor_y = sensor_y, sensor_x
    
    crop_factor = FULL_FRAME_DIAGONAL / math.sqrt(sensor_x * sensor_x + sensor_y * sensor_y)
    # guard against bogus focal plane definitions
    if not MIN_CROP_FACTOR <= crop_factor <= MAX_CROP_FACTOR:
        return 0.0
    return crop_factor


def _ratio(width: int, height: int) -> float:
    if height:
        return width / height
    if width:
        return math.inf
    return math.nan


def apply_crop_factor(info: JpegInfo) -> None:
    """
    Fill ``crop_factor`` and ``focal_length_with_crop_factor``.
    
    The record's own frame size doubles as the raw pixel size.
    """
    info.crop_factor = calculate_crop_factor(info, info.width, info.height)
    info.focal_length_with_crop_factor = info.focal_length * info.crop_factor
