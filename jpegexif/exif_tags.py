# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
JPEG marker and EXIF tag definitions

Marker codes for the JPEG segments the reader cares about, the TIFF value
types with their sizes, the tag ids the metadata record maps to fields,
and the name tables used to label every other decoded tag.

Copyright 2025 DNAi inc.
"""

from enum import Enum, IntEnum


class JpegMarker(IntEnum):
    """JPEG marker bytes (the byte following 0xFF)"""
    START = 0xFF  # marker prefix
    SOI = 0xD8  # start of image
    EOI = 0xD9  # end of image
    SOS = 0xDA  # start of scan
    APP1 = 0xE1  # EXIF
    APP13 = 0xED  # IPTC


# Start-Of-Frame markers. 0xC4 (DHT), 0xC8 (JPG) and 0xCC (DAC) share the
# range but are not frames.
SOF_MARKERS = frozenset(range(0xC0, 0xD0)) - {0xC4, 0xC8, 0xCC}


class ExifTagType(IntEnum):
    """TIFF/EXIF value types"""
    BYTE = 1
    ASCII = 2
    SHORT = 3
    LONG = 4
    RATIONAL = 5
    SBYTE = 6
    UNDEFINED = 7
    SSHORT = 8
    SLONG = 9
    SRATIONAL = 10
    FLOAT = 11
    DOUBLE = 12


# Value sizes in bytes
TAG_SIZES = {
    ExifTagType.BYTE: 1,
    ExifTagType.ASCII: 1,
    ExifTagType.SHORT: 2,
    ExifTagType.LONG: 4,
    ExifTagType.RATIONAL: 8,
    ExifTagType.SBYTE: 1,
    ExifTagType.UNDEFINED: 1,
    ExifTagType.SSHORT: 2,
    ExifTagType.SLONG: 4,
    ExifTagType.SRATIONAL: 8,
    ExifTagType.FLOAT: 4,
    ExifTagType.DOUBLE: 8,
}


class ExifIFD(Enum):
    """
    Directory roles.
    
    The value of each member is the tag id of the pointer entry that
    leads to a directory of that role.
    """
    EXIF = 0x8769
    GPS = 0x8825
    MAKERNOTE = 0x927C

    @property
    def group(self) -> str:
        """Group prefix used when naming tags found in this directory."""
        return _GROUP_NAMES[self]


_GROUP_NAMES = {
    ExifIFD.EXIF: 'EXIF',
    ExifIFD.GPS: 'GPS',
    ExifIFD.MAKERNOTE: 'MakerNotes',
}


class ExifTagId(IntEnum):
    """Tags mapped to dedicated fields of the metadata record"""
    IMAGE_DESCRIPTION = 0x010E
    MAKE = 0x010F
    MODEL = 0x0110
    ORIENTATION = 0x0112
    X_RESOLUTION = 0x011A
    Y_RESOLUTION = 0x011B
    RESOLUTION_UNIT = 0x0128
    SOFTWARE = 0x0131
    DATE_TIME = 0x0132
    ARTIST = 0x013B
    THUMBNAIL_OFFSET = 0x0201  # JPEGInterchangeFormat
    THUMBNAIL_LENGTH = 0x0202  # JPEGInterchangeFormatLength
    COPYRIGHT = 0x8298
    EXPOSURE_TIME = 0x829A
    F_NUMBER = 0x829D
    DATE_TIME_ORIGINAL = 0x9003
    FLASH = 0x9209
    FOCAL_LENGTH = 0x920A
    USER_COMMENT = 0x9286
    FOCAL_PLANE_X_RESOLUTION = 0xA20E
    FOCAL_PLANE_Y_RESOLUTION = 0xA20F
    FOCAL_PLANE_RESOLUTION_UNIT = 0xA210


class GpsTagId(IntEnum):
    """GPS tags mapped to dedicated fields of the metadata record"""
    LATITUDE_REF = 0x0001
    LATITUDE = 0x0002
    LONGITUDE_REF = 0x0003
    LONGITUDE = 0x0004


EXIF_TAG_NAMES = {
    # IFD0 / IFD1
    0x00FE: "SubfileType",
    0x0100: "ImageWidth",
    0x0101: "ImageLength",
    0x0102: "BitsPerSample",
    0x0103: "Compression",
    0x0106: "PhotometricInterpretation",
    0x010E: "ImageDescription",
    0x010F: "Make",
    0x0110: "Model",
    0x0111: "StripOffsets",
    0x0112: "Orientation",
    0x0115: "SamplesPerPixel",
    0x0116: "RowsPerStrip",
    0x0117: "StripByteCounts",
    0x011A: "XResolution",
    0x011B: "YResolution",
    0x011C: "PlanarConfiguration",
    0x0128: "ResolutionUnit",
    0x0131: "Software",
    0x0132: "DateTime",
    0x013B: "Artist",
    0x013E: "WhitePoint",
    0x013F: "PrimaryChromaticities",
    0x0201: "JPEGInterchangeFormat",
    0x0202: "JPEGInterchangeFormatLength",
    0x0211: "YCbCrCoefficients",
    0x0212: "YCbCrSubSampling",
    0x0213: "YCbCrPositioning",
    0x0214: "ReferenceBlackWhite",
    0x8298: "Copyright",
    0x8769: "ExifOffset",
    0x8825: "GPSInfo",
    # Exif SubIFD
    0x829A: "ExposureTime",
    0x829D: "FNumber",
    0x8822: "ExposureProgram",
    0x8824: "SpectralSensitivity",
    0x8827: "ISOSpeedRatings",
    0x8828: "OECF",
    0x8830: "SensitivityType",
    0x8832: "RecommendedExposureIndex",
    0x9000: "ExifVersion",
    0x9003: "DateTimeOriginal",
    0x9004: "CreateDate",
    0x9010: "OffsetTime",
    0x9011: "OffsetTimeOriginal",
    0x9012: "OffsetTimeDigitized",
    0x9101: "ComponentsConfiguration",
    0x9102: "CompressedBitsPerPixel",
    0x9201: "ShutterSpeedValue",
    0x9202: "ApertureValue",
    0x9203: "BrightnessValue",
    0x9204: "ExposureBiasValue",
    0x9205: "MaxApertureValue",
    0x9206: "SubjectDistance",
    0x9207: "MeteringMode",
    0x9208: "LightSource",
    0x9209: "Flash",
    0x920A: "FocalLength",
    0x9214: "SubjectArea",
    0x927C: "MakerNote",
    0x9286: "UserComment",
    0x9290: "SubSecTime",
    0x9291: "SubSecTimeOriginal",
    0x9292: "SubSecTimeDigitized",
    0xA000: "FlashPixVersion",
    0xA001: "ColorSpace",
    0xA002: "PixelXDimension",
    0xA003: "PixelYDimension",
    0xA004: "RelatedSoundFile",
    0xA005: "InteroperabilityIFD",
    0xA20B: "FlashEnergy",
    0xA20E: "FocalPlaneXResolution",
    0xA20F: "FocalPlaneYResolution",
    0xA210: "FocalPlaneResolutionUnit",
    0xA214: "SubjectLocation",
    0xA215: "ExposureIndex",
    0xA217: "SensingMethod",
    0xA300: "FileSource",
    0xA301: "SceneType",
    0xA302: "CFAPattern",
    0xA401: "CustomRendered",
    0xA402: "ExposureMode",
    0xA403: "WhiteBalance",
    0xA404: "DigitalZoomRatio",
    0xA405: "FocalLengthIn35mmFilm",
    0xA406: "SceneCaptureType",
    0xA407: "GainControl",
    0xA408: "Contrast",
    0xA409: "Saturation",
    0xA40A: "Sharpness",
    0xA40B: "DeviceSettingDescription",
    0xA40C: "SubjectDistanceRange",
    0xA420: "ImageUniqueID",
    0xA430: "CameraOwnerName",
    0xA431: "BodySerialNumber",
    0xA432: "LensSpecification",
    0xA433: "LensMake",
    0xA434: "LensModel",
    0xA435: "LensSerialNumber",
}

GPS_TAG_NAMES = {
    0x0000: "GPSVersionID",
    0x0001: "GPSLatitudeRef",
    0x0002: "GPSLatitude",
    0x0003: "GPSLongitudeRef",
    0x0004: "GPSLongitude",
    0x0005: "GPSAltitudeRef",
    0x0006: "GPSAltitude",
    0x0007: "GPSTimeStamp",
    0x0008: "GPSSatellites",
    0x0009: "GPSStatus",
    0x000A: "GPSMeasureMode",
    0x000B: "GPSDOP",
    0x000C: "GPSSpeedRef",
    0x000D: "GPSSpeed",
    0x000E: "GPSTrackRef",
    0x000F: "GPSTrack",
    0x0010: "GPSImgDirectionRef",
    0x0011: "GPSImgDirection",
    0x0012: "GPSMapDatum",
    0x0013: "GPSDestLatitudeRef",
    0x0014: "GPSDestLatitude",
    0x0015: "GPSDestLongitudeRef",
    0x0016: "GPSDestLongitude",
    0x0017: "GPSDestBearingRef",
    0x0018: "GPSDestBearing",
    0x0019: "GPSDestDistanceRef",
    0x001A: "GPSDestDistance",
    0x001B: "GPSProcessingMethod",
    0x001C: "GPSAreaInformation",
    0x001D: "GPSDateStamp",
    0x001E: "GPSDifferential",
    0x001F: "GPSHPositioningError",
}


def tag_name(tag_id: int, ifd: ExifIFD) -> str:
    """
    Return the qualified name of a tag, e.g. ``EXIF:Software``.
    
    MakerNote directories are manufacturer specific, so their tags are
    never looked up in the standard tables.
    
    Args:
        tag_id: Numeric tag id
        ifd: Role of the directory the tag was found in
        
    Returns:
        Name in the form ``<Group>:<TagName>``
    """
    if ifd is ExifIFD.GPS:
        name = GPS_TAG_NAMES.get(tag_id)
    elif ifd is ExifIFD.EXIF:
        name = EXIF_TAG_NAMES.get(tag_id)
    else:
        name = None
    if name is None:
        name = f"Unknown_{tag_id:04X}"
    return f"{ifd.group}:{name}"
