import struct
import unittest

from jpegexif.exif_tag import ExifTag
from jpegexif.exif_tags import ExifIFD, tag_name
from jpegexif.jpeg_info import JpegInfo


def make_section(entry, data=b'', little_endian=True):
    """Section with a TIFF header at 8, one entry at 16 and ``data`` at 28."""
    e = '<' if little_endian else '>'
    header = b'\x00\x00Exif\x00\x00' + (b'II' if little_endian else b'MM') + struct.pack(e + 'HI', 0x2A, 8)
    tag, type_, count, value = entry
    if isinstance(value, int):
        value = struct.pack(e + 'I', value)
    return header + struct.pack(e + 'HHI', tag, type_, count) + value + data


def decode(section, little_endian=True):
    return ExifTag(section, 16, 8, len(section) - 8, little_endian)


class TestExifTagDecoding(unittest.TestCase):
    def test_inline_short(self):
        tag = decode(make_section((0x0112, 3, 1, b'\x06\x00\x00\x00')))
        self.assertTrue(tag.is_valid)
        self.assertEqual(tag.tag, 0x0112)
        self.assertEqual(tag.get_int(0), 6)
        self.assertEqual(tag.get_value(), 6)

    def test_inline_short_big_endian(self):
        section = make_section((0x0112, 3, 1, b'\x00\x06\x00\x00'), little_endian=False)
        tag = decode(section, little_endian=False)
        self.assertTrue(tag.is_valid)
        self.assertEqual(tag.get_int(0), 6)

    def test_out_of_line_ascii(self):
        # value stored at TIFF offset 20 (section offset 28)
        tag = decode(make_section((0x0110, 2, 8, 20), b'EOS 5D\x00\x00'))
        self.assertTrue(tag.is_valid)
        self.assertEqual(tag.get_string(), 'EOS 5D')

    def test_rational(self):
        tag = decode(make_section((0x920A, 5, 1, 20), struct.pack('<II', 50, 1)))
        self.assertTrue(tag.is_valid)
        self.assertEqual(tag.get_double(0), 50.0)
        self.assertEqual(tag.get_int(0), 50)

    def test_rational_zero_denominator(self):
        tag = decode(make_section((0x920A, 5, 1, 20), struct.pack('<II', 50, 0)))
        self.assertTrue(tag.is_valid)
        self.assertEqual(tag.get_double(0), 0.0)

    def test_signed_rational(self):
        tag = decode(make_section((0x9204, 10, 1, 20), struct.pack('<ii', -1, 3)))
        self.assertAlmostEqual(tag.get_double(0), -1 / 3)

    def test_unknown_type_is_invalid(self):
        tag = decode(make_section((0x0112, 13, 1, 0)))
        self.assertFalse(tag.is_valid)
        tag = decode(make_section((0x0112, 0, 1, 0)))
        self.assertFalse(tag.is_valid)

    def test_zero_components_is_invalid(self):
        tag = decode(make_section((0x0112, 3, 0, 0)))
        self.assertFalse(tag.is_valid)

    def test_too_many_components_is_invalid(self):
        tag = decode(make_section((0x0110, 1, 0x10001, 20), b'\x00' * 8))
        self.assertFalse(tag.is_valid)

    def test_value_outside_section_is_invalid(self):
        tag = decode(make_section((0x0110, 2, 8, 4000), b'EOS 5D\x00\x00'))
        self.assertFalse(tag.is_valid)
        self.assertEqual(tag.data, b'')

    def test_user_comment_character_code(self):
        comment = b'ASCII\x00\x00\x00hello\x00\x00\x00'
        tag = decode(make_section((0x9286, 7, len(comment), 20), comment))
        self.assertEqual(tag.get_comment(), 'hello')
        comment = b'UNICODE\x00' + 'hi'.encode('utf-16-le')
        tag = decode(make_section((0x9286, 7, len(comment), 20), comment))
        self.assertEqual(tag.get_comment(), 'hi')

    def test_pointer_for_long_and_undefined(self):
        tag = decode(make_section((0x8769, 4, 1, 26)))
        self.assertEqual(tag.pointer(), 26)
        # a maker note blob holds its directory offset in its first value
        tag = decode(make_section((0x927C, 7, 6, 20), b'\x1a' + b'\x00' * 5))
        self.assertEqual(tag.pointer(), 26)
        self.assertEqual(tag.pointer(blob_position=True), 20)
        # inline values have no position of their own
        tag = decode(make_section((0x927C, 7, 4, b'\x1a\x00\x00\x00')))
        self.assertEqual(tag.pointer(blob_position=True), 26)

    def test_non_finite_floats_read_as_zero(self):
        tag = decode(make_section((0x0112, 11, 1, struct.pack('<f', float('nan')))))
        self.assertTrue(tag.is_valid)
        self.assertEqual(tag.get_int(0), 0)
        tag = decode(make_section((0x8769, 11, 1, struct.pack('<f', float('inf')))))
        self.assertEqual(tag.pointer(), 0)
        tag = decode(make_section((0x8769, 12, 1, 20), struct.pack('<d', float('-inf'))))
        self.assertTrue(tag.is_valid)
        self.assertEqual(tag.get_int(0), 0)
        tag = decode(make_section((0x0112, 11, 1, struct.pack('<f', 6.0))))
        self.assertEqual(tag.get_int(0), 6)


class TestExifTagPopulate(unittest.TestCase):
    def test_exif_fields(self):
        info = JpegInfo()
        decode(make_section((0x0110, 2, 8, 20), b'EOS 5D\x00\x00')).populate(info, ExifIFD.EXIF)
        decode(make_section((0x920A, 5, 1, 20), struct.pack('<II', 105, 2))).populate(info, ExifIFD.EXIF)
        decode(make_section((0xA210, 3, 1, b'\x04\x00\x00\x00'))).populate(info, ExifIFD.EXIF)
        decode(make_section((0x0201, 4, 1, 1234))).populate(info, ExifIFD.EXIF)
        self.assertEqual(info.model, 'EOS 5D')
        self.assertEqual(info.focal_length, 52.5)
        self.assertEqual(info.focal_plane_resolution_unit, 4)
        self.assertEqual(info.thumbnail_offset, 1234)
        self.assertEqual(info.extra_tags, {})

    def test_nan_int_field(self):
        info = JpegInfo(orientation=3)
        decode(make_section((0x0112, 11, 1, struct.pack('<f', float('nan'))))).populate(info, ExifIFD.EXIF)
        decode(make_section((0x9209, 12, 1, 20), struct.pack('<d', float('inf')))).populate(info, ExifIFD.EXIF)
        self.assertEqual(info.orientation, 0)
        self.assertEqual(info.flash, 0)

    def test_gps_fields(self):
        info = JpegInfo()
        decode(make_section((0x0001, 2, 2, b'N\x00\x00\x00'))).populate(info, ExifIFD.GPS)
        coords = struct.pack('<IIIIII', 52, 1, 30, 1, 1512, 100)
        decode(make_section((0x0002, 5, 3, 20), coords)).populate(info, ExifIFD.GPS)
        self.assertEqual(info.gps_latitude_ref, 'N')
        self.assertEqual(info.gps_latitude, [52.0, 30.0, 15.12])

    def test_role_decides_meaning(self):
        # tag 0x0001 is GPSLatitudeRef only inside a GPS directory
        info = JpegInfo()
        decode(make_section((0x0001, 2, 2, b'N\x00\x00\x00'))).populate(info, ExifIFD.EXIF)
        self.assertEqual(info.gps_latitude_ref, '')
        self.assertEqual(info.extra_tags, {'EXIF:Unknown_0001': 'N'})

    def test_unmapped_tags_are_recorded_by_group(self):
        info = JpegInfo()
        decode(make_section((0xA434, 2, 8, 20), b'EF50mm\x00\x00')).populate(info, ExifIFD.EXIF)
        decode(make_section((0x0006, 5, 1, 20), struct.pack('<II', 125, 2))).populate(info, ExifIFD.GPS)
        decode(make_section((0x0110, 3, 1, b'\x07\x00\x00\x00'))).populate(info, ExifIFD.MAKERNOTE)
        self.assertEqual(info.extra_tags['EXIF:LensModel'], 'EF50mm')
        self.assertEqual(info.extra_tags['GPS:GPSAltitude'], 62.5)
        self.assertEqual(info.extra_tags['MakerNotes:Unknown_0110'], 7)
        # MakerNote entries never land in the standard fields
        self.assertEqual(info.model, '')

    def test_extra_tags_can_be_disabled(self):
        info = JpegInfo()
        decode(make_section((0xA434, 2, 8, 20), b'EF50mm\x00\x00')).populate(info, ExifIFD.EXIF, record_extra=False)
        self.assertEqual(info.extra_tags, {})

    def test_tag_name(self):
        self.assertEqual(tag_name(0x0131, ExifIFD.EXIF), 'EXIF:Software')
        self.assertEqual(tag_name(0x0002, ExifIFD.GPS), 'GPS:GPSLatitude')
        self.assertEqual(tag_name(0xBEEF, ExifIFD.EXIF), 'EXIF:Unknown_BEEF')


if __name__ == '__main__':
    unittest.main()
