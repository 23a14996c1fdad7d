import math
import unittest

from jpegexif.crop_factor import calculate_crop_factor, apply_crop_factor, FULL_FRAME_DIAGONAL
from jpegexif.jpeg_info import JpegInfo


def full_frame_info(unit=4, scale=1.0, **kwargs):
    """3000x2000 pixels on a 36x24mm sensor, resolution given per ``unit``."""
    info = JpegInfo(width=3000, height=2000, focal_plane_resolution_unit=unit, **kwargs)
    info.focal_plane_x_resolution = 3000 / 36 * scale
    info.focal_plane_y_resolution = 2000 / 24 * scale
    return info


class TestCropFactor(unittest.TestCase):
    def test_full_frame_millimetres(self):
        info = full_frame_info()
        self.assertAlmostEqual(calculate_crop_factor(info, 3000, 2000), 1.0)

    def test_centimetres(self):
        info = full_frame_info(unit=3, scale=10.0)
        self.assertAlmostEqual(calculate_crop_factor(info, 3000, 2000), 1.0)

    def test_micrometres(self):
        info = full_frame_info(unit=5, scale=0.001)
        self.assertAlmostEqual(calculate_crop_factor(info, 3000, 2000), 1.0)

    def test_missing_unit_means_inches(self):
        info = full_frame_info(unit=0, scale=25.4)
        self.assertAlmostEqual(calculate_crop_factor(info, 3000, 2000), 1.0)
        info = full_frame_info(unit=2, scale=25.4)
        self.assertAlmostEqual(calculate_crop_factor(info, 3000, 2000), 1.0)

    def test_half_size_sensor(self):
        info = full_frame_info(scale=2.0)
        self.assertAlmostEqual(calculate_crop_factor(info, 3000, 2000), 2.0)

    def test_portrait_frame_is_treated_as_landscape(self):
        info = full_frame_info()
        info.width, info.height = 2000, 3000
        self.assertAlmostEqual(calculate_crop_factor(info, 2000, 3000), 1.0)

    def test_falls_back_to_pixel_size(self):
        info = full_frame_info()
        info.width = 0
        info.height = 0
        self.assertAlmostEqual(calculate_crop_factor(info, 3000, 2000), 1.0)
        self.assertEqual(calculate_crop_factor(info, 0, 0), 0.0)

    def test_canon_eos_20d_override(self):
        # focal plane tags of this model are wrong, the sensor is 22.5x15mm
        info = full_frame_info(model="Canon EOS 20D")
        expected = math.sqrt(36 ** 2 + 24 ** 2) / math.sqrt(22.5 ** 2 + 15 ** 2)
        self.assertAlmostEqual(calculate_crop_factor(info, 3000, 2000), expected)
        self.assertAlmostEqual(expected, 1.6, places=6)

    def test_override_needs_focal_plane_tags(self):
        info = JpegInfo(width=3000, height=2000, model="Canon EOS 20D")
        self.assertEqual(calculate_crop_factor(info, 3000, 2000), 0.0)

    def test_missing_resolution(self):
        info = full_frame_info()
        info.focal_plane_y_resolution = 0.0
        self.assertEqual(calculate_crop_factor(info, 3000, 2000), 0.0)
        info = full_frame_info()
        info.focal_plane_x_resolution = 0.0
        self.assertEqual(calculate_crop_factor(info, 3000, 2000), 0.0)

    def test_negative_resolution(self):
        info = full_frame_info()
        info.focal_plane_x_resolution = -83.3
        self.assertEqual(calculate_crop_factor(info, 3000, 2000), 0.0)

    def test_nan_resolution(self):
        info = full_frame_info()
        info.focal_plane_x_resolution = float('nan')
        self.assertEqual(calculate_crop_factor(info, 3000, 2000), 0.0)
        info = full_frame_info(focal_length=50.0)
        info.focal_plane_y_resolution = float('nan')
        apply_crop_factor(info)
        self.assertEqual(info.crop_factor, 0.0)
        self.assertEqual(info.focal_length_with_crop_factor, 0.0)

    def test_implausible_values_reset(self):
        # a 0.036mm wide sensor -> crop factor 1000
        info = full_frame_info(scale=1000.0)
        self.assertEqual(calculate_crop_factor(info, 3000, 2000), 0.0)
        # a 36m wide sensor -> crop factor 0.001
        info = full_frame_info(scale=0.001)
        self.assertEqual(calculate_crop_factor(info, 3000, 2000), 0.0)

    def test_plausible_extremes_are_kept(self):
        info = full_frame_info(scale=50.0)
        self.assertAlmostEqual(calculate_crop_factor(info, 3000, 2000), 50.0)
        info = full_frame_info(scale=0.5)
        self.assertAlmostEqual(calculate_crop_factor(info, 3000, 2000), 0.5)

    def test_apply_crop_factor(self):
        info = full_frame_info(scale=1.5, focal_length=50.0)
        apply_crop_factor(info)
        self.assertAlmostEqual(info.crop_factor, 1.5)
        self.assertAlmostEqual(info.focal_length_with_crop_factor, 75.0)

    def test_apply_without_exif(self):
        info = JpegInfo(width=640, height=480, focal_length=35.0)
        apply_crop_factor(info)
        self.assertEqual(info.crop_factor, 0.0)
        self.assertEqual(info.focal_length_with_crop_factor, 0.0)

    def test_full_frame_diagonal(self):
        self.assertAlmostEqual(FULL_FRAME_DIAGONAL, 43.2666, places=4)


if __name__ == '__main__':
    unittest.main()
