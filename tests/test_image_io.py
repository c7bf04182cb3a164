"""
Unit tests for Pillow decode/encode helpers and output path rules.
Run from project root: python -m pytest tests/ -v
"""
import sys
import tempfile
import unittest
from pathlib import Path

import numpy as np
from PIL import Image

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from palette_dither.core_types import InvalidGeometryError  # noqa: E402
from palette_dither.image_io import (  # noqa: E402
    default_output_path,
    load_image_rgb,
    pillow_resample_from_name,
    resize_rgb_height,
    save_image_rgb,
)


class TestLoadSave(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def test_png_roundtrip_keeps_pixels(self):
        rgb = np.arange(4 * 5 * 3, dtype=np.uint8).reshape(4, 5, 3)
        path = save_image_rgb(self.tmp / "a.png", rgb, 5, 4)
        loaded, w, h = load_image_rgb(path)
        self.assertEqual((w, h), (5, 4))
        self.assertTrue(loaded.flags.c_contiguous)
        np.testing.assert_array_equal(loaded, rgb)

    def test_flat_bytearray_is_accepted(self):
        buf = bytearray([255, 0, 0, 0, 255, 0])
        save_image_rgb(self.tmp / "flat.png", buf, 2, 1)
        loaded, w, h = load_image_rgb(self.tmp / "flat.png")
        self.assertEqual(loaded.reshape(-1).tolist(), list(buf))

    def test_alpha_is_dropped(self):
        Image.new("RGBA", (3, 2), (10, 20, 30, 40)).save(self.tmp / "rgba.png")
        loaded, w, h = load_image_rgb(self.tmp / "rgba.png")
        self.assertEqual(loaded.shape, (2, 3, 3))
        self.assertEqual(loaded[0, 0].tolist(), [10, 20, 30])

    def test_palette_mode_image_is_expanded(self):
        Image.new("P", (2, 2), 0).save(self.tmp / "p.gif")
        loaded, _w, _h = load_image_rgb(self.tmp / "p.gif")
        self.assertEqual(loaded.dtype, np.uint8)
        self.assertEqual(loaded.shape, (2, 2, 3))

    def test_wrong_geometry_rejected(self):
        with self.assertRaises(InvalidGeometryError):
            save_image_rgb(self.tmp / "bad.png", bytearray(9), 2, 2)
        self.assertFalse((self.tmp / "bad.png").exists())


class TestResize(unittest.TestCase):
    def test_downscale_keeps_aspect(self):
        rgb = np.zeros((100, 50, 3), dtype=np.uint8)
        out = resize_rgb_height(rgb, 20, pillow_resample_from_name("nearest"))
        self.assertEqual(out.shape, (20, 10, 3))

    def test_never_upscales(self):
        rgb = np.zeros((10, 10, 3), dtype=np.uint8)
        for cap in (None, 0, 10, 50):
            self.assertIs(resize_rgb_height(rgb, cap, Image.Resampling.LANCZOS), rgb)

    def test_resample_names(self):
        self.assertEqual(pillow_resample_from_name("nearest"), Image.Resampling.NEAREST)
        self.assertEqual(pillow_resample_from_name("lanczos"), Image.Resampling.LANCZOS)
        self.assertEqual(pillow_resample_from_name("whatever"), Image.Resampling.BICUBIC)


class TestOutputPath(unittest.TestCase):
    def test_suffix_before_extension(self):
        self.assertEqual(
            default_output_path(Path("/x/photo.jpg")), Path("/x/photo_out.jpg")
        )

    def test_no_extension_defaults_to_png(self):
        self.assertEqual(default_output_path(Path("scan")), Path("scan_out.png"))

    def test_custom_suffix(self):
        self.assertEqual(
            default_output_path(Path("a.png"), suffix="-d"), Path("a-d.png")
        )


if __name__ == "__main__":
    unittest.main()
