"""
Unit tests for nearest-colour matching (scalar and vectorised).
Run from project root: python -m pytest tests/ -v
"""
import itertools
import sys
import unittest
from pathlib import Path

import numpy as np

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from palette_dither.core_types import Color  # noqa: E402
from palette_dither.matcher import (  # noqa: E402
    map_rows_to_palette,
    match_color,
    nearest_palette_indices,
    squared_distance,
)
from palette_dither.palette_data import COLOR8, COLOR16, MONOCHROME  # noqa: E402

PALETTES = (MONOCHROME, COLOR8, COLOR16)


def _grid_colours(step=51):
    values = range(0, 256, step)
    return [Color(r, g, b) for r, g, b in itertools.product(values, values, values)]


class TestMatchColor(unittest.TestCase):
    def test_nearest_colour_is_minimal(self):
        """match_color returns a palette member no farther than any other member."""
        for pal in PALETTES:
            for c in _grid_colours():
                chosen, _err = match_color(c, pal)
                self.assertIn(chosen, pal.colors)
                d = squared_distance(c, chosen)
                for other in pal:
                    self.assertLessEqual(d, squared_distance(c, other))

    def test_tie_goes_to_first_entry(self):
        """Equidistant entries: the earlier index wins, every time."""
        a, b = Color(0, 0, 0), Color(20, 0, 0)
        probe = Color(10, 0, 0)
        for _ in range(3):
            self.assertIs(match_color(probe, [a, b])[0], a)
            self.assertIs(match_color(probe, [b, a])[0], b)

    def test_mid_grey_prefers_white_in_monochrome(self):
        chosen, err = match_color(Color(128, 128, 128), MONOCHROME)
        self.assertEqual(chosen, Color(255, 255, 255))
        self.assertEqual(err, (-127.0, -127.0, -127.0))

    def test_error_is_original_minus_chosen(self):
        chosen, err = match_color(Color(100, 50, 25), MONOCHROME)
        self.assertEqual(chosen, Color(0, 0, 0))
        self.assertEqual(tuple(err), (100.0, 50.0, 25.0))
        self.assertIsInstance(err.r, float)

    def test_returns_palette_instance(self):
        chosen, _ = match_color(Color(250, 250, 250), MONOCHROME)
        self.assertIs(chosen, MONOCHROME[1])

    def test_exact_member_has_zero_error(self):
        for c in COLOR16:
            chosen, err = match_color(c, COLOR16)
            self.assertEqual(chosen, c)
            self.assertEqual(tuple(err), (0.0, 0.0, 0.0))

    def test_empty_palette_fails_fast(self):
        with self.assertRaises(ValueError):
            match_color(Color(1, 2, 3), [])


class TestVectorisedMatcher(unittest.TestCase):
    def test_agrees_with_scalar_matcher(self):
        rng = np.random.default_rng(7)
        rows = rng.integers(0, 256, size=(500, 3), dtype=np.uint8)
        for pal in PALETTES:
            idx = nearest_palette_indices(rows, pal.rgb_array())
            for row, j in zip(rows.tolist(), idx.tolist()):
                chosen, _ = match_color(Color(*row), pal)
                self.assertEqual(pal[j], chosen)

    def test_tie_break_matches_scalar(self):
        pal = np.array([[0, 0, 0], [20, 0, 0]], dtype=np.uint8)
        rows = np.array([[10, 0, 0]], dtype=np.uint8)
        self.assertEqual(nearest_palette_indices(rows, pal).tolist(), [0])
        self.assertEqual(nearest_palette_indices(rows, pal[::-1]).tolist(), [0])

    def test_chunking_does_not_change_result(self):
        rng = np.random.default_rng(11)
        rows = rng.integers(0, 256, size=(97, 3), dtype=np.uint8)
        pal = COLOR16.rgb_array()
        whole = nearest_palette_indices(rows, pal)
        chunked = nearest_palette_indices(rows, pal, chunk=10)
        np.testing.assert_array_equal(whole, chunked)

    def test_map_rows_to_palette(self):
        rows = np.array([[10, 10, 10], [240, 240, 240]], dtype=np.uint8)
        out = map_rows_to_palette(rows, MONOCHROME.rgb_array())
        self.assertEqual(out.tolist(), [[0, 0, 0], [255, 255, 255]])
        self.assertEqual(out.dtype, np.uint8)

    def test_empty_palette_rejected(self):
        with self.assertRaises(ValueError):
            nearest_palette_indices(
                np.zeros((1, 3), dtype=np.uint8), np.zeros((0, 3), dtype=np.uint8)
            )


if __name__ == "__main__":
    unittest.main()
