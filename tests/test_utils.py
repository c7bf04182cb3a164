"""
Unit tests for formatting, colour usage reports and log helpers.
Run from project root: python -m pytest tests/ -v
"""
import io
import sys
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from palette_dither.palette_data import MONOCHROME  # noqa: E402
from palette_dither.utils import (  # noqa: E402
    colour_usage_report,
    error,
    format_seconds_compact,
    format_total_duration_compact,
    key_value_pairs_to_string,
    print_config_line,
)


class TestFormatting(unittest.TestCase):
    def test_seconds(self):
        self.assertEqual(format_seconds_compact(0.0125), "12.5ms")
        self.assertEqual(format_seconds_compact(2.5), "2.500s")
        self.assertEqual(format_seconds_compact(125.0), "2m 5.0s")

    def test_total_duration(self):
        self.assertEqual(format_total_duration_compact(0.5), "500.0ms")
        self.assertEqual(format_total_duration_compact(3.5), "3.5s")
        self.assertEqual(format_total_duration_compact(61.0), "1m 1s")

    def test_key_value_pairs(self):
        text = key_value_pairs_to_string([("Jobs", 1200), ("Debug", True), ("Gain", 0.5)])
        self.assertEqual(text, "Jobs: 1,200  Debug: on  Gain: 0.5")


class TestColourUsage(unittest.TestCase):
    def test_counts_sorted_descending(self):
        buf = bytearray([0, 0, 0] * 3 + [255, 255, 255] + [1, 2, 3])
        report = colour_usage_report(buf, MONOCHROME.name_of())
        self.assertEqual(report[0], ("#000000", "Black", 3))
        self.assertIn(("#ffffff", "White", 1), report)
        self.assertIn(("#010203", "?", 1), report)

    def test_empty_buffer(self):
        self.assertEqual(colour_usage_report(bytearray(), {}), [])


class TestLogging(unittest.TestCase):
    def test_config_line_routes_to_debug(self):
        out = io.StringIO()
        with redirect_stdout(out):
            print_config_line("run", [("Method", "none")], debug=False)
            print_config_line("run", [("Method", "none")], debug=True)
        self.assertEqual(
            out.getvalue().splitlines(),
            ["[run] Method: none", "[debug] [run] Method: none"],
        )

    def test_error_goes_to_stderr(self):
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            error("boom")
        self.assertEqual(out.getvalue(), "")
        self.assertEqual(err.getvalue(), "[error] boom\n")


if __name__ == "__main__":
    unittest.main()
