"""
tests/test_color_parser.py

Hex color parsing and its best-effort fallback.
"""

from __future__ import annotations

import unittest

from TileWatermarker.ColorParser import DEFAULT_RGB, hex_to_rgb, rgb_to_hex


class TestHexToRgb(unittest.TestCase):
    def test_valid_colors_round_trip(self) -> None:
        for value in ("#000000", "#ffffff", "#ff0000", "#e5e7eb", "#1A2b3C", "7f7f80"):
            with self.subTest(value=value):
                rgb = hex_to_rgb(value)
                self.assertEqual(len(rgb), 3)
                for channel in rgb:
                    self.assertGreaterEqual(channel, 0.0)
                    self.assertLessEqual(channel, 1.0)
                self.assertEqual(rgb_to_hex(rgb), "#" + value.lstrip("#").lower())

    def test_red(self) -> None:
        self.assertEqual(hex_to_rgb("#ff0000"), (1.0, 0.0, 0.0))

    def test_malformed_falls_back(self) -> None:
        for value in ("notacolor", "", "#fff", "#12345", "#1234567", "#gg0000", "##ff0000", " ff0000"):
            with self.subTest(value=value):
                self.assertEqual(hex_to_rgb(value), DEFAULT_RGB)

    def test_non_string_falls_back(self) -> None:
        self.assertEqual(hex_to_rgb(None), DEFAULT_RGB)
        self.assertEqual(hex_to_rgb(0xFF0000), DEFAULT_RGB)

    def test_fallback_is_light_gray(self) -> None:
        self.assertEqual(DEFAULT_RGB, (0.8, 0.8, 0.8))


if __name__ == "__main__":
    unittest.main()
