from __future__ import annotations

import struct
import sys
import unittest
from pathlib import Path

TESTS_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = TESTS_DIR.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from aasvg import FramingError, pack_string, render, render_buffer, unpack_string


class FramingTests(unittest.TestCase):
    def test_pack_layout(self) -> None:
        self.assertEqual(pack_string("ab"), b"\x02\x00\x00\x00ab")
        self.assertEqual(pack_string(""), b"\x00\x00\x00\x00")

    def test_pack_keeps_low_byte_per_code_unit(self) -> None:
        # U+0141 keeps 0x41; U+1F600 is two UTF-16 units.
        self.assertEqual(pack_string("Ł"), b"\x01\x00\x00\x00A")
        self.assertEqual(len(pack_string("\U0001F600")), 4 + 2)

    def test_unpack_at_offset(self) -> None:
        buffer = b"junk" + pack_string("+--+") + b"tail"
        self.assertEqual(unpack_string(buffer, 4), "+--+")

    def test_unpack_short_prefix(self) -> None:
        with self.assertRaises(FramingError):
            unpack_string(b"\x01\x00")

    def test_unpack_short_payload(self) -> None:
        with self.assertRaises(FramingError):
            unpack_string(struct.pack("<I", 10) + b"abc")

    def test_framing_error_is_value_error(self) -> None:
        self.assertTrue(issubclass(FramingError, ValueError))

    def test_render_buffer(self) -> None:
        diagram = "*-->o\n"
        result = render_buffer(pack_string(diagram))
        self.assertEqual(unpack_string(result), render(diagram))


if __name__ == "__main__":
    unittest.main()
