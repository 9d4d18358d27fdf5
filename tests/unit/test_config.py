"""
Unit test file.
"""

import unittest

from s3stream import StoreConfig
from s3stream.types import MAX_PART_SIZE, format_size, parse_size


class StoreConfigTester(unittest.TestCase):
    """Test configuration validation."""

    def test_defaults(self) -> None:
        config = StoreConfig()
        self.assertEqual(config.read_part_size, 16 * 1024 * 1024)
        self.assertEqual(config.write_part_size, 8 * 1024 * 1024)
        self.assertEqual(config.read_increment, 1024 * 1024)
        self.assertEqual(config.max_upload_retries, 5)
        self.assertEqual(config.max_parts, 10000)

    def test_size_strings(self) -> None:
        config = StoreConfig(read_part_size="32MB", write_part_size="5M")
        self.assertEqual(config.read_part_bytes, 32 * 1024 * 1024)
        self.assertEqual(config.write_part_bytes, 5 * 1024 * 1024)

    def test_invalid_values_fail_fast(self) -> None:
        with self.assertRaises(ValueError):
            StoreConfig(read_part_size=MAX_PART_SIZE + 1)
        with self.assertRaises(ValueError):
            StoreConfig(write_part_size="6G")
        with self.assertRaises(ValueError):
            StoreConfig(write_part_size=0)
        with self.assertRaises(ValueError):
            StoreConfig(max_upload_retries=0)
        with self.assertRaises(ValueError):
            StoreConfig(max_parts=10001)
        with self.assertRaises(ValueError):
            StoreConfig(read_part_size="lots")

    def test_max_part_size_is_allowed(self) -> None:
        config = StoreConfig(read_part_size="5G")
        self.assertEqual(config.read_part_size, MAX_PART_SIZE)


class SizeSuffixTester(unittest.TestCase):
    def test_parse(self) -> None:
        self.assertEqual(parse_size("16MB"), 16 * 1024 * 1024)
        self.assertEqual(parse_size("16.5M"), int(16.5 * 1024 * 1024))
        self.assertEqual(parse_size("1024"), 1024)
        self.assertEqual(parse_size(7), 7)

    def test_format(self) -> None:
        self.assertEqual(format_size(16 * 1024 * 1024), "16M")
        self.assertEqual(format_size(int(16.5 * 1024 * 1024)), "16.5M")
        self.assertEqual(format_size(100), "100B")


if __name__ == "__main__":
    unittest.main()
