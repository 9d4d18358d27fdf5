"""
Unit test file.
"""

import unittest

from s3stream.planner import count_ranges, plan_ranges
from s3stream.types import ByteRange


class RangePlannerTester(unittest.TestCase):
    """Test range planning."""

    def test_empty_object_has_no_ranges(self) -> None:
        self.assertEqual(plan_ranges(0, 16), [])
        self.assertEqual(count_ranges(0, 16), 0)

    def test_exact_multiple(self) -> None:
        ranges = plan_ranges(48, 16)
        self.assertEqual(
            ranges,
            [ByteRange(0, 15), ByteRange(16, 31), ByteRange(32, 47)],
        )
        self.assertEqual([r.to_header() for r in ranges][-1], "bytes=32-47")

    def test_remainder_goes_in_last_range(self) -> None:
        ranges = plan_ranges(50, 16)
        self.assertEqual(len(ranges), 4)
        self.assertEqual(ranges[-1], ByteRange(48, 49))
        self.assertEqual(ranges[-1].size, 2)

    def test_smaller_than_one_part(self) -> None:
        self.assertEqual(plan_ranges(5, 16), [ByteRange(0, 4)])

    def test_covers_every_byte_once(self) -> None:
        for length in [1, 2, 15, 16, 17, 100, 1023, 1024, 1025]:
            for part_size in [1, 3, 16, 1024]:
                ranges = plan_ranges(length, part_size)
                n = count_ranges(length, part_size)
                self.assertEqual(len(ranges), n)
                self.assertEqual(n, -(-length // part_size))
                offset = 0
                for r in ranges:
                    self.assertEqual(r.start, offset)
                    offset = r.end + 1
                self.assertEqual(offset, length)
                self.assertEqual(ranges[-1].size, length - part_size * (n - 1))

    def test_deterministic(self) -> None:
        self.assertEqual(plan_ranges(12345, 100), plan_ranges(12345, 100))

    def test_invalid_input(self) -> None:
        with self.assertRaises(ValueError):
            plan_ranges(10, 0)
        with self.assertRaises(ValueError):
            plan_ranges(-1, 10)

    def test_header_round_trip(self) -> None:
        self.assertEqual(ByteRange.from_header("bytes=16-31"), ByteRange(16, 31))
        with self.assertRaises(ValueError):
            ByteRange.from_header("bytes=16-")


if __name__ == "__main__":
    unittest.main()
