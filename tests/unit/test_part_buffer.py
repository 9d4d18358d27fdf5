"""
Unit test file.
"""

import unittest

from s3stream.upload import PartBuffer


def _feed_all(buffer: PartBuffer, chunks: list[bytes]) -> list[bytes]:
    parts: list[bytes] = []
    for chunk in chunks:
        parts.extend(buffer.feed(chunk))
    parts.append(buffer.finish())
    return parts


class PartBufferTester(unittest.TestCase):
    """Test re-chunking of the upload stream."""

    def test_empty_source_gives_one_empty_part(self) -> None:
        self.assertEqual(_feed_all(PartBuffer(8), []), [b""])

    def test_short_source(self) -> None:
        self.assertEqual(_feed_all(PartBuffer(8), [b"abc"]), [b"abc"])

    def test_exact_multiple_has_no_empty_tail(self) -> None:
        parts = _feed_all(PartBuffer(4), [b"ab", b"cd", b"ef", b"gh"])
        self.assertEqual(parts, [b"abcd", b"efgh"])

    def test_parts_never_exceed_part_size(self) -> None:
        data = bytes(range(256)) * 4
        chunks = [data[i : i + 7] for i in range(0, len(data), 7)]
        parts = _feed_all(PartBuffer(10), chunks)
        self.assertEqual(b"".join(parts), data)
        for part in parts[:-1]:
            self.assertEqual(len(part), 10)
        self.assertEqual(len(parts[-1]), len(data) % 10 or 10)

    def test_chunk_larger_than_part(self) -> None:
        parts = _feed_all(PartBuffer(3), [b"abcdefgh"])
        self.assertEqual(parts, [b"abc", b"def", b"gh"])


if __name__ == "__main__":
    unittest.main()
