"""
Unit test file.
"""

import os
import unittest
from pathlib import Path
from unittest import mock

from s3stream.cmd.stream import _parse_args, main


class StreamCliTester(unittest.TestCase):
    """Test the s3stream command line."""

    def test_parse_get(self) -> None:
        args = _parse_args(["get", "bucket", "key", "-o", "out.bin", "--read-part-size", "32MB"])
        self.assertEqual(args.command, "get")
        self.assertEqual(args.path, Path("out.bin"))
        self.assertEqual(args.read_part_size, "32MB")
        self.assertIsNone(args.timeout)

    def test_parse_put(self) -> None:
        args = _parse_args(
            ["-v", "put", "bucket", "key", "--prefix", "p/", "--retries", "3", "--timeout", "10"]
        )
        self.assertEqual(args.command, "put")
        self.assertIsNone(args.path)
        self.assertEqual(args.prefix, "p/")
        self.assertEqual(args.retries, 3)
        self.assertEqual(args.timeout, 10.0)
        self.assertTrue(args.verbose)

    def test_missing_credentials(self) -> None:
        with mock.patch.dict(os.environ, {}, clear=True), mock.patch(
            "s3stream.cmd.stream.load_dotenv"
        ), mock.patch("s3stream.cmd.stream.configure_logging"):
            self.assertEqual(main(["get", "bucket", "key"]), 2)

    def test_invalid_part_size(self) -> None:
        with mock.patch("s3stream.cmd.stream.load_dotenv"), mock.patch(
            "s3stream.cmd.stream.configure_logging"
        ):
            self.assertEqual(main(["put", "bucket", "key", "--write-part-size", "6G"]), 2)

    def test_unreadable_input_file(self) -> None:
        env = {"S3STREAM_ACCESS_KEY_ID": "id", "S3STREAM_SECRET_ACCESS_KEY": "secret"}
        missing = Path(__file__).parent / "no-such-input.bin"
        with mock.patch.dict(os.environ, env, clear=True), mock.patch(
            "s3stream.cmd.stream.load_dotenv"
        ), mock.patch("s3stream.cmd.stream.configure_logging"), mock.patch(
            "s3stream.cmd.stream.S3Store"
        ) as store_cls:
            self.assertEqual(main(["put", "bucket", "key", "-i", str(missing)]), 1)
            store_cls.from_credentials.return_value.put.assert_not_called()


if __name__ == "__main__":
    unittest.main()
