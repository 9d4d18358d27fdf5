import hashlib
import io
import os
import unittest

from dotenv import load_dotenv

from s3stream import ObjectLocator, S3Credentials, S3Store, StoreConfig

load_dotenv()

BUCKET_NAME: str | None = os.getenv("S3STREAM_TEST_BUCKET")
_ENABLED = bool(BUCKET_NAME and os.getenv("S3STREAM_ACCESS_KEY_ID"))


def _sha256(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


class S3StreamLiveTester(unittest.TestCase):
    """Round trip against a real S3 endpoint configured through the environment."""

    @unittest.skipIf(not _ENABLED, "S3STREAM_TEST_BUCKET / credentials not set")
    def test_streaming_round_trip(self) -> None:
        assert BUCKET_NAME
        store = S3Store.from_credentials(
            S3Credentials.from_env(),
            StoreConfig(read_part_size="16MB", write_part_size="8MB"),
        )
        for name, size in [("tiny", 2 * 1024 * 1024), ("small", 16 * 1024 * 1024), ("big", 45 * 1024 * 1024)]:
            with self.subTest(name=name):
                data = os.urandom(size)
                locator = ObjectLocator(
                    bucket=BUCKET_NAME, key=f"{name}.bin", prefix="s3stream-test/"
                )
                n = store.put(locator, io.BytesIO(data))
                self.assertEqual(n, size)
                try:
                    with store.get(locator) as stream:
                        out = stream.read()
                    self.assertEqual(_sha256(out), _sha256(data))
                finally:
                    store.transport.client.delete_object(  # type: ignore[attr-defined]
                        Bucket=locator.bucket, Key=locator.object_key
                    )


if __name__ == "__main__":
    unittest.main()
