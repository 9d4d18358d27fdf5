import logging
from typing import BinaryIO

from s3stream.config import StoreConfig
from s3stream.context import Context
from s3stream.create import S3Config, S3Credentials, create_s3_client
from s3stream.download import RangeStream, open_stream
from s3stream.transport import S3Transport, Transport
from s3stream.types import ObjectLocator
from s3stream.upload import put_stream

logger = logging.getLogger(__name__)


class S3Store:
    """Streams objects to and from a bucket without holding them in memory."""

    def __init__(self, transport: Transport, config: StoreConfig | None = None) -> None:
        self.transport = transport
        self.config = config or StoreConfig()

    @staticmethod
    def from_credentials(
        credentials: S3Credentials,
        config: StoreConfig | None = None,
        s3_config: S3Config | None = None,
    ) -> "S3Store":
        client = create_s3_client(credentials, s3_config)
        return S3Store(S3Transport(client), config)

    def get(self, locator: ObjectLocator, ctx: Context | None = None) -> RangeStream:
        """
        Open the object for reading.

        Only the size lookup can fail here, errors while fetching the data
        are raised by the returned stream's read().
        """
        ctx = ctx or Context.background()
        return open_stream(
            self.transport, locator, self.config.read_part_bytes, ctx
        )

    def put(
        self, locator: ObjectLocator, source: BinaryIO, ctx: Context | None = None
    ) -> int:
        """
        Store everything read from source under locator.

        Returns the number of bytes read from source. On failure the raised
        S3StreamError has bytes_written set to the bytes read so far.
        """
        ctx = ctx or Context.background()
        return put_stream(self.transport, locator, source, self.config, ctx)
