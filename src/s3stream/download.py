import io
import logging
import weakref
from queue import Empty, Full, Queue
from threading import Event, Semaphore, Thread

from s3stream.context import Context
from s3stream.errors import (
    MetadataError,
    OperationCancelledError,
    RangeFetchError,
    S3StreamError,
)
from s3stream.planner import plan_ranges
from s3stream.transport import Transport
from s3stream.types import ByteRange, EndOfStream, ObjectLocator

logger = logging.getLogger(__name__)

_POLL_SECONDS = 0.1
# Ranges fetched but not yet fully read: the one being read plus one ahead.
_RANGES_IN_MEMORY = 2


def probe_size(transport: Transport, locator: ObjectLocator, ctx: Context) -> int:
    try:
        length = ctx.call(transport.head_object, locator)
    except OperationCancelledError:
        raise
    except Exception as e:
        raise MetadataError(locator, str(e)) from e
    if length < 0:
        raise MetadataError(locator, f"invalid content length {length}")
    return length


def fetch_range(
    transport: Transport, locator: ObjectLocator, byte_range: ByteRange, ctx: Context
) -> bytes:
    spec = byte_range.to_header()
    try:
        data = ctx.call(transport.get_object_range, locator, spec)
    except OperationCancelledError:
        raise
    except Exception as e:
        raise RangeFetchError(locator, byte_range, str(e)) from e
    if len(data) != byte_range.size:
        raise RangeFetchError(
            locator,
            byte_range,
            f"short read, got {len(data)} bytes, expected {byte_range.size}",
        )
    return data


_Item = bytes | EndOfStream | Exception


class _RangeProducer:
    """
    Fetches the planned ranges in order on a background thread.

    Holds no reference to the RangeStream, so an abandoned stream can be
    collected and its finalizer stops the thread.
    """

    def __init__(
        self,
        transport: Transport,
        locator: ObjectLocator,
        length: int,
        ranges: list[ByteRange],
        ctx: Context,
    ) -> None:
        self.transport = transport
        self.locator = locator
        self.length = length
        self.ranges = ranges
        self.ctx = ctx
        self.queue: Queue[_Item] = Queue(maxsize=1)
        self.stop = Event()
        # released by the reader once it has drained a range
        self.slots = Semaphore(_RANGES_IN_MEMORY)

    def _acquire_slot(self) -> bool:
        while not self.stop.is_set():
            if self.slots.acquire(timeout=_POLL_SECONDS):
                return True
        return False

    def _put(self, item: _Item) -> bool:
        while not self.stop.is_set():
            try:
                self.queue.put(item, timeout=_POLL_SECONDS)
                return True
            except Full:
                continue
        return False

    def run(self) -> None:
        produced = 0
        try:
            for byte_range in self.ranges:
                if not self._acquire_slot():
                    return
                logger.debug(f"Fetching {byte_range.to_header()} of {self.locator}")
                data = fetch_range(self.transport, self.locator, byte_range, self.ctx)
                produced += len(data)
                if not self._put(data):
                    return
            if produced != self.length:
                raise RangeFetchError(
                    self.locator,
                    None,
                    f"produced {produced} bytes, expected {self.length}",
                )
            self._put(EndOfStream())
        except S3StreamError as e:
            if self.ctx.cancelled():
                logger.debug(f"Download of {self.locator} stopped: {e}")
            else:
                logger.warning(f"Download of {self.locator} failed: {e}")
            self._put(e)
        except Exception as e:
            logger.error(f"Unexpected error downloading {self.locator}: {e}", exc_info=True)
            err = RangeFetchError(self.locator, None, str(e))
            err.__cause__ = e
            self._put(err)

    def shutdown(self) -> None:
        self.stop.set()
        # unblock a producer waiting on a full slot
        try:
            self.queue.get_nowait()
        except Empty:
            pass


class RangeStream(io.RawIOBase):
    """
    Forward-only stream over a remote object.

    A background thread fetches the planned ranges one at a time. It only
    fetches the next range once the reader has drained the one before the
    range it last handed over, so at most two ranges are held in memory.
    Fetch errors are delivered as read errors.

    Close the stream (or use it as a context manager) when done early. A
    stream that is garbage collected stops its thread as well.
    """

    def __init__(
        self,
        transport: Transport,
        locator: ObjectLocator,
        length: int,
        part_size: int,
        ctx: Context,
    ) -> None:
        super().__init__()
        self.transport = transport
        self.locator = locator
        self.length = length
        self.ranges: list[ByteRange] = plan_ranges(length, part_size)
        self.bytes_read = 0
        self._producer = _RangeProducer(transport, locator, length, self.ranges, ctx)
        self._current = memoryview(b"")
        self._eof = False
        self._error: Exception | None = None
        self._thread = Thread(
            target=self._producer.run, name=f"s3stream-get-{locator}", daemon=True
        )
        self._finalizer = weakref.finalize(self, self._producer.shutdown)
        self._thread.start()

    def _next_item(self) -> _Item:
        while True:
            try:
                return self._producer.queue.get(timeout=_POLL_SECONDS)
            except Empty:
                if not self._thread.is_alive() and self._producer.queue.empty():
                    return RangeFetchError(
                        self.locator, None, "download stopped unexpectedly"
                    )

    def readable(self) -> bool:
        return True

    def readinto(self, b) -> int:  # type: ignore[override]
        if self.closed:
            raise ValueError("I/O operation on closed stream")
        if self._error is not None:
            raise self._error
        view = memoryview(b).cast("B")
        if len(view) == 0:
            return 0
        while len(self._current) == 0:
            if self._eof:
                return 0
            item = self._next_item()
            if isinstance(item, EndOfStream):
                self._eof = True
                logger.debug(f"Finished reading {self.bytes_read} bytes of {self.locator}")
                return 0
            if isinstance(item, Exception):
                self._error = item
                raise item
            self._current = memoryview(item)
        n = min(len(view), len(self._current))
        view[:n] = self._current[:n]
        self._current = self._current[n:]
        self.bytes_read += n
        if len(self._current) == 0:
            self._producer.slots.release()
        return n

    def tell(self) -> int:
        return self.bytes_read

    def close(self) -> None:
        if not self.closed:
            self._finalizer()
            self._thread.join(timeout=_POLL_SECONDS * 5)
            self._current = memoryview(b"")
        super().close()


def open_stream(
    transport: Transport, locator: ObjectLocator, part_size: int, ctx: Context
) -> RangeStream:
    length = probe_size(transport, locator, ctx)
    logger.info(f"Streaming {locator} ({length} bytes) in ranges of {part_size}")
    return RangeStream(
        transport=transport,
        locator=locator,
        length=length,
        part_size=part_size,
        ctx=ctx,
    )
