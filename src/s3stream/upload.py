import logging
from enum import Enum
from typing import BinaryIO, Generator

from s3stream.config import StoreConfig
from s3stream.context import Context
from s3stream.errors import (
    AbortError,
    CreateUploadError,
    FinalizeError,
    OperationCancelledError,
    ReadSourceError,
    S3StreamError,
    TooManyPartsError,
    UploadPartError,
)
from s3stream.transport import Transport
from s3stream.types import ObjectLocator, PartRecord, UploadSession

logger = logging.getLogger(__name__)


class UploadPhase(Enum):
    CREATED = "created"
    BUFFERING = "buffering"
    UPLOADING = "uploading"
    FINALIZING = "finalizing"
    COMPLETED = "completed"
    ABORTED = "aborted"


class PartBuffer:
    """
    Re-chunks a byte stream into parts of exactly part_size bytes.

    A full arena is only flushed when more bytes arrive, so the trailing part
    returned by finish() is never empty unless nothing was fed at all.
    """

    def __init__(self, part_size: int) -> None:
        assert part_size > 0, f"Invalid part size: {part_size}"
        self.part_size = part_size
        self._arena = bytearray(part_size)
        self._fill = 0

    def __len__(self) -> int:
        return self._fill

    def feed(self, chunk: bytes) -> Generator[bytes, None, None]:
        view = memoryview(chunk)
        while len(view) > 0:
            if self._fill == self.part_size:
                yield bytes(self._arena)
                self._fill = 0
            take = min(self.part_size - self._fill, len(view))
            self._arena[self._fill : self._fill + take] = view[:take]
            self._fill += take
            view = view[take:]

    def finish(self) -> bytes:
        out = bytes(self._arena[: self._fill])
        self._fill = 0
        return out


def upload_part(
    transport: Transport,
    session: UploadSession,
    part_number: int,
    data: bytes,
    ctx: Context,
    retries: int,
    backoff: float = 0.0,
) -> PartRecord:
    """Upload a single part, trying up to ``retries`` times."""
    last_error: Exception | None = None
    for attempt in range(1, retries + 1):
        if attempt > 1 and backoff > 0:
            ctx.wait(backoff)
        try:
            etag = ctx.call(transport.upload_part, session, part_number, data)
            return PartRecord(part_number=part_number, etag=etag)
        except OperationCancelledError:
            raise
        except Exception as e:
            last_error = e
            if attempt < retries:
                logger.warning(
                    f"Error uploading part {part_number} (attempt {attempt}/{retries}): {e}, retrying"
                )
            else:
                logger.error(
                    f"Error uploading part {part_number}, giving up after {attempt} attempts: {e}"
                )
    assert last_error is not None
    raise UploadPartError(part_number, retries, last_error) from last_error


def complete_upload(
    transport: Transport,
    session: UploadSession,
    parts: list[PartRecord],
    ctx: Context,
) -> None:
    numbers = [p.part_number for p in parts]
    assert numbers == list(range(1, len(parts) + 1)), f"Parts not dense: {numbers}"
    try:
        ctx.call(transport.complete_multipart_upload, session, parts)
    except OperationCancelledError:
        raise
    except Exception as e:
        raise FinalizeError(session.upload_id, str(e)) from e


def abort_upload(
    transport: Transport, session: UploadSession, original: Exception
) -> Exception:
    """
    Abort the session after ``original`` ended the upload.

    Returns the error the caller should raise: ``original`` itself, or an
    AbortError wrapping it when the abort failed too.
    """
    logger.info(f"Aborting upload {session.upload_id} of {session.key}: {original}")
    try:
        # Detached from the caller's context so a cancelled put still aborts.
        Context.background().call(transport.abort_multipart_upload, session)
    except Exception as e:
        logger.warning(f"Could not abort upload {session.upload_id}: {e}")
        err = AbortError(session.upload_id, original, str(e))
        err.__cause__ = e
        return err
    return original


class _PutOperation:
    def __init__(
        self,
        transport: Transport,
        locator: ObjectLocator,
        source: BinaryIO,
        config: StoreConfig,
        ctx: Context,
    ) -> None:
        self.transport = transport
        self.locator = locator
        self.source = source
        self.config = config
        self.ctx = ctx
        self.phase = UploadPhase.CREATED
        self.parts: list[PartRecord] = []
        self.total = 0

    def _enter(self, phase: UploadPhase) -> None:
        if phase != self.phase:
            logger.debug(f"{self.locator}: {self.phase.value} -> {phase.value}")
            self.phase = phase

    def _upload(self, session: UploadSession, data: bytes) -> None:
        part_number = len(self.parts) + 1
        if part_number > self.config.max_parts:
            raise TooManyPartsError(self.config.max_parts, self.total)
        self._enter(UploadPhase.UPLOADING)
        logger.debug(f"Uploading part {part_number} of {self.locator}, size {len(data)}")
        part = upload_part(
            self.transport,
            session,
            part_number,
            data,
            self.ctx,
            retries=self.config.max_upload_retries,
            backoff=self.config.retry_backoff,
        )
        self.parts.append(part)
        self._enter(UploadPhase.BUFFERING)

    def _read(self, part_number: int, size: int) -> bytes:
        try:
            data = self.source.read(size)
        except Exception as e:
            raise ReadSourceError(part_number, str(e)) from e
        if data is None:
            raise ReadSourceError(part_number, "source is non-blocking and has no data ready")
        return bytes(data)

    def _transfer(self, session: UploadSession) -> None:
        buffer = PartBuffer(self.config.write_part_bytes)
        increment = self.config.read_increment_bytes
        self._enter(UploadPhase.BUFFERING)
        while True:
            self.ctx.check()
            chunk = self._read(len(self.parts) + 1, increment)
            if not chunk:
                break
            self.total += len(chunk)
            for part in buffer.feed(chunk):
                self._upload(session, part)
        self._upload(session, buffer.finish())

    def run(self) -> int:
        try:
            session = self.ctx.call(self.transport.create_multipart_upload, self.locator)
        except OperationCancelledError as e:
            e.bytes_written = 0
            raise
        except Exception as e:
            err = CreateUploadError(self.locator, str(e))
            err.bytes_written = 0
            raise err from e
        logger.info(f"Created multipart upload {session.upload_id} for {self.locator}")

        try:
            self._transfer(session)
        except Exception as e:
            self._enter(UploadPhase.FINALIZING)
            err = abort_upload(self.transport, session, e)
            self._enter(UploadPhase.ABORTED)
            if isinstance(err, S3StreamError):
                err.bytes_written = self.total
            if err is e:
                raise
            raise err

        self._enter(UploadPhase.FINALIZING)
        try:
            complete_upload(self.transport, session, self.parts, self.ctx)
        except S3StreamError as e:
            e.bytes_written = self.total
            raise
        self._enter(UploadPhase.COMPLETED)
        logger.info(
            f"Multipart upload completed: {self.total} bytes in {len(self.parts)} parts to {self.locator}"
        )
        return self.total


def put_stream(
    transport: Transport,
    locator: ObjectLocator,
    source: BinaryIO,
    config: StoreConfig,
    ctx: Context,
) -> int:
    return _PutOperation(transport, locator, source, config, ctx).run()
