"""
Exceptions raised by the s3stream pipelines.

Every error carries its underlying cause through ``raise ... from`` so the
original failure is never lost. Errors raised from ``S3Store.put`` have
``bytes_written`` set to the number of bytes consumed from the source
before the failure.
"""

from s3stream.types import ByteRange, ObjectLocator


class S3StreamError(Exception):
    bytes_written: int | None = None


class RemoteServiceError(S3StreamError):
    """Structured error reported by the object store (code + message)."""

    def __init__(self, code: str, message: str, operation: str = "") -> None:
        self.code = code
        self.message = message
        self.operation = operation
        where = f" during {operation}" if operation else ""
        super().__init__(f"remote error {code}{where}: {message}")


class OperationCancelledError(S3StreamError):
    pass


class DeadlineExceededError(OperationCancelledError):
    pass


class MetadataError(S3StreamError):
    def __init__(self, locator: ObjectLocator, reason: str) -> None:
        self.locator = locator
        super().__init__(f"could not get metadata for object {locator}: {reason}")


class RangeFetchError(S3StreamError):
    def __init__(
        self, locator: ObjectLocator, byte_range: ByteRange | None, reason: str
    ) -> None:
        self.locator = locator
        self.byte_range = byte_range
        spec = byte_range.to_header() if byte_range is not None else "stream"
        super().__init__(f"could not get data {spec} of {locator}: {reason}")


class ReadSourceError(S3StreamError):
    def __init__(self, part_number: int, reason: str) -> None:
        self.part_number = part_number
        super().__init__(f"could not read part {part_number}: {reason}")


class TooManyPartsError(S3StreamError):
    def __init__(self, max_parts: int, bytes_read: int) -> None:
        self.max_parts = max_parts
        self.bytes_read = bytes_read
        super().__init__(
            f"could not upload whole content, max parts number {max_parts} "
            f"reached after {bytes_read} bytes"
        )


class UploadPartError(S3StreamError):
    def __init__(
        self,
        part_number: int,
        attempts: int,
        cause: Exception,
    ) -> None:
        self.part_number = part_number
        self.attempts = attempts
        self.code: str | None = None
        self.message: str | None = None
        if isinstance(cause, RemoteServiceError):
            self.code = cause.code
            self.message = cause.message
            msg = (
                f"remote error {cause.code} while uploading part {part_number}: "
                f"retried {attempts} times: {cause.message}"
            )
        else:
            msg = (
                f"error while uploading part {part_number}: "
                f"retried {attempts} times: {cause}"
            )
        super().__init__(msg)


class FinalizeError(S3StreamError):
    def __init__(self, upload_id: str, reason: str) -> None:
        self.upload_id = upload_id
        super().__init__(f"error while completing upload {upload_id}: {reason}")


class AbortError(S3StreamError):
    """Abort failed. ``original`` is the error that triggered the abort."""

    def __init__(self, upload_id: str, original: Exception, reason: str) -> None:
        self.upload_id = upload_id
        self.original = original
        super().__init__(
            f"could not abort upload {upload_id}: {reason} (aborting because: {original})"
        )


class CreateUploadError(S3StreamError):
    def __init__(self, locator: ObjectLocator, reason: str) -> None:
        self.locator = locator
        super().__init__(f"could not create multipart upload for {locator}: {reason}")
