from .api import S3Store
from .config import StoreConfig
from .context import Context
from .create import S3Config, S3Credentials, create_s3_client
from .download import RangeStream
from .errors import (
    AbortError,
    CreateUploadError,
    DeadlineExceededError,
    FinalizeError,
    MetadataError,
    OperationCancelledError,
    RangeFetchError,
    ReadSourceError,
    RemoteServiceError,
    S3StreamError,
    TooManyPartsError,
    UploadPartError,
)
from .log import configure_logging
from .planner import plan_ranges
from .transport import S3Transport, Transport
from .types import ByteRange, ObjectLocator, PartRecord, UploadSession

__all__ = [
    "S3Store",
    "StoreConfig",
    "Context",
    "S3Config",
    "S3Credentials",
    "create_s3_client",
    "RangeStream",
    "Transport",
    "S3Transport",
    "ObjectLocator",
    "ByteRange",
    "UploadSession",
    "PartRecord",
    "plan_ranges",
    "configure_logging",
    "S3StreamError",
    "RemoteServiceError",
    "MetadataError",
    "RangeFetchError",
    "ReadSourceError",
    "TooManyPartsError",
    "UploadPartError",
    "CreateUploadError",
    "FinalizeError",
    "AbortError",
    "OperationCancelledError",
    "DeadlineExceededError",
]
