import abc
import logging

from botocore.client import BaseClient
from botocore.exceptions import ClientError

from s3stream.errors import RemoteServiceError
from s3stream.types import ObjectLocator, PartRecord, UploadSession

logger = logging.getLogger(__name__)


class Transport(abc.ABC):
    """The remote object store as seen by the pipelines.

    Implementations must be safe to use from several threads at once.
    """

    @abc.abstractmethod
    def head_object(self, locator: ObjectLocator) -> int:
        """Return the length in bytes of the object."""

    @abc.abstractmethod
    def get_object_range(self, locator: ObjectLocator, range_spec: str) -> bytes:
        """Return the bytes selected by range_spec ("bytes=<start>-<end>")."""

    @abc.abstractmethod
    def create_multipart_upload(self, locator: ObjectLocator) -> UploadSession:
        pass

    @abc.abstractmethod
    def upload_part(
        self, session: UploadSession, part_number: int, data: bytes
    ) -> str:
        """Upload one part and return its entity tag."""

    @abc.abstractmethod
    def complete_multipart_upload(
        self, session: UploadSession, parts: list[PartRecord]
    ) -> None:
        pass

    @abc.abstractmethod
    def abort_multipart_upload(self, session: UploadSession) -> None:
        pass


def _to_remote_error(e: ClientError, operation: str) -> RemoteServiceError:
    error = e.response.get("Error", {})
    code = str(error.get("Code", "Unknown"))
    message = str(error.get("Message", "")) or str(e)
    return RemoteServiceError(code=code, message=message, operation=operation)


class S3Transport(Transport):
    """Transport backed by a boto3 S3 client."""

    def __init__(self, s3_client: BaseClient) -> None:
        self.client = s3_client

    def head_object(self, locator: ObjectLocator) -> int:
        try:
            response = self.client.head_object(
                Bucket=locator.bucket, Key=locator.object_key
            )
        except ClientError as e:
            raise _to_remote_error(e, "HeadObject") from e
        return int(response["ContentLength"])

    def get_object_range(self, locator: ObjectLocator, range_spec: str) -> bytes:
        try:
            response = self.client.get_object(
                Bucket=locator.bucket, Key=locator.object_key, Range=range_spec
            )
        except ClientError as e:
            raise _to_remote_error(e, "GetObject") from e
        body = response["Body"]
        try:
            return body.read()
        finally:
            body.close()

    def create_multipart_upload(self, locator: ObjectLocator) -> UploadSession:
        try:
            response = self.client.create_multipart_upload(
                Bucket=locator.bucket, Key=locator.object_key
            )
        except ClientError as e:
            raise _to_remote_error(e, "CreateMultipartUpload") from e
        return UploadSession(
            bucket=locator.bucket,
            key=locator.object_key,
            upload_id=response["UploadId"],
        )

    def upload_part(
        self, session: UploadSession, part_number: int, data: bytes
    ) -> str:
        try:
            response = self.client.upload_part(
                Bucket=session.bucket,
                Key=session.key,
                PartNumber=part_number,
                UploadId=session.upload_id,
                ContentLength=len(data),
                Body=data,
            )
        except ClientError as e:
            raise _to_remote_error(e, "UploadPart") from e
        return response["ETag"]

    def complete_multipart_upload(
        self, session: UploadSession, parts: list[PartRecord]
    ) -> None:
        try:
            self.client.complete_multipart_upload(
                Bucket=session.bucket,
                Key=session.key,
                UploadId=session.upload_id,
                MultipartUpload={"Parts": PartRecord.to_json_array(parts)},
            )
        except ClientError as e:
            raise _to_remote_error(e, "CompleteMultipartUpload") from e

    def abort_multipart_upload(self, session: UploadSession) -> None:
        try:
            self.client.abort_multipart_upload(
                Bucket=session.bucket, Key=session.key, UploadId=session.upload_id
            )
        except ClientError as e:
            raise _to_remote_error(e, "AbortMultipartUpload") from e
