import os
import warnings
from dataclasses import dataclass

import boto3
from botocore.client import BaseClient
from botocore.config import Config

_MAX_CONNECTIONS = 10
_TIMEOUT_READ = 120
_TIMEOUT_CONNECT = 60
_ENV_PREFIX = "S3STREAM_"


@dataclass
class S3Credentials:
    """Credentials for accessing S3."""

    access_key_id: str
    secret_access_key: str
    session_token: str | None = None
    region_name: str | None = None
    endpoint_url: str | None = None

    @staticmethod
    def from_env(prefix: str = _ENV_PREFIX) -> "S3Credentials":
        access_key_id = os.getenv(f"{prefix}ACCESS_KEY_ID")
        secret_access_key = os.getenv(f"{prefix}SECRET_ACCESS_KEY")
        if not access_key_id or not secret_access_key:
            raise ValueError(
                f"{prefix}ACCESS_KEY_ID and {prefix}SECRET_ACCESS_KEY must be set"
            )
        return S3Credentials(
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            session_token=os.getenv(f"{prefix}SESSION_TOKEN"),
            region_name=os.getenv(f"{prefix}REGION"),
            endpoint_url=os.getenv(f"{prefix}ENDPOINT_URL"),
        )


@dataclass
class S3Config:
    max_pool_connections: int | None = None
    timeout_connection: int | None = None
    timeout_read: int | None = None
    verbose: bool | None = None

    def resolve_defaults(self) -> None:
        self.max_pool_connections = self.max_pool_connections or _MAX_CONNECTIONS
        self.timeout_connection = self.timeout_connection or _TIMEOUT_CONNECT
        self.timeout_read = self.timeout_read or _TIMEOUT_READ
        self.verbose = self.verbose or False


def create_s3_client(
    s3_creds: S3Credentials, s3_config: S3Config | None = None
) -> BaseClient:
    """Create and return an S3 client."""
    s3_config = s3_config or S3Config()
    s3_config.resolve_defaults()
    endpoint_url = s3_creds.endpoint_url
    if (endpoint_url is not None) and not (endpoint_url.startswith("http")):
        if s3_config.verbose:
            warnings.warn(
                f"Endpoint URL is schema naive: {endpoint_url}, assuming HTTPS"
            )
        endpoint_url = f"https://{endpoint_url}"
    session = boto3.session.Session()  # type: ignore
    return session.client(
        service_name="s3",
        aws_access_key_id=s3_creds.access_key_id,
        aws_secret_access_key=s3_creds.secret_access_key,
        aws_session_token=s3_creds.session_token,
        endpoint_url=endpoint_url,
        config=Config(
            signature_version="s3v4",
            region_name=s3_creds.region_name,
            max_pool_connections=s3_config.max_pool_connections,
            read_timeout=s3_config.timeout_read,
            connect_timeout=s3_config.timeout_connection,
        ),
    )
