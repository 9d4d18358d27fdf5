import argparse
import logging
import shutil
import sys
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from s3stream import (
    Context,
    ObjectLocator,
    S3Credentials,
    S3Store,
    S3StreamError,
    StoreConfig,
    configure_logging,
)
from s3stream.config import MAX_UPLOAD_RETRIES, READ_PART_SIZE, WRITE_PART_SIZE

logger = logging.getLogger(__name__)

_COPY_BUFSIZE = 1024 * 1024


@dataclass
class Args:
    command: str
    bucket: str
    key: str
    prefix: str
    path: Path | None
    read_part_size: str
    write_part_size: str
    retries: int
    timeout: float | None
    verbose: bool


def _parse_args(argv: list[str] | None = None) -> Args:
    parser = argparse.ArgumentParser(
        prog="s3stream", description="Stream objects to and from S3."
    )
    parser.add_argument("-v", "--verbose", help="Verbose output", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    get = sub.add_parser("get", help="Download an object to a file or stdout")
    put = sub.add_parser("put", help="Upload a file or stdin to an object")
    for p in (get, put):
        p.add_argument("bucket", help="Bucket name")
        p.add_argument("key", help="Object key")
        p.add_argument("--prefix", help="Key prefix", default="")
        p.add_argument(
            "--timeout", help="Give up after this many seconds", type=float
        )
    get.add_argument("-o", "--output", help="Output file, stdout if omitted", type=Path)
    get.add_argument(
        "--read-part-size",
        help="Size of each ranged read in SizeSuffix form",
        type=str,
        default=str(READ_PART_SIZE),
    )
    put.add_argument("-i", "--input", help="Input file, stdin if omitted", type=Path)
    put.add_argument(
        "--write-part-size",
        help="Size of each uploaded part in SizeSuffix form",
        type=str,
        default=str(WRITE_PART_SIZE),
    )
    put.add_argument(
        "--retries", help="Attempts per part", type=int, default=MAX_UPLOAD_RETRIES
    )

    args = parser.parse_args(argv)
    return Args(
        command=args.command,
        bucket=args.bucket,
        key=args.key,
        prefix=args.prefix,
        path=args.output if args.command == "get" else args.input,
        read_part_size=getattr(args, "read_part_size", str(READ_PART_SIZE)),
        write_part_size=getattr(args, "write_part_size", str(WRITE_PART_SIZE)),
        retries=getattr(args, "retries", MAX_UPLOAD_RETRIES),
        timeout=args.timeout,
        verbose=args.verbose,
    )


def _get(store: S3Store, locator: ObjectLocator, args: Args, ctx: Context) -> None:
    with store.get(locator, ctx) as stream:
        if args.path is None:
            shutil.copyfileobj(stream, sys.stdout.buffer, _COPY_BUFSIZE)
            sys.stdout.buffer.flush()
        else:
            with args.path.open("wb") as f:
                shutil.copyfileobj(stream, f, _COPY_BUFSIZE)
        logger.info(f"Downloaded {stream.bytes_read} bytes from {locator}")


def _put(store: S3Store, locator: ObjectLocator, args: Args, ctx: Context) -> None:
    if args.path is None:
        n = store.put(locator, sys.stdin.buffer, ctx)
    else:
        with args.path.open("rb") as f:
            n = store.put(locator, f, ctx)
    logger.info(f"Uploaded {n} bytes to {locator}")


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = _parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.INFO)
    load_dotenv()
    try:
        config = StoreConfig(
            read_part_size=args.read_part_size,
            write_part_size=args.write_part_size,
            max_upload_retries=args.retries,
        )
        credentials = S3Credentials.from_env()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    store = S3Store.from_credentials(credentials, config)
    locator = ObjectLocator(bucket=args.bucket, key=args.key, prefix=args.prefix)
    ctx = Context.with_timeout(args.timeout) if args.timeout else Context.background()
    try:
        if args.command == "get":
            _get(store, locator, args, ctx)
        else:
            _put(store, locator, args, ctx)
    except (S3StreamError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
