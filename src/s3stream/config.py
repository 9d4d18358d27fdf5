from dataclasses import dataclass

from s3stream.types import MAX_PART_SIZE, MAX_PARTS, format_size, parse_size

READ_PART_SIZE = 16 * 1024 * 1024  # 16MB
WRITE_PART_SIZE = 8 * 1024 * 1024  # 8MB
READ_INCREMENT = 1 * 1024 * 1024  # 1MB
MAX_UPLOAD_RETRIES = 5


@dataclass
class StoreConfig:
    """Tunables for S3Store. Sizes may be ints or size strings like "16MB"."""

    read_part_size: int | str = READ_PART_SIZE
    write_part_size: int | str = WRITE_PART_SIZE
    read_increment: int | str = READ_INCREMENT
    max_upload_retries: int = MAX_UPLOAD_RETRIES
    retry_backoff: float = 0.0  # seconds between part upload attempts
    max_parts: int = MAX_PARTS

    def __post_init__(self):
        self.read_part_size = parse_size(self.read_part_size)
        self.write_part_size = parse_size(self.write_part_size)
        self.read_increment = parse_size(self.read_increment)
        if self.read_part_size <= 0:
            raise ValueError(f"Invalid read part size: {self.read_part_size}")
        if self.read_part_size > MAX_PART_SIZE:
            raise ValueError(
                f"read part size {format_size(self.read_part_size)} is over the limit of {format_size(MAX_PART_SIZE)}"
            )
        if self.write_part_size <= 0:
            raise ValueError(f"Invalid write part size: {self.write_part_size}")
        if self.write_part_size > MAX_PART_SIZE:
            raise ValueError(
                f"write part size {format_size(self.write_part_size)} is over the limit of {format_size(MAX_PART_SIZE)}"
            )
        if self.read_increment <= 0:
            raise ValueError(f"Invalid read increment: {self.read_increment}")
        if self.max_upload_retries < 1:
            raise ValueError(
                f"max upload retries must be at least 1, got {self.max_upload_retries}"
            )
        if self.retry_backoff < 0:
            raise ValueError(f"Invalid retry backoff: {self.retry_backoff}")
        if not 1 <= self.max_parts <= MAX_PARTS:
            raise ValueError(f"max parts must be within 1..{MAX_PARTS}")

    # Narrowed accessors, the fields are always ints after __post_init__.
    @property
    def read_part_bytes(self) -> int:
        assert isinstance(self.read_part_size, int)
        return self.read_part_size

    @property
    def write_part_bytes(self) -> int:
        assert isinstance(self.write_part_size, int)
        return self.write_part_size

    @property
    def read_increment_bytes(self) -> int:
        assert isinstance(self.read_increment, int)
        return self.read_increment
