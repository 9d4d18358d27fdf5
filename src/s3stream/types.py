import re
from dataclasses import dataclass

# https://docs.aws.amazon.com/AmazonS3/latest/dev/qfacts.html
MAX_PARTS = 10000
MAX_PART_SIZE = 5 * 1024 * 1024 * 1024  # 5GB


@dataclass(frozen=True)
class ObjectLocator:
    """Where a remote object lives."""

    bucket: str
    key: str
    prefix: str = ""

    @property
    def object_key(self) -> str:
        return self.prefix + self.key

    def __str__(self) -> str:
        return f"{self.bucket}/{self.object_key}"


@dataclass(frozen=True)
class ByteRange:
    start: int  # inclusive
    end: int  # inclusive, like the http byte range

    def __post_init__(self):
        assert self.start >= 0, f"Invalid start: {self.start}"
        assert self.end >= self.start, f"Invalid range: {self.start}-{self.end}"

    @property
    def size(self) -> int:
        return self.end - self.start + 1

    def to_header(self) -> str:
        return f"bytes={self.start}-{self.end}"

    @staticmethod
    def from_header(value: str) -> "ByteRange":
        match = _PATTERN_RANGE.match(value.strip())
        if match is None:
            raise ValueError(f"Invalid range specifier: {value}")
        return ByteRange(start=int(match.group(1)), end=int(match.group(2)))


_PATTERN_RANGE = re.compile(r"^bytes=(\d+)-(\d+)$")


@dataclass(frozen=True)
class UploadSession:
    bucket: str
    key: str
    upload_id: str


@dataclass(frozen=True)
class PartRecord:
    part_number: int
    etag: str

    def __post_init__(self):
        assert isinstance(self.part_number, int)
        assert isinstance(self.etag, str)
        assert 1 <= self.part_number <= MAX_PARTS

    def to_json(self) -> dict:
        # amazon s3 style dict
        return {"PartNumber": self.part_number, "ETag": self.etag}

    @staticmethod
    def to_json_array(parts: list["PartRecord"]) -> list[dict]:
        return [p.to_json() for p in parts]


class EndOfStream:
    pass


def _to_size_suffix(size: int) -> str:
    units = ["B", "K", "M", "G", "T", "P"]
    val: float = size
    for unit in units:
        if val < 1024 or unit == units[-1]:
            break
        val = val / 1024
    if float(val).is_integer():
        return f"{int(val)}{unit}"
    return f"{val:.1f}{unit}"


_PATTERN_SIZE_SUFFIX = re.compile(r"^(\d+(?:\.\d+)?)([A-Za-z]*)$")
_UNIT_POWERS = {"B": 0, "K": 1, "M": 2, "G": 3, "T": 4, "P": 5}


def parse_size(size: "int | str") -> int:
    """Parse a size given in bytes or as a suffixed string ("16MB", "1.5G")."""
    if isinstance(size, bool):
        raise ValueError(f"Invalid type for size: {type(size)}")
    if isinstance(size, int):
        return size
    if not isinstance(size, str):
        raise ValueError(f"Invalid type for size: {type(size)}")
    match = _PATTERN_SIZE_SUFFIX.match(size.strip())
    if match is None:
        raise ValueError(f"Invalid size suffix: {size}")
    n = float(match.group(1))
    suffix = match.group(2)
    if not suffix:
        return int(n)
    # Determine the unit from the first letter (e.g., "M" from "MB")
    unit = suffix[0].upper()
    if unit not in _UNIT_POWERS:
        raise ValueError(f"Invalid size suffix: {size}")
    return int(n * 1024 ** _UNIT_POWERS[unit])


def format_size(size: int) -> str:
    return _to_size_suffix(size)
