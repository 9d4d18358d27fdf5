from s3stream.types import ByteRange


def count_ranges(length: int, part_size: int) -> int:
    if length < 0:
        raise ValueError(f"Invalid length: {length}")
    if part_size <= 0:
        raise ValueError(f"Invalid part size: {part_size}")
    out = length // part_size
    if length % part_size:
        return out + 1
    return out


def plan_ranges(length: int, part_size: int) -> list[ByteRange]:
    """
    Split [0, length) into consecutive inclusive byte ranges of part_size.

    The last range is shorter when length is not a multiple of part_size.
    An empty object has no ranges.
    """
    num_ranges = count_ranges(length, part_size)
    out: list[ByteRange] = []
    for i in range(num_ranges):
        start = i * part_size
        end = min(start + part_size, length) - 1
        out.append(ByteRange(start=start, end=end))
    return out
