import logging
import sys

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level=logging.INFO, log_file=None):
    """Configure logging for the s3stream package.

    Args:
        level: The logging level (default: logging.INFO)
        log_file: Optional path to a log file
    """
    # stderr, stdout may be carrying object data
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format=_FORMAT,
        handlers=handlers,
        force=True,  # Override any existing configuration
    )
