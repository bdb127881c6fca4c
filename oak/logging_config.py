"""Process-wide logging setup for the OAK command line tools."""

import logging
import sys
from typing import Optional, TextIO


LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO", stream: Optional[TextIO] = None):
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
        stream=stream or sys.stderr,  # stdout carries validation and build output
        force=True,  # Overwrite any existing logging config
    )
    # urllib3 connection chatter only when debugging document fetches
    logging.getLogger("urllib3").setLevel(logging.DEBUG if numeric_level <= logging.DEBUG else logging.WARNING)
