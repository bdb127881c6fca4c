"""
Test utilities for the OAK toolkit.
"""

from .document_helpers import (
    EXAMPLE_FILES,
    FIXTURES_DIR,
    example_document,
    load_fixture,
    read_json,
    write_json,
)

__all__ = [
    "EXAMPLE_FILES",
    "FIXTURES_DIR",
    "example_document",
    "load_fixture",
    "read_json",
    "write_json",
]
