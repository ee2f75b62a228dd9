"""Storage layout types for collection records."""

from enum import Enum


class StorageLayout(str, Enum):
    """How the records of one collection type are persisted."""

    MULTI_FILE = "multi-file"    # one collection/<identifier> blob per record
    SINGLE_FILE = "single-file"  # every record inside collection/index.json
