"""Collection store - central path and storage configuration."""

import os
from pathlib import Path

USER_HOME = Path.home()
FLOW_HOME = USER_HOME / ".flow"
STORE_HOME = Path(os.environ.get("COLLECTION_STORE_HOME", FLOW_HOME / "collection_store"))

LOG_FILE = STORE_HOME / "store.log"

# Storage path convention: <COLLECTION_PREFIX>/<identifier>, or
# <COLLECTION_PREFIX>/<INDEX_FILE_NAME> for single-file collections.
COLLECTION_PREFIX = "collection"
INDEX_FILE_NAME = "index.json"

# Scope used to resolve storage location and keys: collection.<name>
COLLECTION_SCOPE_PREFIX = "collection."

DEFAULT_SCHEMA_VERSION = "1.0"

DEFAULT_PAGE_SIZE = int(os.environ.get("COLLECTION_STORE_PAGE_SIZE", "100"))


def index_path() -> str:
    """Return the blob path of a single-file collection index."""
    return f"{COLLECTION_PREFIX}/{INDEX_FILE_NAME}"


def record_path(identifier: str) -> str:
    """Return the blob path of a multi-file record."""
    return f"{COLLECTION_PREFIX}/{identifier}"
