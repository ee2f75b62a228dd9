"""Schema-described records persisted to a per-identity blob store."""

from .blob_store import BlobOptions, BlobStore, FsBlobStore, InMemoryBlobStore
from .collection import Collection, DerivedIdentifierCollection
from .errors import (
    AbstractMethodError,
    CollectionStoreError,
    DecryptionError,
    InvalidIdentifierError,
    MalformedIndexError,
    NotFoundError,
)
from .identifier import join_identifier, random_identifier, validate_identifier
from .schema import ArrayOf, SchemaProperty
from .session import Session, StorageConfig
from .storage import MultiFileStorage, SingleFileStorage
from .storage_layout import StorageLayout
from .type_registry import CollectionType, registry as type_registry

__all__ = [
    "AbstractMethodError",
    "ArrayOf",
    "BlobOptions",
    "BlobStore",
    "Collection",
    "CollectionStoreError",
    "CollectionType",
    "DecryptionError",
    "DerivedIdentifierCollection",
    "FsBlobStore",
    "InMemoryBlobStore",
    "InvalidIdentifierError",
    "MalformedIndexError",
    "MultiFileStorage",
    "NotFoundError",
    "SchemaProperty",
    "Session",
    "SingleFileStorage",
    "StorageConfig",
    "StorageLayout",
    "join_identifier",
    "random_identifier",
    "type_registry",
    "validate_identifier",
]
