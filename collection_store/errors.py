"""Error taxonomy for the collection store."""


class CollectionStoreError(Exception):
    """Base exception for the collection store."""


class NotFoundError(CollectionStoreError, LookupError):
    """Raised when an identifier has no persisted representation."""


class MalformedIndexError(CollectionStoreError, ValueError):
    """Raised when a single-file index blob is not a JSON object."""


class InvalidIdentifierError(CollectionStoreError, ValueError):
    """Raised when an identifier cannot be used as a storage key."""


class DecryptionError(CollectionStoreError):
    """Raised when stored content cannot be decrypted with the given key."""


class AbstractMethodError(CollectionStoreError, NotImplementedError):
    """Raised when a collection type does not provide a required member."""
