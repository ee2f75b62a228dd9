"""Session: resolves a collection scope to its storage location and key."""

from __future__ import annotations

import os

from pydantic import BaseModel, ConfigDict, Field

from .blob_store import BlobOptions
from .encryption import derive_scope_key


class StorageConfig(BaseModel):
    """Where a scope's blobs live and how they are encrypted."""

    model_config = ConfigDict(frozen=True)

    location: str
    encryption_key: str | None = Field(default=None, repr=False)

    def blob_options(self) -> BlobOptions:
        return BlobOptions(location=self.location, encryption_key=self.encryption_key)


class Session(BaseModel):
    """Signed-in identity plus the app secret used for per-scope keys."""

    model_config = ConfigDict(validate_assignment=True)

    identity: str = Field(default="anonymous", min_length=1)
    app_domain: str = Field(default="localhost")
    app_private_key: str | None = Field(default=None, repr=False)
    encrypt: bool = Field(default=True)

    def resolve(self, scope: str) -> StorageConfig:
        """Return the storage config for ``scope`` (e.g. ``collection.contact``)."""
        key = None
        if self.encrypt and self.app_private_key:
            key = derive_scope_key(f"{self.app_domain}:{self.app_private_key}", scope)
        return StorageConfig(location=f"{self.identity}/{scope}", encryption_key=key)

    @classmethod
    def from_env(cls) -> Session:
        """Build a session from COLLECTION_STORE_* environment variables."""
        encrypt = (os.environ.get("COLLECTION_STORE_ENCRYPT") or "1").strip().lower()
        return cls(
            identity=(os.environ.get("COLLECTION_STORE_IDENTITY") or "anonymous").strip(),
            app_domain=(os.environ.get("COLLECTION_STORE_APP_DOMAIN") or "localhost").strip(),
            app_private_key=(os.environ.get("COLLECTION_STORE_APP_KEY") or "").strip() or None,
            encrypt=encrypt not in ("0", "false", "no"),
        )
