"""Collection records: schema-described entities persisted to a blob store.

Concrete types declare ``collection_name``, ``schema`` and optionally
``storage_layout``; the class machinery installs live schema properties,
registers the type, and routes ``get`` / ``list`` / ``save`` / ``delete``
through the declared storage topology.

Example::

    class Note(Collection):
        collection_name = "note"
        schema = {"identifier": str, "title": str}

    Collection.configure(store=InMemoryBlobStore(), session=Session())
    note = Note(title="hello")
    await note.save()
    same = await Note.get(note.identifier)
"""

from __future__ import annotations

import copy
import json
import time
from typing import Any, Callable, ClassVar, TypeVar

from . import conf
from .blob_store import BlobOptions, BlobStore, FsBlobStore
from .errors import AbstractMethodError, NotFoundError
from .identifier import join_identifier, random_identifier
from .log import store_log
from .schema import (
    SchemaProperty,
    check_schema,
    decode_value,
    encode_value,
    install_schema_properties,
    write_attr,
)
from .session import Session
from .storage import storage_for
from .storage_layout import StorageLayout

T = TypeVar("T", bound="Collection")

# Reserved attrs carried by every record regardless of schema.
CREATED_AT = "createdAt"
UPDATED_AT = "updatedAt"
SIGNING_KEY_ID = "signingKeyId"
INTERNAL_ID = "_id"


def _now_ms() -> int:
    return int(time.time() * 1000)


class Collection:
    """Base record shared by every collection type."""

    collection_name: ClassVar[str | None] = None
    schema: ClassVar[dict[str, Any]] = {"identifier": str}
    schema_version: ClassVar[str] = conf.DEFAULT_SCHEMA_VERSION
    storage_layout: ClassVar[StorageLayout] = StorageLayout.MULTI_FILE

    _store: ClassVar[BlobStore | None] = None
    _session: ClassVar[Session | None] = None

    identifier = SchemaProperty("identifier", str)

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        check_schema(cls.schema, cls.__name__)
        install_schema_properties(cls)
        if cls.__dict__.get("collection_name"):
            from .type_registry import registry

            registry.register(cls)

    def __init__(self, attrs: dict[str, Any] | None = None, **fields: Any):
        raw = {**(attrs or {}), **fields}
        self.attrs: dict[str, Any] = {}
        for key, value in raw.items():
            field_type = self.schema.get(key)
            if field_type is None:
                self.attrs[key] = copy.deepcopy(value)
            else:
                self.attrs[key] = decode_value(field_type, copy.deepcopy(value))
        if not self.attrs.get("identifier"):
            self.attrs["identifier"] = self.make_identifier(self.attrs)
        if "schemaVersion" in self.schema and "schemaVersion" not in self.attrs:
            self.attrs["schemaVersion"] = self.schema_version

    # -- Type metadata --

    @classmethod
    def get_collection_name(cls) -> str:
        if not cls.collection_name:
            raise AbstractMethodError(
                f"Required abstract member collection_name was not implemented on {cls.__name__}"
            )
        return cls.collection_name

    @classmethod
    def scope(cls) -> str:
        return f"{conf.COLLECTION_SCOPE_PREFIX}{cls.get_collection_name()}"

    # -- Identifier policy --

    @classmethod
    def make_identifier(cls, attrs: dict[str, Any]) -> str:
        """Identifier for a record constructed without one (random by default)."""
        return random_identifier()

    def on_attr_change(self, key: str, value: Any) -> None:
        """Called once per schema field write that changed the value."""

    # -- Reserved attrs --

    @property
    def created_at(self) -> int | None:
        return self.attrs.get(CREATED_AT)

    @property
    def updated_at(self) -> int | None:
        return self.attrs.get(UPDATED_AT)

    @property
    def signing_key_id(self) -> str | None:
        return self.attrs.get(SIGNING_KEY_ID)

    # -- Key-value access --

    def __getitem__(self, key: str) -> Any:
        if key in self.schema:
            return self.attrs.get(key)
        return self.attrs[key]

    def __setitem__(self, key: str, value: Any) -> None:
        if key in self.schema:
            write_attr(self, key, value)
        else:
            self.attrs[key] = copy.deepcopy(value)

    def __contains__(self, key: str) -> bool:
        return key in self.schema or key in self.attrs

    def keys(self) -> list[str]:
        """Schema field names followed by any extra attrs keys."""
        known = list(self.schema)
        return known + [k for k in self.attrs if k not in self.schema]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Collection):
            return NotImplemented
        return type(self) is type(other) and self.attrs == other.attrs

    __hash__ = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(identifier={self.attrs.get('identifier')!r})"

    # -- Serialization --

    def to_object(self) -> dict[str, Any]:
        """Serialize to a plain JSON-able dict (nested records inlined)."""
        result = {}
        for key, value in self.attrs.items():
            field_type = self.schema.get(key)
            result[key] = copy.deepcopy(value) if field_type is None else encode_value(field_type, value)
        return result

    @classmethod
    def from_object(cls: type[T], obj: dict[str, Any]) -> T:
        if not isinstance(obj, dict):
            raise TypeError(f"{cls.__name__}.from_object expects a dict, got {type(obj).__name__}")
        return cls(obj)

    def to_json(self) -> str:
        return json.dumps(self.to_object(), ensure_ascii=False)

    @classmethod
    def from_json(cls: type[T], data: str) -> T:
        return cls.from_object(json.loads(data))

    def serialize(self) -> str:
        """Wire form written to the blob store."""
        return self.to_json()

    @classmethod
    def from_data(cls: type[T], data: str) -> T:
        """Materialize a record from its stored wire form."""
        return cls.from_json(data)

    # -- Store wiring --

    @classmethod
    def configure(cls, store: BlobStore | None = None, session: Session | None = None) -> None:
        """Set the blob store and session used by every collection type."""
        Collection._store = store
        Collection._session = session

    @classmethod
    def _ensure_store(cls) -> BlobStore:
        if Collection._store is None:
            Collection._store = FsBlobStore(conf.STORE_HOME)
        return Collection._store

    @classmethod
    def _ensure_session(cls) -> Session:
        if Collection._session is None:
            Collection._session = Session.from_env()
        return Collection._session

    @classmethod
    def _blob_options(cls) -> BlobOptions:
        return cls._ensure_session().resolve(cls.scope()).blob_options()

    @classmethod
    def _storage(cls):
        return storage_for(cls, cls._ensure_store(), cls._blob_options())

    # -- CRUD --

    @classmethod
    async def get(cls: type[T], identifier: str) -> T:
        """Fetch one record. Raises NotFoundError if it is not stored."""
        return await cls._storage().get(identifier)

    @classmethod
    async def list(cls, callback: Callable[[str], Any]) -> int:
        """Call ``callback(identifier)`` for each stored record.

        The callback returns True to continue or False to stop; it may be a
        coroutine function. Returns the number of identifiers delivered.
        """
        return await cls._storage().list(callback)

    @classmethod
    async def get_all(cls: type[T], limit: int = 0) -> list[T]:
        identifiers: list[str] = []

        def _collect(identifier: str) -> bool:
            identifiers.append(identifier)
            return not (limit and len(identifiers) >= limit)

        storage = cls._storage()
        await storage.list(_collect)
        return [await storage.get(identifier) for identifier in identifiers]

    @classmethod
    async def delete_by_id(cls, identifier: str) -> None:
        """Delete one stored record. Raises NotFoundError if it is not stored."""
        await cls._storage().delete(identifier)
        store_log(f"Deleted {cls.get_collection_name()} {identifier}")

    async def save(self) -> str:
        storage = self._storage()
        stamps = {key: self.attrs[key] for key in (CREATED_AT, UPDATED_AT) if key in self.attrs}
        now = _now_ms()
        if not self.attrs.get(CREATED_AT):
            self.attrs[CREATED_AT] = now
        self.attrs[UPDATED_AT] = now
        try:
            identifier = await storage.save(self)
        except Exception:
            # Timestamps only stick once the write has landed.
            self.attrs.pop(CREATED_AT, None)
            self.attrs.pop(UPDATED_AT, None)
            self.attrs.update(stamps)
            raise
        store_log(f"Saved {self.get_collection_name()} {identifier}")
        await self._after_save(storage)
        return identifier

    async def _after_save(self, storage) -> None:
        """Hook run after a successful persist."""

    async def delete(self) -> None:
        await type(self).delete_by_id(self.identifier)


class DerivedIdentifierCollection(Collection):
    """Collection whose identifier is derived from identity fields.

    Writing an identity field recomputes ``identifier``. The previous
    identifier is kept until the next successful ``save``, which then deletes
    the stale blob stored under it.
    """

    identity_fields: ClassVar[tuple[str, ...]] = ()

    def __init__(self, attrs: dict[str, Any] | None = None, **fields: Any):
        self._previous_identifier: str | None = None
        self._rename_pending = False
        super().__init__(attrs, **fields)

    @classmethod
    def derive_identifier(cls, attrs: dict[str, Any]) -> str:
        return join_identifier(*(attrs.get(f) for f in cls.identity_fields))

    @classmethod
    def make_identifier(cls, attrs: dict[str, Any]) -> str:
        return cls.derive_identifier(attrs) or random_identifier()

    @property
    def previous_identifier(self) -> str | None:
        return self._previous_identifier

    @property
    def rename_pending(self) -> bool:
        return self._rename_pending

    def on_attr_change(self, key: str, value: Any) -> None:
        if key not in self.identity_fields:
            return
        current = self.attrs["identifier"]
        derived = self.derive_identifier(self.attrs) or current
        if derived == current:
            return
        if not self._rename_pending:
            self._previous_identifier = current
        self.attrs["identifier"] = derived
        self._rename_pending = True
        store_log(f"Renamed {self.get_collection_name()} {current} -> {derived}")

    async def _retire_previous(self, storage) -> bool:
        """Delete the blob under the previous identifier.

        Returns True when a stale blob was deleted. A missing blob clears the
        pending rename too; any other failure leaves it set for a retry.
        """
        previous = self._previous_identifier
        if previous is None or previous == self.identifier:
            self._clear_rename()
            return False
        try:
            await storage.delete(previous)
        except NotFoundError:
            self._clear_rename()
            return False
        except Exception as e:
            store_log(f"Rename cleanup failed for {self.get_collection_name()} {previous}: {e}")
            return False
        self._clear_rename()
        return True

    def _clear_rename(self) -> None:
        self._previous_identifier = None
        self._rename_pending = False

    async def _after_save(self, storage) -> None:
        if self._rename_pending:
            await self._retire_previous(storage)

    async def delete(self) -> None:
        storage = self._storage()
        retired = await self._retire_previous(storage) if self._rename_pending else False
        try:
            await storage.delete(self.identifier)
        except NotFoundError:
            if not retired:
                raise
        store_log(f"Deleted {self.get_collection_name()} {self.identifier}")
