"""Storage topologies: how a collection's records map onto blobs.

* ``MultiFileStorage``  – one ``collection/<identifier>`` blob per record.
* ``SingleFileStorage`` – every record in one ``collection/index.json`` blob,
  keyed by identifier.

Both expose the same async contract: ``get``, ``list``, ``save``, ``delete``.
``SingleFileStorage.save`` and ``delete`` are read-modify-write without a
concurrency token, so two interleaved writers can lose one update.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Callable

from . import conf
from .blob_store import BlobOptions, BlobStore, call_maybe_async
from .errors import MalformedIndexError, NotFoundError
from .identifier import validate_identifier
from .log import store_log
from .storage_layout import StorageLayout

if TYPE_CHECKING:
    from .collection import Collection

ListCallback = Callable[[str], Any]


class MultiFileStorage:
    """One blob per record under the collection prefix."""

    def __init__(self, record_class: type[Collection], store: BlobStore, opts: BlobOptions):
        self.record_class = record_class
        self.store = store
        self.opts = opts

    async def get(self, identifier: str) -> Collection:
        path = conf.record_path(validate_identifier(identifier))
        data = await self.store.fetch(path, self.opts)
        if data is None:
            raise NotFoundError(f"{self.record_class.get_collection_name()} {identifier!r} not found")
        return self.record_class.from_data(data)

    async def list(self, callback: ListCallback) -> int:
        """Call ``callback(identifier)`` per stored record until it returns False.

        Names outside ``collection/`` are skipped without reaching the callback.
        Returns the number of identifiers delivered.
        """
        prefix = f"{conf.COLLECTION_PREFIX}/"
        delivered = 0

        async def _on_name(name: str) -> bool:
            nonlocal delivered
            if not name.startswith(prefix) or len(name) == len(prefix):
                return True
            delivered += 1
            return await call_maybe_async(callback, name[len(prefix):])

        await self.store.list_names(conf.COLLECTION_PREFIX, _on_name, self.opts)
        return delivered

    async def save(self, record: Collection) -> str:
        identifier = validate_identifier(record.identifier)
        await self.store.put(conf.record_path(identifier), record.serialize(), self.opts)
        return identifier

    async def delete(self, identifier: str) -> None:
        await self.store.remove(conf.record_path(validate_identifier(identifier)), self.opts)


class SingleFileStorage:
    """All records of a collection in one shared index blob."""

    def __init__(self, record_class: type[Collection], store: BlobStore, opts: BlobOptions):
        self.record_class = record_class
        self.store = store
        self.opts = opts

    @staticmethod
    def _parse_index(data: str) -> dict[str, Any]:
        try:
            mapping = json.loads(data)
        except json.JSONDecodeError as e:
            raise MalformedIndexError(f"Index blob is not valid JSON: {e}") from e
        if not isinstance(mapping, dict):
            raise MalformedIndexError(f"Index blob is a {type(mapping).__name__}, expected an object")
        return mapping

    async def _read_index(self) -> dict[str, Any] | None:
        data = await self.store.fetch(conf.index_path(), self.opts)
        if data is None:
            return None
        return self._parse_index(data)

    async def _write_index(self, mapping: dict[str, Any]) -> None:
        await self.store.put(conf.index_path(), json.dumps(mapping, ensure_ascii=False), self.opts)

    async def get(self, identifier: str) -> Collection:
        mapping = await self._read_index()
        if mapping is None or identifier not in mapping:
            raise NotFoundError(f"{self.record_class.get_collection_name()} {identifier!r} not found")
        entry = mapping[identifier]
        if not isinstance(entry, dict):
            raise MalformedIndexError(
                f"Index entry {identifier!r} is a {type(entry).__name__}, expected an object"
            )
        return self.record_class.from_object(entry)

    async def list(self, callback: ListCallback) -> int:
        """Call ``callback(identifier)`` per index key until it returns False.

        A missing or malformed index lists as empty.
        """
        try:
            mapping = await self._read_index()
        except MalformedIndexError as e:
            store_log(f"Listing {self.record_class.get_collection_name()}: {e}; treating as empty")
            return 0
        if not mapping:
            return 0
        delivered = 0
        for identifier in list(mapping):
            delivered += 1
            if not await call_maybe_async(callback, identifier):
                break
        return delivered

    async def save(self, record: Collection) -> str:
        identifier = validate_identifier(record.identifier)
        mapping = await self._read_index()
        if mapping is None:
            mapping = {}
        mapping[identifier] = record.to_object()
        await self._write_index(mapping)
        return identifier

    async def delete(self, identifier: str) -> None:
        mapping = await self._read_index()
        if mapping is None or identifier not in mapping:
            raise NotFoundError(f"{self.record_class.get_collection_name()} {identifier!r}: item does not exist")
        del mapping[identifier]
        await self._write_index(mapping)


STORAGES: dict[StorageLayout, type] = {
    StorageLayout.MULTI_FILE: MultiFileStorage,
    StorageLayout.SINGLE_FILE: SingleFileStorage,
}


def storage_for(record_class: type[Collection], store: BlobStore, opts: BlobOptions):
    """Build the storage strategy declared by ``record_class.storage_layout``."""
    return STORAGES[StorageLayout(record_class.storage_layout)](record_class, store, opts)
