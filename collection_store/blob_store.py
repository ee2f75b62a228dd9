"""Blob store contract and reference stores.

A blob store holds named text blobs inside a per-identity, per-scope
namespace (``BlobOptions.location``). Stores are async; each call may be a
network round trip in a real deployment.
"""

from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Protocol

from . import conf
from .encryption import decrypt_content, encrypt_content
from .errors import NotFoundError

NameCallback = Callable[[str], Any]


@dataclass(frozen=True)
class BlobOptions:
    """Per-call storage options resolved from the session."""

    location: str = ""
    encryption_key: str | None = None


class BlobStore(Protocol):
    """Protocol for remote blob storage backends."""

    async def fetch(self, path: str, opts: BlobOptions) -> str | None:
        """Return the blob content, or None when the blob does not exist."""
        ...

    async def put(self, path: str, content: str, opts: BlobOptions) -> None:
        """Create or replace a blob."""
        ...

    async def remove(self, path: str, opts: BlobOptions) -> None:
        """Delete a blob. Raises NotFoundError when it does not exist."""
        ...

    async def list_names(self, prefix: str, callback: NameCallback, opts: BlobOptions) -> int:
        """Call ``callback(name)`` per blob name until it returns False.

        Returns the number of names passed to the callback.
        """
        ...


async def call_maybe_async(callback: Callable[[str], Any], value: str) -> bool:
    """Invoke a sync or async callback and return its result as a bool."""
    result = callback(value)
    if inspect.isawaitable(result):
        result = await result
    return bool(result)


def _encode(content: str, opts: BlobOptions) -> str:
    if opts.encryption_key:
        return encrypt_content(opts.encryption_key, content)
    return content


def _decode(content: str, opts: BlobOptions) -> str:
    if opts.encryption_key:
        return decrypt_content(opts.encryption_key, content)
    return content


class _PagedListing:
    """Cursor-driven listing shared by the reference stores."""

    page_size: int
    page_fetches: int

    async def _list_page(self, prefix: str, cursor: int, opts: BlobOptions) -> tuple[list[str], int | None]:
        raise NotImplementedError

    async def list_names(self, prefix: str, callback: NameCallback, opts: BlobOptions) -> int:
        count = 0
        cursor: int | None = 0
        while cursor is not None:
            names, cursor = await self._list_page(prefix, cursor, opts)
            self.page_fetches += 1
            for name in names:
                count += 1
                if not await call_maybe_async(callback, name):
                    return count
        return count


@dataclass
class InMemoryBlobStore(_PagedListing):
    """Dict-backed store keyed by (location, path).

    Every operation yields to the event loop first, like a network call, so
    concurrent callers interleave the way they would against a remote store.
    """

    page_size: int = conf.DEFAULT_PAGE_SIZE
    blobs: dict[tuple[str, str], str] = field(default_factory=dict)
    page_fetches: int = 0

    async def fetch(self, path: str, opts: BlobOptions) -> str | None:
        await asyncio.sleep(0)
        content = self.blobs.get((opts.location, path))
        if content is None:
            return None
        return _decode(content, opts)

    async def put(self, path: str, content: str, opts: BlobOptions) -> None:
        await asyncio.sleep(0)
        self.blobs[(opts.location, path)] = _encode(content, opts)

    async def remove(self, path: str, opts: BlobOptions) -> None:
        await asyncio.sleep(0)
        try:
            del self.blobs[(opts.location, path)]
        except KeyError:
            raise NotFoundError(f"No blob at {path!r}") from None

    async def _list_page(self, prefix: str, cursor: int, opts: BlobOptions) -> tuple[list[str], int | None]:
        await asyncio.sleep(0)
        names = [p for (loc, p) in self.blobs if loc == opts.location and p.startswith(prefix)]
        page = names[cursor:cursor + self.page_size]
        next_cursor = cursor + self.page_size
        return page, next_cursor if next_cursor < len(names) else None

    def raw(self, path: str, location: str = "") -> str | None:
        """Return the stored (possibly encrypted) content without decoding."""
        return self.blobs.get((location, path))


class FsBlobStore(_PagedListing):
    """Filesystem store: blobs live at ``root/<location>/<path>``."""

    def __init__(self, root: Path | str | None = None, page_size: int = conf.DEFAULT_PAGE_SIZE) -> None:
        self.root = Path(root or conf.STORE_HOME).resolve()
        self.page_size = page_size
        self.page_fetches = 0

    def _blob_path(self, path: str, opts: BlobOptions) -> Path:
        target = (self.root / opts.location / path).resolve()
        if not target.is_relative_to(self.root):
            raise ValueError(f"Blob path escapes store root: {path!r}")
        return target

    def _location_dir(self, opts: BlobOptions) -> Path:
        return self._blob_path("", opts)

    async def fetch(self, path: str, opts: BlobOptions) -> str | None:
        target = self._blob_path(path, opts)

        def _read() -> str | None:
            if not target.is_file():
                return None
            return target.read_text(encoding="utf-8")

        content = await asyncio.to_thread(_read)
        if content is None:
            return None
        return _decode(content, opts)

    async def put(self, path: str, content: str, opts: BlobOptions) -> None:
        target = self._blob_path(path, opts)
        data = _encode(content, opts)

        def _write() -> None:
            target.parent.mkdir(parents=True, exist_ok=True)
            tmp = target.with_name(target.name + ".tmp")
            tmp.write_text(data, encoding="utf-8")
            tmp.replace(target)

        await asyncio.to_thread(_write)

    async def remove(self, path: str, opts: BlobOptions) -> None:
        target = self._blob_path(path, opts)
        try:
            await asyncio.to_thread(target.unlink)
        except FileNotFoundError:
            raise NotFoundError(f"No blob at {path!r}") from None

    async def _list_page(self, prefix: str, cursor: int, opts: BlobOptions) -> tuple[list[str], int | None]:
        base = self._location_dir(opts)

        def _scan() -> list[str]:
            if not base.is_dir():
                return []
            names = []
            for fp in base.rglob("*"):
                if not fp.is_file() or fp.name.endswith(".tmp"):
                    continue
                name = fp.relative_to(base).as_posix()
                if name.startswith(prefix):
                    names.append(name)
            return sorted(names)

        names = await asyncio.to_thread(_scan)
        page = names[cursor:cursor + self.page_size]
        next_cursor = cursor + self.page_size
        return page, next_cursor if next_cursor < len(names) else None
