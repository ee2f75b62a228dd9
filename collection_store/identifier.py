"""Identifier helpers: random tokens, derived names, and validation."""

from __future__ import annotations

import uuid

from .errors import InvalidIdentifierError


def random_identifier() -> str:
    """Return a fresh random identifier."""
    return str(uuid.uuid4())


def join_identifier(*parts: str | None, separator: str = " ") -> str:
    """Build a canonical identifier from identity fields.

    Missing parts count as empty strings; the result is trimmed and made
    safe to use as a single storage path segment.

    Example:
        join_identifier("Ann", "Lee")  # "Ann Lee"
        join_identifier("Ann", None)   # "Ann"
    """
    joined = separator.join(str(p) if p is not None else "" for p in parts)
    return joined.strip().replace("/", "-")


def validate_identifier(value: object) -> str:
    """Return ``value`` if it can be used as a storage key.

    Raises:
        InvalidIdentifierError: For non-strings, empty strings, ``.``/``..``,
            or values containing ``/``.
    """
    if not isinstance(value, str) or not value:
        raise InvalidIdentifierError(f"Invalid identifier: {value!r}")
    if value in (".", "..") or "/" in value:
        raise InvalidIdentifierError(f"Identifier is not a single path segment: {value!r}")
    return value
