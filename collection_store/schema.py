"""Schema-driven attribute access for collection records.

A schema maps field names to declared types. When a ``Collection`` subclass
is created, one ``SchemaProperty`` per schema key is installed on the class.
Reads come from the record's ``attrs`` dict; writes that change the value
update ``attrs`` and call ``record.on_attr_change(key, value)``.

Field types:

* a primitive type: ``str``, ``int``, ``float``, ``bool``, ``list``, ``dict``
* ``ArrayOf(item_type)``: a list of primitives or of records
* a ``Collection`` subclass: a nested record, stored by value
"""

from __future__ import annotations

import copy
from typing import Any

_PRIMITIVES = (str, int, float, bool, list, dict)


class ArrayOf:
    """Declared type for a list whose items share one field type."""

    def __init__(self, item_type: Any):
        self.item_type = item_type

    def __repr__(self) -> str:
        return f"ArrayOf({getattr(self.item_type, '__name__', self.item_type)!s})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ArrayOf) and other.item_type == self.item_type

    def __hash__(self) -> int:
        return hash(("ArrayOf", self.item_type))


def is_record_type(field_type: Any) -> bool:
    """True if ``field_type`` is a record class (has from_object/to_object)."""
    return (
        isinstance(field_type, type)
        and field_type not in _PRIMITIVES
        and hasattr(field_type, "from_object")
        and hasattr(field_type, "to_object")
    )


def check_schema(schema: dict[str, Any], owner: str) -> None:
    """Validate a schema declaration at class creation time."""
    if schema.get("identifier") is not str:
        raise TypeError(f"{owner}.schema must declare 'identifier': str")
    for key, field_type in schema.items():
        if isinstance(field_type, ArrayOf):
            field_type = field_type.item_type
        if field_type in _PRIMITIVES or is_record_type(field_type):
            continue
        raise TypeError(f"{owner}.schema[{key!r}] has unsupported type {field_type!r}")


# -- Value conversion --

def encode_value(field_type: Any, value: Any) -> Any:
    """Convert an in-memory value to its JSON-able wire form."""
    if value is None:
        return None
    if isinstance(field_type, ArrayOf) and isinstance(value, list):
        return [encode_value(field_type.item_type, v) for v in value]
    if is_record_type(field_type) and hasattr(value, "to_object"):
        return value.to_object()
    return value


def decode_value(field_type: Any, value: Any) -> Any:
    """Convert a wire value back to its in-memory form (records rebuilt)."""
    if value is None:
        return None
    if isinstance(field_type, ArrayOf) and isinstance(value, list):
        return [decode_value(field_type.item_type, v) for v in value]
    if is_record_type(field_type) and isinstance(value, dict):
        return field_type.from_object(value)
    return value


# -- Live properties --

class SchemaProperty:
    """Data descriptor exposing one schema field of a record."""

    def __init__(self, key: str, field_type: Any):
        self.key = key
        self.field_type = field_type
        self.__doc__ = f"Schema field {key!r} ({field_type!r})"

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        return instance.attrs.get(self.key)

    def __set__(self, instance, value) -> None:
        write_attr(instance, self.key, value)

    def __delete__(self, instance) -> None:
        raise AttributeError(f"Schema field {self.key!r} cannot be deleted")


def same_value(old: Any, new: Any) -> bool:
    """Equality that also requires matching types, so ``True`` differs from ``1``."""
    if type(old) is not type(new):
        return False
    if isinstance(old, (list, tuple)):
        return len(old) == len(new) and all(same_value(a, b) for a, b in zip(old, new))
    if isinstance(old, dict):
        return old.keys() == new.keys() and all(same_value(old[k], new[k]) for k in old)
    if hasattr(old, "attrs") and hasattr(old, "to_object"):
        return same_value(old.attrs, new.attrs)
    return old == new


def write_attr(record, key: str, value: Any) -> bool:
    """Write ``value`` into ``record.attrs[key]`` and notify on change.

    The value is copied and decoded the same way the constructor does it, so
    the record never shares state with the caller. Returns True if the value
    changed (and the hook fired).
    """
    value = decode_value(record.schema[key], copy.deepcopy(value))
    if same_value(record.attrs.get(key), value):
        return False
    record.attrs[key] = value
    record.on_attr_change(key, value)
    return True


def install_schema_properties(cls) -> None:
    """Install one ``SchemaProperty`` per key of ``cls.schema``."""
    for key, field_type in cls.schema.items():
        existing = getattr(cls, key, None)
        if existing is not None and not isinstance(existing, SchemaProperty):
            raise TypeError(f"{cls.__name__}.schema key {key!r} shadows an existing attribute")
        setattr(cls, key, SchemaProperty(key, field_type))
