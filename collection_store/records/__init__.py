"""Concrete collection types.

Each module declares one ``Collection`` subclass: its collection name,
schema and storage layout. Importing this package registers every type in
``collection_store.type_registry.registry``.
"""

from .app_group import AppGroup
from .app_link import AppLink
from .contact import Contact
from .git_repository import GitRepository

__all__ = ["AppGroup", "AppLink", "Contact", "GitRepository"]
