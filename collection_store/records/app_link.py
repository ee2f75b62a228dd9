"""App link records."""

from __future__ import annotations

from ..collection import Collection
from ..storage_layout import StorageLayout


class AppLink(Collection):
    collection_name = "appLink"
    storage_layout = StorageLayout.SINGLE_FILE

    schema = {
        "schemaVersion": str,
        "identifier": str,  # auth domain
        "name": str,
        "url": str,
        "description": str,
    }
