"""App group records: a named list of app links."""

from __future__ import annotations

from ..collection import Collection
from ..schema import ArrayOf
from ..storage_layout import StorageLayout
from .app_link import AppLink


class AppGroup(Collection):
    """Groups are small and listed often, so they share one index blob."""

    collection_name = "appGroup"
    storage_layout = StorageLayout.SINGLE_FILE

    schema = {
        "schemaVersion": str,
        "identifier": str,
        "name": str,
        "apps": ArrayOf(AppLink),
        "description": str,
    }
