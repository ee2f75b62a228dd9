"""Git repository records with an embedded owner contact."""

from __future__ import annotations

from ..collection import Collection
from .contact import Contact


class GitRepository(Collection):
    collection_name = "gitRepository"

    schema = {
        "schemaVersion": str,
        "identifier": str,
        "name": str,
        "owner": Contact,
        "url": str,
        "description": str,
        "languages": list,
    }
