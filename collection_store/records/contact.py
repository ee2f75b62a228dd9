"""Contact records, identified by first and last name."""

from __future__ import annotations

from ..collection import DerivedIdentifierCollection


class Contact(DerivedIdentifierCollection):
    """An address-book entry stored as one blob per contact."""

    collection_name = "contact"
    identity_fields = ("firstName", "lastName")

    schema = {
        "schemaVersion": str,
        "identifier": str,
        "name": str,
        "firstName": str,
        "lastName": str,
        "blockstackID": str,
        "email": str,
        "website": str,
        "address": str,
        "telephone": str,
        "organization": str,
    }
