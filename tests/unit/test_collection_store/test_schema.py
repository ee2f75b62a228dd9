"""Tests for schema properties and change notification."""

import pytest

from collection_store import ArrayOf, Collection, SchemaProperty
from collection_store.schema import check_schema, decode_value, encode_value, is_record_type, write_attr
from collection_store.records import AppGroup, AppLink, Contact, GitRepository


# ---------------------------------------------------------------------------
# Test records
# ---------------------------------------------------------------------------

class Recorder(Collection):
    """Collects every change notification it receives."""

    collection_name = "recorder"
    schema = {"identifier": str, "title": str, "count": int, "tags": list}

    def __init__(self, attrs=None, **fields):
        self.changes = []
        super().__init__(attrs, **fields)

    def on_attr_change(self, key, value):
        self.changes.append((key, value))


# ---------------------------------------------------------------------------
# Live properties
# ---------------------------------------------------------------------------

class TestSchemaProperties:
    def test_properties_installed_per_schema_key(self):
        for key in Recorder.schema:
            assert isinstance(Recorder.__dict__[key], SchemaProperty)

    def test_read_returns_attrs_value(self):
        r = Recorder(title="hello")
        assert r.title == "hello"
        assert r.attrs["title"] == "hello"

    def test_read_absent_returns_none(self):
        r = Recorder()
        assert r.count is None
        assert "count" not in r.attrs

    def test_write_updates_attrs(self):
        r = Recorder()
        r.title = "new"
        assert r.attrs["title"] == "new"

    def test_delete_property_raises(self):
        r = Recorder(title="x")
        with pytest.raises(AttributeError):
            del r.title


class TestChangeNotification:
    def test_changed_write_fires_once(self):
        r = Recorder(title="a")
        r.title = "b"
        assert r.changes == [("title", "b")]

    def test_unchanged_write_does_not_fire(self):
        r = Recorder(title="a")
        r.title = "a"
        assert r.changes == []

    def test_none_write_on_absent_field_does_not_fire(self):
        r = Recorder()
        r.count = None
        assert r.changes == []
        assert "count" not in r.attrs

    def test_each_distinct_write_fires(self):
        r = Recorder()
        r.count = 1
        r.count = 1
        r.count = 2
        assert r.changes == [("count", 1), ("count", 2)]

    def test_equal_list_write_does_not_fire(self):
        r = Recorder(tags=["a", "b"])
        r.tags = ["a", "b"]
        assert r.changes == []

    def test_construction_does_not_fire(self):
        r = Recorder(title="a", count=3)
        assert r.changes == []

    def test_equal_value_of_other_type_fires(self):
        r = Recorder(count=1)
        r.count = True
        assert r.changes == [("count", True)]
        assert r.count is True

    def test_list_item_type_change_fires(self):
        r = Recorder(tags=[1])
        r.tags = [True]
        assert r.changes == [("tags", [True])]
        assert r.tags[0] is True

    def test_default_hook_is_noop(self):
        link = AppLink(name="x")
        link.name = "y"
        assert link.name == "y"


# ---------------------------------------------------------------------------
# Mapping-style access
# ---------------------------------------------------------------------------

class TestKeyValueAccess:
    def test_setitem_schema_key_notifies(self):
        r = Recorder()
        r["title"] = "via item"
        assert r.title == "via item"
        assert r.changes == [("title", "via item")]

    def test_setitem_unchanged_does_not_notify(self):
        r = Recorder(title="same")
        r["title"] = "same"
        assert r.changes == []

    def test_setitem_extra_key_does_not_notify(self):
        r = Recorder()
        r["signingKeyId"] = "key-1"
        assert r.attrs["signingKeyId"] == "key-1"
        assert r.signing_key_id == "key-1"
        assert r.changes == []

    def test_getitem_absent_schema_key_is_none(self):
        assert Recorder()["title"] is None

    def test_getitem_missing_extra_raises(self):
        with pytest.raises(KeyError):
            Recorder()["nonexistent"]

    def test_contains(self):
        r = Recorder(extra_tag=1)
        assert "title" in r
        assert "extra_tag" in r
        assert "missing" not in r

    def test_keys_lists_schema_then_extras(self):
        r = Recorder({"_id": "internal"})
        keys = r.keys()
        assert keys[:4] == ["identifier", "title", "count", "tags"]
        assert "_id" in keys


# ---------------------------------------------------------------------------
# Schema declaration checks
# ---------------------------------------------------------------------------

class TestSchemaDeclaration:
    def test_missing_identifier_rejected(self):
        with pytest.raises(TypeError, match="identifier"):
            class NoIdentifier(Collection):
                schema = {"title": str}

    def test_unsupported_type_rejected(self):
        with pytest.raises(TypeError, match="unsupported"):
            class BadType(Collection):
                schema = {"identifier": str, "when": object}

    def test_shadowing_attribute_rejected(self):
        with pytest.raises(TypeError, match="shadows"):
            class Shadowing(Collection):
                schema = {"identifier": str, "save": str}

    def test_check_schema_accepts_nested_and_arrays(self):
        check_schema({"identifier": str, "owner": Contact, "apps": ArrayOf(AppLink)}, "Ok")

    def test_is_record_type(self):
        assert is_record_type(Contact)
        assert not is_record_type(str)
        assert not is_record_type(list)


# ---------------------------------------------------------------------------
# Value conversion
# ---------------------------------------------------------------------------

class TestValueConversion:
    def test_encode_nested_record(self):
        c = Contact(identifier="c1", name="Ann")
        assert encode_value(Contact, c) == c.to_object()

    def test_decode_nested_record(self):
        c = decode_value(Contact, {"identifier": "c1", "name": "Ann"})
        assert isinstance(c, Contact)
        assert c.identifier == "c1"

    def test_array_of_records(self):
        links = [AppLink(identifier="a.com"), AppLink(identifier="b.com")]
        encoded = encode_value(ArrayOf(AppLink), links)
        assert encoded == [link.to_object() for link in links]
        assert decode_value(ArrayOf(AppLink), encoded) == links

    def test_primitives_pass_through(self):
        assert encode_value(str, "x") == "x"
        assert decode_value(list, [1, 2]) == [1, 2]
        assert decode_value(Contact, None) is None


# ---------------------------------------------------------------------------
# Ownership of written values
# ---------------------------------------------------------------------------

class TestWriteOwnership:
    def test_property_write_copies_value(self):
        tags = ["py"]
        r = Recorder()
        r.tags = tags
        tags.append("go")
        assert r.tags == ["py"]
        assert r.changes == [("tags", ["py"])]

    def test_setitem_schema_key_copies_value(self):
        tags = ["py"]
        r = Recorder()
        r["tags"] = tags
        tags.append("go")
        assert r["tags"] == ["py"]

    def test_setitem_extra_key_copies_value(self):
        meta = {"source": "import"}
        r = Recorder()
        r["meta"] = meta
        meta["source"] = "changed"
        assert r["meta"] == {"source": "import"}

    def test_nested_record_write_is_not_shared(self):
        owner = Contact(firstName="Ann")
        repo = GitRepository(identifier="r")
        repo.owner = owner
        owner.email = "ann@example.com"
        assert repo.owner.email is None


# ---------------------------------------------------------------------------
# Nested values written through properties
# ---------------------------------------------------------------------------

class TestNestedWrites:
    def test_dict_written_to_record_field_becomes_record(self):
        repo = GitRepository(identifier="r")
        repo.owner = {"firstName": "Ann"}
        assert isinstance(repo.owner, Contact)
        assert repo.owner.identifier == "Ann"

    def test_record_field_write_round_trips(self):
        repo = GitRepository(identifier="r")
        repo.owner = {"firstName": "Ann", "lastName": "Lee"}
        assert GitRepository.from_data(repo.serialize()).attrs == repo.attrs

    def test_array_of_records_write_round_trips(self):
        group = AppGroup(identifier="g")
        group.apps = [{"identifier": "a.example", "name": "A"}]
        assert isinstance(group.apps[0], AppLink)
        assert AppGroup.from_data(group.serialize()).attrs == group.attrs

    def test_setitem_on_record_field_round_trips(self):
        group = AppGroup(identifier="g")
        group["apps"] = [AppLink(identifier="a.example"), {"identifier": "b.example"}]
        assert [type(app) for app in group.apps] == [AppLink, AppLink]
        assert AppGroup.from_data(group.serialize()).attrs == group.attrs

    def test_rewriting_equal_nested_value_is_noop(self):
        repo = GitRepository(identifier="r", owner={"firstName": "Ann"})
        assert write_attr(repo, "owner", {"firstName": "Ann"}) is False
