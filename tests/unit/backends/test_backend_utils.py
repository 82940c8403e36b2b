##############################################################################
# Copyright (c) monty-adapter project developers.
# Released under the MIT license. No copyright assignment is required to
# contribute to monty-adapter.
##############################################################################

"""
Tests for the `backends/utils.py` module.
"""

import re
from datetime import datetime

import pytest
from pytest_mock import MockerFixture

from monty_adapter.backends.utils import cast_value, generate_id, input_record, output_record, to_blob, to_text
from monty_adapter.records import Record
from monty_adapter.schema import ID_KEY, Keys, RecordTypes


def test_generate_id_shape():
    """
    Test that generated ids are 20 URL-safe characters.
    """
    record_id = generate_id()
    assert len(record_id) == 20
    assert re.fullmatch(r"[A-Za-z0-9_-]{20}", record_id)


def test_generate_id_is_unique():
    """
    Test that consecutive ids differ.
    """
    assert len({generate_id() for _ in range(100)}) == 100


def test_blob_text_conversion():
    """
    Test that blobs are encoded as base64 text and decoded back.
    """
    assert to_text(b"hello") == "aGVsbG8="
    assert to_blob("aGVsbG8=") == b"hello"


@pytest.mark.parametrize(
    "value, expected",
    [
        (b"hi", "aGk="),
        (bytearray(b"hi"), "aGk="),
        (memoryview(b"hi"), "aGk="),
        ("hi", "hi"),
        (3, 3),
        (None, None),
    ],
)
def test_cast_value(value, expected):
    """
    Test that only binary values are cast.

    Args:
        value: The value to cast.
        expected: The cast value.
    """
    assert cast_value(value) == expected


class TestInputRecord:
    """Tests for the `input_record` function."""

    def test_primary_key_is_renamed(self, schema_record_types: RecordTypes, schema_keys: Keys):
        """
        Test that the primary key becomes `_id` and is not kept under its ORM name.

        Args:
            schema_record_types: The resolved schema.
            schema_keys: The default special key names.
        """
        document = input_record(schema_record_types, schema_keys, "user", {"id": "u1", "name": "Ada"})

        assert document[ID_KEY] == "u1"
        assert "id" not in document
        assert document["name"] == "Ada"

    @pytest.mark.parametrize("record_id", [None, "", 0])
    def test_missing_id_is_generated(
        self, mocker: MockerFixture, schema_record_types: RecordTypes, schema_keys: Keys, record_id
    ):
        """
        Test that a missing or falsy primary key is replaced by a generated id.

        Args:
            mocker: PyTest mocker fixture.
            schema_record_types: The resolved schema.
            schema_keys: The default special key names.
            record_id: The falsy id.
        """
        mocker.patch("monty_adapter.backends.utils.generate_id", return_value="generated")
        record = {"name": "Ada"} if record_id is None else {"id": record_id, "name": "Ada"}

        document = input_record(schema_record_types, schema_keys, "user", record)

        assert document[ID_KEY] == "generated"

    def test_missing_fields_get_defaults(self, schema_record_types: RecordTypes, schema_keys: Keys):
        """
        Test that missing array fields default to `[]` and scalar fields to None.

        Args:
            schema_record_types: The resolved schema.
            schema_keys: The default special key names.
        """
        document = input_record(schema_record_types, schema_keys, "user", {"id": "u1"})

        assert document == {
            ID_KEY: "u1",
            "name": None,
            "age": None,
            "active": None,
            "joined": None,
            "tags": [],
            "avatar": None,
            "files": [],
            "group": None,
        }

    def test_blobs_are_encoded(self, schema_record_types: RecordTypes, schema_keys: Keys):
        """
        Test that scalar and array blob fields are stored as base64 text.

        Args:
            schema_record_types: The resolved schema.
            schema_keys: The default special key names.
        """
        record = {"id": "u1", "avatar": b"hello", "files": [b"a", b"b"]}
        document = input_record(schema_record_types, schema_keys, "user", record)

        assert document["avatar"] == "aGVsbG8="
        assert document["files"] == ["YQ==", "Yg=="]
        assert record["avatar"] == b"hello"

    def test_undeclared_fields_pass_through(self, schema_record_types: RecordTypes, schema_keys: Keys):
        """
        Test that fields missing from the schema are stored unchanged.

        Args:
            schema_record_types: The resolved schema.
            schema_keys: The default special key names.
        """
        document = input_record(schema_record_types, schema_keys, "group", {"id": "g1", "extra": {"x": 1}})
        assert document["extra"] == {"x": 1}

    def test_custom_primary_key(self, schema_record_types: RecordTypes):
        """
        Test that the configured primary key name is used.

        Args:
            schema_record_types: The resolved schema.
        """
        keys = Keys(primary="key")
        document = input_record(schema_record_types, keys, "group", {"key": "g1", "name": "ops"})

        assert document[ID_KEY] == "g1"
        assert "key" not in document


class TestOutputRecord:
    """Tests for the `output_record` function."""

    def test_round_trip(self, schema_record_types: RecordTypes, schema_keys: Keys):
        """
        Test that a record survives conversion to a document and back.

        Args:
            schema_record_types: The resolved schema.
            schema_keys: The default special key names.
        """
        record = {
            "id": "u1",
            "name": "Ada",
            "age": 36,
            "active": True,
            "joined": datetime(2020, 1, 1),
            "tags": ["math"],
            "avatar": b"\x00\xff",
            "files": [b"one", b"two"],
            "group": "g1",
        }

        document = input_record(schema_record_types, schema_keys, "user", record)
        result = output_record(schema_record_types, schema_keys, "user", document)

        assert isinstance(result, Record)
        assert result == record

    def test_undeclared_fields_are_dropped(self, schema_record_types: RecordTypes, schema_keys: Keys):
        """
        Test that stored fields missing from the schema are not returned.

        Args:
            schema_record_types: The resolved schema.
            schema_keys: The default special key names.
        """
        result = output_record(schema_record_types, schema_keys, "group", {ID_KEY: "g1", "name": "ops", "x": 1})
        assert result == {"id": "g1", "name": "ops"}

    def test_empty_blobs_are_left_alone(self, schema_record_types: RecordTypes, schema_keys: Keys):
        """
        Test that empty blob values are returned as stored.

        Args:
            schema_record_types: The resolved schema.
            schema_keys: The default special key names.
        """
        result = output_record(schema_record_types, schema_keys, "user", {ID_KEY: "u1", "avatar": None, "files": []})

        assert result["avatar"] is None
        assert result["files"] == []

    def test_denormalized_fields_are_hidden(self, schema_record_types: RecordTypes, schema_keys: Keys):
        """
        Test that denormalized inverse fields are readable but not enumerated.

        Args:
            schema_record_types: The resolved schema.
            schema_keys: The default special key names.
        """
        result = output_record(
            schema_record_types, schema_keys, "group", {ID_KEY: "g1", "name": "ops", "members": ["u1"]}
        )

        assert result["members"] == ["u1"]
        assert "members" not in list(result)
        assert result == {"id": "g1", "name": "ops"}
