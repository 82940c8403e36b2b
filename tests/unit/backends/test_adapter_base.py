##############################################################################
# Copyright (c) monty-adapter project developers.
# Released under the MIT license. No copyright assignment is required to
# contribute to monty-adapter.
##############################################################################

"""
Tests for the `adapter_base.py` module.
"""

import pytest

from monty_adapter.backends.adapter_base import Adapter
from monty_adapter.config import AdapterOptions
from monty_adapter.exceptions import UnknownRecordTypeError
from monty_adapter.schema import FieldDescriptor, Keys
from tests.fixture_types import FixtureDict


class DummyAdapter(Adapter):
    """A minimal adapter that stores nothing."""

    def __init__(self, record_types, options=None, keys=None):
        super().__init__("dummy", record_types, options, keys)

    def connect(self):
        pass

    def disconnect(self):
        pass

    def create(self, type_name, records):
        return list(records)

    def update(self, type_name, updates):
        return len(updates)


class TestAdapter:
    """Tests for the `Adapter` base class."""

    def test_cannot_instantiate_abstract_class(self, schema_raw_record_types: FixtureDict):
        """
        Test that the base class cannot be instantiated directly.

        Args:
            schema_raw_record_types: Raw field definitions.
        """
        with pytest.raises(TypeError):
            Adapter("abstract", schema_raw_record_types)  # pylint: disable=abstract-class-instantiated

    def test_initialization(self, schema_raw_record_types: FixtureDict):
        """
        Test that the schema is resolved and raw options are converted.

        Args:
            schema_raw_record_types: Raw field definitions.
        """
        adapter = DummyAdapter(schema_raw_record_types, {"dbPath": "/data/db"})

        assert adapter.get_name() == "dummy"
        assert adapter.keys == Keys()
        assert isinstance(adapter.record_types["user"]["name"], FieldDescriptor)
        assert adapter.options.db_path == "/data/db"

    def test_prebuilt_options_are_kept(self, schema_raw_record_types: FixtureDict):
        """
        Test that an `AdapterOptions` instance is used as is.

        Args:
            schema_raw_record_types: Raw field definitions.
        """
        options = AdapterOptions(compaction_interval=5)
        adapter = DummyAdapter(schema_raw_record_types, options, Keys(primary="key"))

        assert adapter.options is options
        assert adapter.keys.primary == "key"

    def test_default_find_and_delete(self, schema_raw_record_types: FixtureDict):
        """
        Test that the default `find` and `delete` do nothing.

        Args:
            schema_raw_record_types: Raw field definitions.
        """
        adapter = DummyAdapter(schema_raw_record_types)

        result = adapter.find("user", ["u1"])
        assert result == []
        assert result.count == 0
        assert adapter.delete("user", ["u1"]) == 0

    def test_get_fields(self, schema_raw_record_types: FixtureDict):
        """
        Test that the resolved fields are returned for known types only.

        Args:
            schema_raw_record_types: Raw field definitions.
        """
        adapter = DummyAdapter(schema_raw_record_types)

        assert set(adapter._get_fields("group")) == {"name", "members"}
        with pytest.raises(UnknownRecordTypeError):
            adapter._get_fields("animal")
