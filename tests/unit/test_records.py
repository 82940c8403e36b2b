##############################################################################
# Copyright (c) monty-adapter project developers.
# Released under the MIT license. No copyright assignment is required to
# contribute to monty-adapter.
##############################################################################

"""
Tests for the `records.py` module.
"""

import pytest

from monty_adapter.records import Record, ResultList


class TestRecord:
    """Tests for the `Record` class."""

    @pytest.fixture
    def record(self) -> Record:
        """
        A record with one own field and one denormalized field.

        Returns:
            The record.
        """
        record = Record({"id": "r1", "name": "Ada"})
        record.set_denormalized("members", ["u1", "u2"])
        return record

    def test_denormalized_field_is_readable(self, record: Record):
        """
        Test that denormalized fields can be read by name.

        Args:
            record: A record with a denormalized field.
        """
        assert record["members"] == ["u1", "u2"]
        assert record.get("members") == ["u1", "u2"]
        assert "members" in record

    def test_denormalized_field_is_not_enumerated(self, record: Record):
        """
        Test that denormalized fields are left out of iteration and the views.

        Args:
            record: A record with a denormalized field.
        """
        assert list(record) == ["id", "name"]
        assert len(record) == 2
        assert set(record.keys()) == {"id", "name"}
        assert "members" not in dict(record)

    def test_equality_ignores_denormalized_fields(self, record: Record):
        """
        Test that a record compares equal to a plain dict of its own fields.

        Args:
            record: A record with a denormalized field.
        """
        assert record == {"id": "r1", "name": "Ada"}

    def test_missing_field_raises_key_error(self, record: Record):
        """
        Test that reading an unknown field still raises `KeyError`.

        Args:
            record: A record with a denormalized field.
        """
        with pytest.raises(KeyError):
            record["unknown"]  # pylint: disable=pointless-statement
        assert record.get("unknown", "default") == "default"

    def test_own_field_wins_over_denormalized(self):
        """
        Test that an own field shadows a denormalized field of the same name.
        """
        record = Record({"members": []})
        record.set_denormalized("members", ["u1"])
        assert record["members"] == []
        assert record.get("members") == []

    def test_copy_keeps_denormalized_fields(self, record: Record):
        """
        Test that copying a record copies its denormalized fields independently.

        Args:
            record: A record with a denormalized field.
        """
        clone = record.copy()
        clone.set_denormalized("other", 1)

        assert isinstance(clone, Record)
        assert clone["members"] == ["u1", "u2"]
        assert "other" not in record


class TestResultList:
    """Tests for the `ResultList` class."""

    def test_defaults(self):
        """
        Test that an empty result list has a count of 0.
        """
        result = ResultList()
        assert result == []
        assert result.count == 0

    def test_count_is_independent_of_length(self):
        """
        Test that the count reflects the total matches rather than the page size.
        """
        result = ResultList([Record(id="a")], count=10)
        assert len(result) == 1
        assert result.count == 10
