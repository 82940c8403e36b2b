##############################################################################
# Copyright (c) monty-adapter project developers.
# Released under the MIT license. No copyright assignment is required to
# contribute to monty-adapter.
##############################################################################

"""
Abstract base class for adapters plugged into the ORM layer.

This module defines `Adapter`, an abstract base class that specifies the
contract between the ORM layer and a storage adapter. The ORM calls the CRUD
entry points with a record type name and receives plain ORM records back.

The `Adapter` class encapsulates:
- The resolved schema of every record type, and the ORM's special key names
- The immutable adapter options
- No-op results for short-circuited operations (`find` and `delete`)

Usage:
    This base class is not meant to be instantiated directly. Instead, it should be subclassed
    by store-specific implementations such as `MontyAdapter`.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from monty_adapter.config import AdapterOptions
from monty_adapter.exceptions import UnknownRecordTypeError
from monty_adapter.records import Record, ResultList
from monty_adapter.schema import FieldDescriptor, FieldDefinition, Keys, build_record_types


LOG = logging.getLogger(__name__)


class Adapter(ABC):
    """
    Abstract base class for an adapter, which persists and queries ORM records.

    Attributes:
        adapter_name (str): The name of the adapter (e.g. "monty").
        keys (Keys): The ORM's special key names.
        record_types (Dict[str, Dict[str, FieldDescriptor]]): The resolved schema.
        options (AdapterOptions): The adapter configuration.

    Methods:
        get_name:
            Retrieve the name of the adapter.

        connect:
            Open the stores backing every record type.

        disconnect:
            Flush pending work and release every store.

        find:
            Find records by id and/or query options. The base implementation
            returns an empty result and is used for no-op short circuits.

        create:
            Insert new records.

        update:
            Apply update items to existing records.

        delete:
            Delete records by id. The base implementation deletes nothing and
            is used for no-op short circuits.
    """

    def __init__(
        self,
        adapter_name: str,
        record_types: Mapping[str, Mapping[str, FieldDefinition]],
        options: Union[AdapterOptions, Mapping[str, Any], None] = None,
        keys: Optional[Keys] = None,
    ):
        """
        Initialize the `Adapter` instance.

        Args:
            adapter_name: The name of the adapter (e.g. "monty").
            record_types: Field definitions of every record type.
            options: Adapter options, either already built or as a raw mapping.
            keys: The ORM's special key names. Defaults to `Keys()`.
        """
        self.adapter_name: str = adapter_name
        self.keys: Keys = keys if keys is not None else Keys()
        self.record_types: Dict[str, Dict[str, FieldDescriptor]] = build_record_types(record_types, self.keys)
        self.options: AdapterOptions = (
            options if isinstance(options, AdapterOptions) else AdapterOptions.from_dict(options)
        )

    def get_name(self) -> str:
        """
        Get the name of the adapter.

        Returns:
            The name of the adapter (e.g. monty).
        """
        return self.adapter_name

    def _get_fields(self, type_name: str) -> Dict[str, FieldDescriptor]:
        """
        Get the schema of a record type.

        Args:
            type_name: The record type.

        Returns:
            The resolved fields of the record type.

        Raises:
            UnknownRecordTypeError: If the record type is not in the schema.
        """
        if type_name not in self.record_types:
            raise UnknownRecordTypeError(f"Invalid record type '{type_name}'.")
        return self.record_types[type_name]

    @abstractmethod
    def connect(self):
        """
        Open the stores backing every record type.
        """
        raise NotImplementedError("Subclasses of `Adapter` must implement a `connect` method.")

    @abstractmethod
    def disconnect(self):
        """
        Flush pending work and release every store.
        """
        raise NotImplementedError("Subclasses of `Adapter` must implement a `disconnect` method.")

    def find(
        self, type_name: Optional[str] = None, ids: Optional[Sequence[Any]] = None, options: Optional[Mapping] = None
    ) -> ResultList:
        """
        Find records. The base implementation finds nothing.

        Args:
            type_name: The record type to query.
            ids: Optional ids the records must have.
            options: Optional query options.

        Returns:
            An empty result list with a count of 0.
        """
        return ResultList(count=0)

    @abstractmethod
    def create(self, type_name: str, records: Sequence[Mapping[str, Any]]) -> List[Record]:
        """
        Insert new records.

        Args:
            type_name: The record type of the new records.
            records: The records to insert.

        Returns:
            The inserted records.
        """
        raise NotImplementedError("Subclasses of `Adapter` must implement a `create` method.")

    @abstractmethod
    def update(self, type_name: str, updates: Sequence[Mapping[str, Any]]) -> int:
        """
        Apply update items to existing records.

        Args:
            type_name: The record type of the updated records.
            updates: The update items, each naming its target by primary key.

        Returns:
            The number of records affected.
        """
        raise NotImplementedError("Subclasses of `Adapter` must implement an `update` method.")

    def delete(self, type_name: Optional[str] = None, ids: Optional[Sequence[Any]] = None) -> int:
        """
        Delete records. The base implementation deletes nothing.

        Args:
            type_name: The record type of the records to delete.
            ids: Optional ids of the records to delete.

        Returns:
            0
        """
        return 0
