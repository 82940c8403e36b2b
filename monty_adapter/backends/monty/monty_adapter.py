##############################################################################
# Copyright (c) monty-adapter project developers.
# Released under the MIT license. No copyright assignment is required to
# contribute to monty-adapter.
##############################################################################

"""
MontyDB adapter implementation.

This module defines the `MontyAdapter` class, which provides a concrete
implementation of the `Adapter` interface using MontyDB as the underlying
embedded store. Every record type is kept in its own collection, reached
through a `MontyStore` handle, and every entry point only converts between
the ORM's shapes and MontyDB's: records go through the codec in
`backends.utils` and query options through `backends.query`.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from montydb.errors import BulkWriteError, DuplicateKeyError

from monty_adapter.backends.adapter_base import Adapter
from monty_adapter.backends.monty.monty_store import MontyStore, gather
from monty_adapter.backends.query import find_options, generate_query, generate_update
from monty_adapter.backends.utils import input_record, output_record
from monty_adapter.exceptions import ConflictError, NotConnectedError
from monty_adapter.records import Record, ResultList
from monty_adapter.schema import ID_KEY


LOG = logging.getLogger(__name__)


class MontyAdapter(Adapter):
    """
    An adapter persisting ORM records in MontyDB, one collection per record type.

    Attributes:
        adapter_name (str): The name of the adapter ("monty").
        stores (Dict[str, MontyStore]): The store handle of every record type.

    Methods:
        connect:
            Open and load one store per record type and start compaction.

        disconnect:
            Stop compaction, wait for every queue to drain and close the stores.

        find:
            Find records by id and/or query options, with the total count attached.

        create:
            Insert new records, mapping duplicate ids to `ConflictError`.

        update:
            Apply update items concurrently and sum the affected counts.

        delete:
            Delete records by id, or every record of a type.
    """

    def __init__(self, record_types, options=None, keys=None):
        """
        Initialize the `MontyAdapter` instance. No store is opened until `connect`.

        Args:
            record_types: Field definitions of every record type.
            options: Adapter options, either already built or as a raw mapping.
            keys: The ORM's special key names.
        """
        super().__init__("monty", record_types, options, keys)
        self.stores: Dict[str, MontyStore] = {}
        self._connected: bool = False

    @property
    def connected(self) -> bool:
        """True once `connect` succeeded and until `disconnect` is called."""
        return self._connected

    def _get_store(self, type_name: str) -> MontyStore:
        """
        Get the store handle of a record type.

        Args:
            type_name: The record type.

        Returns:
            The store handle.

        Raises:
            UnknownRecordTypeError: If the record type is not in the schema.
            NotConnectedError: If the adapter is not connected.
        """
        self._get_fields(type_name)
        if not self._connected:
            raise NotConnectedError(f"Cannot access '{type_name}' records: the adapter is not connected.")
        return self.stores[type_name]

    def connect(self):
        """
        Open one store per record type, start their background compaction and
        load their persisted state.

        Stores left over from an earlier connection are closed first. If
        anything fails, the stores opened so far are closed, the first error
        encountered is raised and the adapter stays unusable.
        """
        options = self.options
        LOG.info(f"Connecting to MontyDB repository '{options.repository}'...")

        if self.stores:
            self._close_stores()

        try:
            for type_name in self.record_types:
                store = MontyStore(type_name, options.repository, options.database, options.store_options)
                self.stores[type_name] = store
                store.open()
                store.set_compaction_interval(options.compaction_interval)

            gather(store.load() for store in self.stores.values())
        except Exception:
            LOG.error("Failed to connect, closing the stores opened so far.")
            self._close_stores()
            raise

        self._connected = True
        LOG.info(f"Connected {len(self.stores)} stores.")

    def disconnect(self):
        """
        Stop background compaction on every store, wait until every store's
        operation queue is empty, then close the stores.
        """
        LOG.info("Disconnecting from MontyDB...")
        self._connected = False

        for store in self.stores.values():
            store.stop_compaction()

        gather(store.drain() for store in self.stores.values())

        for store in self.stores.values():
            store.close()

        self.stores = {}
        LOG.info("Disconnected.")

    def _close_stores(self):
        """
        Stop compaction on every store handle and close it, then forget them all.
        Operations already queued still run before each queue shuts down.
        """
        self._connected = False
        for store in self.stores.values():
            store.stop_compaction()
            store.close()
        self.stores = {}

    def find(
        self, type_name: Optional[str] = None, ids: Optional[Sequence[Any]] = None, options: Optional[Mapping] = None
    ) -> ResultList:
        """
        Find records of a type.

        Args:
            type_name: The record type to query.
            ids: Optional ids the records must have. An empty sequence finds nothing.
            options: Optional query options (`fields`, `sort`, `offset`, `limit`,
                `query`, `and`, `or`, `not`, `range`, `match`, `exists`).

        Returns:
            The matching records, with the total number of matches as `count`.
        """
        # Handle no-op
        if ids is not None and not ids:
            return super().find(type_name)
        options = options or {}

        fields = self._get_fields(type_name)
        store = self._get_store(type_name)

        query = generate_query(fields, options)

        if callable(options.get("query")):
            result = options["query"](query)
            if result is not None:
                query = result

        if ids:
            query = dict(query)
            query[ID_KEY] = {"$in": list(ids)}

        shape = find_options(options)
        LOG.debug(f"Finding '{type_name}' records with query {query}.")

        def _find(collection) -> List[Dict]:
            cursor = collection.find(query, shape.projection)
            if shape.sort:
                cursor = cursor.sort(shape.sort)
            if shape.skip is not None:
                cursor = cursor.skip(shape.skip)
            if shape.limit is not None:
                cursor = cursor.limit(shape.limit)
            return list(cursor)

        def _count(collection) -> int:
            return collection.count_documents(query)

        documents, count = gather([store.submit(_find), store.submit(_count)])

        records = [output_record(self.record_types, self.keys, type_name, document) for document in documents]
        return ResultList(records, count=count)

    def create(self, type_name: str, records: Sequence[Mapping[str, Any]]) -> List[Record]:
        """
        Insert new records.

        Args:
            type_name: The record type of the new records.
            records: The records to insert. Records without a primary key get
                a generated one.

        Returns:
            The inserted records.

        Raises:
            ConflictError: If a record's id is already taken.
        """
        store = self._get_store(type_name)
        documents = [input_record(self.record_types, self.keys, type_name, record) for record in records]

        # Handle no-op
        if not documents:
            return []

        def _insert(collection) -> List[Dict]:
            collection.insert_many(documents)
            return documents

        LOG.debug(f"Inserting {len(documents)} '{type_name}' records.")
        try:
            inserted = store.submit(_insert).result()
        except (DuplicateKeyError, BulkWriteError) as exc:
            raise ConflictError("Duplicate key.") from exc

        return [output_record(self.record_types, self.keys, type_name, document) for document in inserted]

    def update(self, type_name: str, updates: Sequence[Mapping[str, Any]]) -> int:
        """
        Apply update items to existing records. Items are queued concurrently,
        one native update per item; items that change nothing are skipped.

        Args:
            type_name: The record type of the updated records.
            updates: The update items, each naming its target by primary key.

        Returns:
            The number of records affected across all items.
        """
        store = self._get_store(type_name)
        primary_key = self.keys.primary

        def _update(collection, query: Dict, modifiers: Dict) -> int:
            return collection.update_one(query, modifiers).matched_count

        futures = []
        for update in updates:
            modifiers = generate_update(update)

            # Short circuit no-op
            if not modifiers:
                continue

            futures.append(store.submit(_update, {ID_KEY: update[primary_key]}, modifiers))

        LOG.debug(f"Updating {len(futures)} '{type_name}' records.")
        return sum(gather(futures))

    def delete(self, type_name: Optional[str] = None, ids: Optional[Sequence[Any]] = None) -> int:
        """
        Delete records of a type.

        Args:
            type_name: The record type of the records to delete.
            ids: Optional ids of the records to delete. None deletes every
                record of the type, an empty sequence deletes nothing.

        Returns:
            The number of records deleted.
        """
        # Handle no-op
        if ids is not None and not ids:
            return super().delete(type_name)

        store = self._get_store(type_name)
        query = {ID_KEY: {"$in": list(ids)}} if ids else {}

        def _delete(collection) -> int:
            return collection.delete_many(query).deleted_count

        LOG.debug(f"Deleting '{type_name}' records matching {query}.")
        return store.submit(_delete).result()
