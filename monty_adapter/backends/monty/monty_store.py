##############################################################################
# Copyright (c) monty-adapter project developers.
# Released under the MIT license. No copyright assignment is required to
# contribute to monty-adapter.
##############################################################################

"""
MontyDB store handle for a single record type.

This module defines `MontyStore`, which owns a `MontyClient` and the collection
holding one record type. Every operation on the collection runs on the
handle's operation queue, a single worker thread, so operations on one record
type are serialized while callers are free to issue them concurrently.

Periodic compaction is driven by a daemon timer that queues a compaction pass
behind whatever operations are pending. For a file-backed repository the pass
closes the client, which makes MontyDB flush its cached writes to the
collection file, and opens a fresh client on the same repository.

See also:
    - monty_adapter.backends.store_base: Base class
    - monty_adapter.backends.monty.monty_adapter: The adapter using these handles
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from montydb import MontyClient

from monty_adapter.backends.store_base import StoreBase
from monty_adapter.config import MEMORY_REPOSITORY


LOG = logging.getLogger(__name__)


def gather(futures: Iterable[Future]) -> List[Any]:
    """
    Wait for a group of futures and collect their results.

    Args:
        futures: The futures to wait for.

    Returns:
        The results, in the order the futures were given.

    Raises:
        Exception: The error of the first future to fail, as soon as it fails.
    """
    futures = list(futures)
    for future in as_completed(futures):
        future.result()
    return [future.result() for future in futures]


class MontyStore(StoreBase):
    """
    A handle on the MontyDB collection backing one record type.

    Attributes:
        type_name (str): The record type, also used as the collection name.
        repository (str): The MontyDB repository, a directory or `:memory:`.
        database (str): The MontyDB database holding the collection.
        store_options (Dict[str, Any]): Options passed verbatim to `MontyClient`.
        client (MontyClient): The open client, or None before `open`.
        collection: The collection holding the records, or None before `open`.

    Methods:
        open: Create the client and select the collection.
        load: Read the persisted collection on the operation queue.
        submit: Queue an operation against the collection.
        compact: Persist the collection file. Runs on the operation queue.
        set_compaction_interval: Start periodic background compaction.
        stop_compaction: Stop periodic background compaction.
        drain: Queue a marker that completes once every earlier operation has run.
        close: Shut down the operation queue and close the client.
    """

    def __init__(self, type_name: str, repository: str, database: str, store_options: Optional[Mapping[str, Any]] = None):
        """
        Initialize the handle. Nothing is opened until `open` is called.

        Args:
            type_name: The record type, also used as the collection name.
            repository: The MontyDB repository, a directory or `:memory:`.
            database: The MontyDB database holding the collection.
            store_options: Options passed verbatim to `MontyClient`.
        """
        super().__init__(type_name)
        self.repository: str = repository
        self.database: str = database
        self.store_options: Dict[str, Any] = dict(store_options or {})
        self.client: Optional[MontyClient] = None
        self.collection = None

        self._queue = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"monty-{type_name}")
        self._compaction_lock = threading.Lock()
        self._compaction_interval: Optional[float] = None
        self._compaction_timer: Optional[threading.Timer] = None

    @property
    def persistent(self) -> bool:
        """True if the collection is backed by a file."""
        return self.repository != MEMORY_REPOSITORY

    def open(self):
        """
        Create the client and select the collection.
        """
        LOG.debug(f"Opening store for '{self.type_name}' in repository '{self.repository}'...")
        self.client = MontyClient(self.repository, **self.store_options)
        self.collection = self.client.get_database(self.database).get_collection(self.type_name)

    def load(self) -> Future:
        """
        Read the persisted collection on the operation queue.

        Returns:
            A future resolving to the number of records loaded.
        """
        return self.submit(self._load)

    def _load(self, collection) -> int:
        count = collection.count_documents({})
        LOG.debug(f"Loaded {count} '{self.type_name}' records.")
        return count

    def submit(self, operation: Callable[..., Any], *args: Any) -> Future:
        """
        Queue an operation against the collection.

        The collection is looked up when the operation runs, so operations
        queued before a compaction pass and after it both see a live client.

        Args:
            operation: A callable receiving the collection followed by `args`.
            args: Extra arguments for `operation`.

        Returns:
            A future resolving to the return value of `operation`.
        """
        return self._queue.submit(lambda: operation(self.collection, *args))

    def compact(self):
        """
        Persist the collection to its file. Runs on the operation queue.
        """
        if not self.persistent:
            LOG.debug(f"Skipping compaction of in-memory store '{self.type_name}'.")
            return

        LOG.debug(f"Compacting store '{self.type_name}'...")
        self.client.close()
        self.open()
        LOG.debug(f"Compacted store '{self.type_name}'.")

    def _log_compaction_result(self, future: Future):
        error = future.exception()
        if error is not None:
            LOG.error(f"Compaction of store '{self.type_name}' failed: {error}")

    def _schedule_compaction(self):
        # Caller must hold `_compaction_lock`
        self._compaction_timer = threading.Timer(self._compaction_interval, self._on_compaction_timer)
        self._compaction_timer.daemon = True
        self._compaction_timer.start()

    def _on_compaction_timer(self):
        with self._compaction_lock:
            if self._compaction_interval is None:
                return
            future = self._queue.submit(self.compact)
            future.add_done_callback(self._log_compaction_result)
            self._schedule_compaction()

    def set_compaction_interval(self, interval: float):
        """
        Start compacting the collection every `interval` seconds, replacing
        any previously configured interval.

        Args:
            interval: Seconds between two compaction passes.
        """
        with self._compaction_lock:
            if self._compaction_timer is not None:
                self._compaction_timer.cancel()
            self._compaction_interval = interval
            self._schedule_compaction()
        LOG.info(f"Compacting store '{self.type_name}' every {interval} seconds.")

    def stop_compaction(self):
        """
        Stop the periodic compaction. Once this returns no further compaction
        pass will be queued.
        """
        with self._compaction_lock:
            self._compaction_interval = None
            if self._compaction_timer is not None:
                self._compaction_timer.cancel()
                self._compaction_timer = None
        LOG.info(f"Stopped compaction of store '{self.type_name}'.")

    def drain(self) -> Future:
        """
        Queue a marker behind every pending operation.

        Returns:
            A future that completes once every operation queued before it has run.
        """
        return self._queue.submit(lambda: None)

    def close(self):
        """
        Shut down the operation queue, waiting for pending operations, and
        close the client.
        """
        self._queue.shutdown(wait=True)
        if self.client is not None:
            self.client.close()
        LOG.debug(f"Closed store '{self.type_name}'.")
