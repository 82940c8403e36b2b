##############################################################################
# Copyright (c) monty-adapter project developers.
# Released under the MIT license. No copyright assignment is required to
# contribute to monty-adapter.
##############################################################################

"""
This module defines the abstract base class for all store handles.

A store handle owns the connection to the collection backing one record type
and the operation queue every operation on that collection runs through.
Concrete handles (e.g. `MontyStore`) must inherit from this class and
implement its abstract methods.
"""

from abc import ABC, abstractmethod
from concurrent.futures import Future
from typing import Any, Callable


class StoreBase(ABC):
    """
    Base class for all store handles.

    Attributes:
        type_name: The record type whose records live in this store.

    Methods:
        open: Open the connection to the underlying collection.
        load: Read the persisted state of the collection.
        submit: Queue an operation against the collection.
        set_compaction_interval: Start periodic background compaction.
        stop_compaction: Stop periodic background compaction.
        drain: Queue a marker that completes once every earlier operation has run.
        close: Release the connection and the operation queue.
    """

    def __init__(self, type_name: str):
        """
        Initialize the store handle.

        Args:
            type_name: The record type whose records live in this store.
        """
        self.type_name: str = type_name

    @abstractmethod
    def open(self):
        """
        Open the connection to the underlying collection.
        """
        raise NotImplementedError("Subclasses of `StoreBase` must implement an `open` method.")

    @abstractmethod
    def load(self) -> Future:
        """
        Read the persisted state of the collection.

        Returns:
            A future that completes once the state has been loaded.
        """
        raise NotImplementedError("Subclasses of `StoreBase` must implement a `load` method.")

    @abstractmethod
    def submit(self, operation: Callable[..., Any], *args: Any) -> Future:
        """
        Queue an operation against the collection.

        Args:
            operation: A callable receiving the collection followed by `args`.
            args: Extra arguments for `operation`.

        Returns:
            A future resolving to the return value of `operation`.
        """
        raise NotImplementedError("Subclasses of `StoreBase` must implement a `submit` method.")

    @abstractmethod
    def set_compaction_interval(self, interval: float):
        """
        Start compacting the collection every `interval` seconds.

        Args:
            interval: Seconds between two compaction passes.
        """
        raise NotImplementedError("Subclasses of `StoreBase` must implement a `set_compaction_interval` method.")

    @abstractmethod
    def stop_compaction(self):
        """
        Stop the periodic compaction started by `set_compaction_interval`.
        """
        raise NotImplementedError("Subclasses of `StoreBase` must implement a `stop_compaction` method.")

    @abstractmethod
    def drain(self) -> Future:
        """
        Queue a marker behind every pending operation.

        Returns:
            A future that completes once every operation queued before it has run.
        """
        raise NotImplementedError("Subclasses of `StoreBase` must implement a `drain` method.")

    @abstractmethod
    def close(self):
        """
        Release the connection and the operation queue.
        """
        raise NotImplementedError("Subclasses of `StoreBase` must implement a `close` method.")
