##############################################################################
# Copyright (c) monty-adapter project developers.
# Released under the MIT license. No copyright assignment is required to
# contribute to monty-adapter.
##############################################################################

"""
Used to store the adapter configuration.

Options reach the adapter as a plain mapping (or a YAML file holding one).
`AdapterOptions` copies the keys it recognises into an immutable object and
keeps everything else aside as pass-through options for the embedded store,
so the caller's mapping is never modified.

Recognised keys:
    dbPath / db_path: Directory holding one persisted collection file per
        record type. Absent means in-memory storage.
    compactionInterval / compaction_interval: Seconds between background
        compaction passes. Defaults to `DEFAULT_COMPACTION_INTERVAL`.
    database: Name of the MontyDB database holding the collections.
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from monty_adapter.utils import load_yaml


LOG = logging.getLogger(__name__)

# Try to auto-compact every minute by default
DEFAULT_COMPACTION_INTERVAL = 60
DEFAULT_DATABASE = "monty_adapter"
MEMORY_REPOSITORY = ":memory:"

ALIASES = {
    "dbPath": "db_path",
    "db_path": "db_path",
    "compactionInterval": "compaction_interval",
    "compaction_interval": "compaction_interval",
    "database": "database",
}

# Filenames are derived from record types so this store option is dropped
IGNORED_STORE_OPTIONS = ("filename",)


@dataclass(frozen=True)
class AdapterOptions:
    """
    Immutable configuration for the adapter.

    Attributes:
        db_path: Directory for persisted collections, or None for in-memory storage.
        compaction_interval: Seconds between background compaction passes.
        database: Name of the MontyDB database holding one collection per record type.
        store_options: Read-only options passed verbatim to the store client.

    Methods:
        from_dict: Build the options from a mapping without modifying it.
        from_yaml: Build the options from a YAML file.
        repository: The repository the store client should open.
    """

    db_path: Optional[str] = None
    compaction_interval: float = DEFAULT_COMPACTION_INTERVAL
    database: str = DEFAULT_DATABASE
    store_options: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_dict(cls, options: Optional[Mapping[str, Any]] = None) -> "AdapterOptions":
        """
        Create an instance from a mapping of options.

        Args:
            options: Adapter options mixed with store options.

        Returns:
            The adapter options.
        """
        recognized: Dict[str, Any] = {}
        store_options: Dict[str, Any] = {}

        for key, value in (options or {}).items():
            if key in ALIASES:
                recognized[ALIASES[key]] = value
            elif key in IGNORED_STORE_OPTIONS:
                LOG.debug(f"Ignoring store option '{key}'; file names are derived from record types.")
            else:
                store_options[key] = value

        # A falsy interval falls back to the default
        if not recognized.get("compaction_interval"):
            recognized.pop("compaction_interval", None)

        return cls(store_options=MappingProxyType(store_options), **recognized)

    @classmethod
    def from_yaml(cls, filepath: str, section: Optional[str] = None) -> "AdapterOptions":
        """
        Create an instance from the contents of a YAML file.

        Args:
            filepath: Path to the YAML file.
            section: Optional top-level key of the file holding the options.

        Returns:
            The adapter options.
        """
        contents = load_yaml(filepath) or {}
        if section is not None:
            contents = contents.get(section) or {}
        LOG.debug(f"Loaded adapter options from '{filepath}'.")
        return cls.from_dict(contents)

    @property
    def repository(self) -> str:
        """The repository the store client should open."""
        return self.db_path if self.db_path else MEMORY_REPOSITORY

    @property
    def in_memory(self) -> bool:
        """True if nothing is persisted to disk."""
        return not self.db_path
