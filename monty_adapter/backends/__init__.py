##############################################################################
# Copyright (c) monty-adapter project developers.
# Released under the MIT license. No copyright assignment is required to
# contribute to monty-adapter.
##############################################################################

"""
Adapter infrastructure.

The `backends` package holds the abstract adapter contract the ORM layer talks
to, the MontyDB implementation of that contract, and the translation helpers
both directions of traffic go through.

Subpackages:
    monty: MontyDB store handles and the `MontyAdapter`.

Modules:
    adapter_base: Defines the abstract `Adapter` base class.
    query: Compiles ORM query options and update items into native documents.
    store_base: Provides the abstract `StoreBase` class for per-record-type store handles.
    utils: Record codec (primary key renaming, blob encoding) and id generation.
"""
