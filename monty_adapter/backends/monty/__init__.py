##############################################################################
# Copyright (c) monty-adapter project developers.
# Released under the MIT license. No copyright assignment is required to
# contribute to monty-adapter.
##############################################################################

"""
MontyDB implementation of the adapter.
"""

from monty_adapter.backends.monty.monty_adapter import MontyAdapter
from monty_adapter.backends.monty.monty_store import MontyStore


__all__ = ["MontyAdapter", "MontyStore"]
