##############################################################################
# Copyright (c) monty-adapter project developers.
# Released under the MIT license. No copyright assignment is required to
# contribute to monty-adapter.
##############################################################################

"""
monty-adapter: persist ORM records through an embedded MontyDB store.

This package translates an ORM's abstract record and query model into
MontyDB's native document, filter and update shapes, and back again.
"""

import os


__version__ = "0.3.0"
VERSION = __version__
PATH_TO_PROJ = os.path.join(os.path.dirname(__file__), "")
