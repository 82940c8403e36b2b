##############################################################################
# Copyright (c) monty-adapter project developers.
# Released under the MIT license. No copyright assignment is required to
# contribute to monty-adapter.
##############################################################################

"""
Module for project-wide utility functions.
"""

import logging
from typing import Any, Callable, Dict, Mapping

import yaml


LOG = logging.getLogger(__name__)


def load_yaml(filepath: str) -> Dict:
    """
    Safely read a YAML file and return its contents.

    Args:
        filepath: The file path to the YAML file to be read.

    Returns:
        A dict representing the contents of the YAML file.
    """
    with open(filepath, "r") as _file:
        return yaml.safe_load(_file)


def map_values(mapping: Mapping[str, Any], func: Callable[[Any, str], Any]) -> Dict[str, Any]:
    """
    Build a new dict with the same keys as `mapping` and values transformed
    by `func`. The input mapping is left untouched.

    Args:
        mapping: The mapping whose values should be transformed.
        func: A callable receiving `(value, key)` and returning the new value.

    Returns:
        A new dict holding the transformed values, in the original key order.
    """
    return {key: func(value, key) for key, value in mapping.items()}


def is_sequence(value: Any) -> bool:
    """
    Check if a value should be treated as a list of values rather than a
    single value. Strings, bytes and mappings are single values.

    Args:
        value: The value to check.

    Returns:
        True if `value` is a list, tuple, or set. False otherwise.
    """
    return isinstance(value, (list, tuple, set, frozenset))
