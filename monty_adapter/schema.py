##############################################################################
# Copyright (c) monty-adapter project developers.
# Released under the MIT license. No copyright assignment is required to
# contribute to monty-adapter.
##############################################################################

"""
This module houses the dataclasses that describe record types.

A record type is a named mapping of field names to `FieldDescriptor` objects.
Descriptors are resolved once, when the schema is built, so that the codec
and the query translator only need to look at `FieldDescriptor.kind` and
`FieldDescriptor.is_array` for every field they touch.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union


LOG = logging.getLogger(__name__)

ID_KEY = "_id"


class FieldKind(Enum):
    """
    Enumerated kinds of values a field may hold.

    Attributes:
        BLOB: Binary data. Stored as base64 text since the store has no binary type.
        STRING: Text.
        NUMBER: Integers and floats.
        BOOLEAN: True/False.
        DATETIME: `datetime.datetime` instances.
        OBJECT: Nested mappings.
        LINK: A reference to records of another type.
        OTHER: Anything else; passed through untouched.
    """

    BLOB = "blob"
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATETIME = "datetime"
    OBJECT = "object"
    LINK = "link"
    OTHER = "other"


@dataclass(frozen=True)
class Keys:
    """
    Names of the special keys used by the ORM layer, both on records and
    inside raw field definitions.

    Attributes:
        primary: Name of the primary key field on ORM records.
        type: Name of the key holding a field's value type in a definition.
        link: Name of the key holding the linked record type in a definition.
        is_array: Name of the key flagging array-valued fields in a definition.
        inverse: Name of the key holding the inverse field of a link.
        denormalized_inverse: Name of the key flagging denormalized inverse fields.
    """

    primary: str = "id"
    type: str = "type"
    link: str = "link"
    is_array: str = "isArray"
    inverse: str = "inverse"
    denormalized_inverse: str = "denormalizedInverse"


def resolve_kind(value_type: Any, link: Optional[str] = None) -> FieldKind:
    """
    Determine the `FieldKind` for a declared value type.

    Args:
        value_type: The Python type declared for the field, if any.
        link: The record type the field links to, if any.

    Returns:
        The kind of value the field holds.
    """
    if link:
        return FieldKind.LINK
    if not isinstance(value_type, type):
        return FieldKind.OTHER
    if issubclass(value_type, (bytes, bytearray)):
        result = FieldKind.BLOB
    # bool is a subclass of int so it has to be checked first
    elif issubclass(value_type, bool):
        result = FieldKind.BOOLEAN
    elif issubclass(value_type, (int, float)):
        result = FieldKind.NUMBER
    elif issubclass(value_type, str):
        result = FieldKind.STRING
    elif issubclass(value_type, datetime):
        result = FieldKind.DATETIME
    elif issubclass(value_type, dict):
        result = FieldKind.OBJECT
    else:
        result = FieldKind.OTHER
    return result


@dataclass(frozen=True)
class FieldDescriptor:
    """
    A resolved description of one field of a record type.

    Attributes:
        name: The name of the field.
        kind: The kind of value the field holds.
        is_array: Whether the field holds a list of values.
        denormalized_inverse: Whether the field is computed from a relationship
            and must not be enumerated on output records.
        link: The record type this field links to, if any.
        inverse: The inverse field on the linked record type, if any.
        value_type: The Python type the field was declared with, if any.
    """

    name: str
    kind: FieldKind = FieldKind.OTHER
    is_array: bool = False
    denormalized_inverse: bool = False
    link: Optional[str] = None
    inverse: Optional[str] = None
    value_type: Any = None

    @property
    def is_blob(self) -> bool:
        """True if values of this field are binary blobs."""
        return self.kind is FieldKind.BLOB

    @classmethod
    def from_definition(cls, name: str, definition: Mapping[str, Any], keys: Keys = Keys()) -> "FieldDescriptor":
        """
        Create a descriptor from a raw field definition such as
        `{"type": bytes, "isArray": True}`.

        Args:
            name: The name of the field.
            definition: The raw definition, keyed by the names in `keys`.
            keys: The key names used in `definition`.

        Returns:
            The resolved field descriptor.
        """
        value_type = definition.get(keys.type)
        link = definition.get(keys.link)
        return cls(
            name=name,
            kind=resolve_kind(value_type, link),
            is_array=bool(definition.get(keys.is_array, False)),
            denormalized_inverse=bool(definition.get(keys.denormalized_inverse, False)),
            link=link,
            inverse=definition.get(keys.inverse),
            value_type=value_type,
        )


FieldDefinition = Union[FieldDescriptor, Mapping[str, Any]]
RecordTypes = Dict[str, Dict[str, FieldDescriptor]]


def build_fields(definitions: Mapping[str, FieldDefinition], keys: Keys = Keys()) -> Dict[str, FieldDescriptor]:
    """
    Resolve the field definitions of a single record type, keeping their
    declaration order.

    Args:
        definitions: A mapping of field name to raw definition or descriptor.
        keys: The key names used in the raw definitions.

    Returns:
        An ordered dict of field name to `FieldDescriptor`.
    """
    fields = {}
    for name, definition in definitions.items():
        if isinstance(definition, FieldDescriptor):
            fields[name] = definition
        else:
            fields[name] = FieldDescriptor.from_definition(name, definition, keys)
    return fields


def build_record_types(raw: Mapping[str, Mapping[str, FieldDefinition]], keys: Keys = Keys()) -> RecordTypes:
    """
    Resolve every record type of a schema.

    Args:
        raw: A mapping of record type name to its field definitions.
        keys: The key names used in the raw definitions.

    Returns:
        A dict of record type name to its resolved fields.
    """
    record_types = {type_name: build_fields(definitions, keys) for type_name, definitions in raw.items()}
    LOG.debug(f"Resolved schema for record types: {list(record_types)}")
    return record_types
