##############################################################################
# Copyright (c) monty-adapter project developers.
# Released under the MIT license. No copyright assignment is required to
# contribute to monty-adapter.
##############################################################################

"""
Record conversion utilities for the adapter's backends.

These utilities convert ORM records into documents the embedded store can
persist and convert stored documents back into ORM records. The store keys
every document by `_id` and has no binary type, so the primary key is renamed
in both directions and blob fields travel as base64 text.
"""

import base64
import logging
import secrets
from typing import Any, Dict, Mapping

from monty_adapter.records import Record
from monty_adapter.schema import ID_KEY, FieldDescriptor, Keys, RecordTypes


LOG = logging.getLogger(__name__)

BLOB_ENCODING = "ascii"

# 15 random bytes encode to exactly 20 URL-safe characters
ID_BYTES = 15


def generate_id() -> str:
    """
    Generate a new record identifier.

    Returns:
        A 20 character URL-safe string carrying 120 bits of randomness.
    """
    return secrets.token_urlsafe(ID_BYTES)


def to_text(blob: bytes) -> str:
    """
    Encode a blob as base64 text.

    Args:
        blob: The binary value to encode.

    Returns:
        The base64 representation of `blob`.
    """
    return base64.b64encode(bytes(blob)).decode(BLOB_ENCODING)


def to_blob(text: str) -> bytes:
    """
    Decode base64 text produced by `to_text`.

    Args:
        text: The base64 text to decode.

    Returns:
        The original binary value.
    """
    return base64.b64decode(text.encode(BLOB_ENCODING))


def cast_value(value: Any) -> Any:
    """
    Cast values the store has no native support for.

    Args:
        value: Any value used in a document or a filter.

    Returns:
        Base64 text if `value` is a blob, otherwise `value` itself.
    """
    if isinstance(value, (bytes, bytearray, memoryview)):
        return to_text(value)
    return value


def _uncast_value(value: Any) -> Any:
    """Inverse of `cast_value` for values read from a blob field."""
    if isinstance(value, str):
        return to_blob(value)
    return value


def _encode_blob_field(descriptor: FieldDescriptor, value: Any) -> Any:
    if descriptor.is_array:
        return [cast_value(item) for item in value]
    return cast_value(value)


def _decode_blob_field(descriptor: FieldDescriptor, value: Any) -> Any:
    if descriptor.is_array:
        return [_uncast_value(item) for item in value]
    return _uncast_value(value)


def input_record(record_types: RecordTypes, keys: Keys, type_name: str, record: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Convert an ORM record into a document the store can persist.

    The primary key becomes `_id` (a new identifier is generated when it is
    missing or falsy), every other field is copied as-is, declared fields that
    are missing default to `[]` or `None`, and blob fields are base64 encoded.
    Fields that are not declared in the schema are passed through unchanged.

    Args:
        record_types: The resolved schema of every record type.
        keys: The ORM's special key names.
        type_name: The record type of `record`.
        record: The ORM record to convert.

    Returns:
        A new document ready to be inserted.
    """
    fields = record_types[type_name]
    clone = {}

    record_id = record.get(keys.primary)
    clone[ID_KEY] = record_id if record_id else generate_id()

    for field, value in record.items():
        if field == keys.primary:
            continue
        clone[field] = value

    for name, descriptor in fields.items():
        if name not in record:
            clone[name] = [] if descriptor.is_array else None
            continue

        if descriptor.is_blob and record[name]:
            clone[name] = _encode_blob_field(descriptor, record[name])

    LOG.debug(f"Converted {type_name} record '{clone[ID_KEY]}' for storage.")
    return clone


def output_record(record_types: RecordTypes, keys: Keys, type_name: str, document: Mapping[str, Any]) -> Record:
    """
    Convert a stored document back into an ORM record.

    `_id` becomes the primary key, fields that are not declared in the schema
    are dropped, blob fields are base64 decoded, and denormalized inverse
    fields are attached without being enumerable.

    Args:
        record_types: The resolved schema of every record type.
        keys: The ORM's special key names.
        type_name: The record type of `document`.
        document: The stored document to convert.

    Returns:
        The ORM record.
    """
    fields = record_types[type_name]
    clone = Record()

    clone[keys.primary] = document.get(ID_KEY)

    for field, value in document.items():
        descriptor = fields.get(field)
        if descriptor is None:
            continue

        if descriptor.is_blob and value:
            clone[field] = _decode_blob_field(descriptor, value)
            continue

        if descriptor.denormalized_inverse:
            clone.set_denormalized(field, value)
            continue

        clone[field] = value

    return clone
