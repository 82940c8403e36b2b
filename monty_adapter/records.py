##############################################################################
# Copyright (c) monty-adapter project developers.
# Released under the MIT license. No copyright assignment is required to
# contribute to monty-adapter.
##############################################################################

"""
Containers for records handed back to the ORM layer.

`Record` is a dict whose denormalized inverse fields are kept in a side
mapping: they can be read by name but are not part of the record's own
fields, so iterating, comparing or copying a record never includes them.
`ResultList` is a list of records that also carries the total match count
of the query that produced it.
"""

from typing import Any, Dict, Iterable, Optional


class Record(dict):
    """
    A record as returned by the adapter.

    Attributes:
        denormalized: Values of denormalized inverse fields. These are readable
            through `record[name]`, `record.get(name)` and `name in record`,
            but excluded from iteration, `len`, `keys`, `items`, `values`,
            equality and `dict(record)`.

    Methods:
        set_denormalized: Attach a denormalized field value to the record.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.denormalized: Dict[str, Any] = {}

    def set_denormalized(self, field: str, value: Any):
        """
        Attach a value that must not be enumerated as an own field.

        Args:
            field: The name of the field.
            value: The value of the field.
        """
        self.denormalized[field] = value

    def __missing__(self, key: str) -> Any:
        if key in self.denormalized:
            return self.denormalized[key]
        raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        return super().__contains__(key) or key in self.denormalized

    def get(self, key: str, default: Any = None) -> Any:
        if super().__contains__(key):
            return super().__getitem__(key)
        return self.denormalized.get(key, default)

    def copy(self) -> "Record":
        clone = Record(self)
        clone.denormalized = dict(self.denormalized)
        return clone

    def __repr__(self) -> str:
        return f"Record({super().__repr__()})"


class ResultList(list):
    """
    A list of records that also exposes the total number of records matched
    by the query, regardless of any offset or limit.

    Attributes:
        count: The number of records matching the query.
    """

    def __init__(self, records: Optional[Iterable[Record]] = None, count: int = 0):
        super().__init__(records or [])
        self.count: int = count
