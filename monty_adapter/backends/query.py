##############################################################################
# Copyright (c) monty-adapter project developers.
# Released under the MIT license. No copyright assignment is required to
# contribute to monty-adapter.
##############################################################################

"""
Translation of ORM query options into the store's native filter documents.

The ORM describes queries with a small tree of option keys:

- `and` / `or`: named sub-queries combined with a boolean combinator.
- `not`: a sub-query whose comparisons are inverted.
- `match`: field equality, or membership when the value is a sequence.
- `range`: lower/upper bounds, or length bounds for array fields.
- `exists`: whether a field holds a value (or a non-empty array).

`generate_query` compiles that tree into a MongoDB-style filter document, and
`find_options` extracts the projection, sort, skip and limit that apply to the
find call only.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from monty_adapter.backends.utils import cast_value
from monty_adapter.schema import FieldDescriptor
from monty_adapter.utils import is_sequence, map_values


LOG = logging.getLogger(__name__)

COMBINATORS = {"and": "$and", "or": "$or"}


@dataclass
class FindOptions:
    """
    Options that shape the result of a find call but not its count.

    Attributes:
        projection: Fields to include (1) or exclude (0), or None for all fields.
        sort: Ordered (field, direction) pairs, 1 ascending and -1 descending.
        skip: Number of matching records to skip.
        limit: Maximum number of records to return.
    """

    projection: Optional[Dict[str, int]] = None
    sort: Optional[List[Tuple[str, int]]] = None
    skip: Optional[int] = None
    limit: Optional[int] = None


def find_options(options: Mapping[str, Any]) -> FindOptions:
    """
    Extract the projection, sort, skip and limit from ORM query options.

    Args:
        options: The ORM query options.

    Returns:
        The options to apply to the find call.
    """
    result = FindOptions()

    if "fields" in options:
        result.projection = map_values(options["fields"], lambda value, _: 1 if value else 0)

    if "sort" in options:
        result.sort = list(map_values(options["sort"], lambda value, _: 1 if value else -1).items())

    if "offset" in options:
        result.skip = options["offset"]

    if "limit" in options:
        result.limit = options["limit"]

    return result


def _sub_queries(value: Any) -> List[Mapping[str, Any]]:
    """Sub-queries of an `and`/`or` key, given either by name or as a list."""
    if isinstance(value, Mapping):
        return list(value.values())
    return list(value)


def generate_range_query(fields: Mapping[str, FieldDescriptor], ranges: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Translate range bounds into a filter clause.

    Array fields are bounded by length: a lower bound `n` requires index
    `n - 1` to exist and an upper bound `m` requires index `m` to be absent.
    Scalar fields must be non-null and within the inclusive bounds. Either
    bound may be None. Fields that are not in the schema are ignored.

    Args:
        fields: The schema of the queried record type.
        ranges: A mapping of field name to `[lower, upper]`.

    Returns:
        The filter clause, empty if nothing applied.
    """
    clause = {}

    for field, bounds in ranges.items():
        descriptor = fields.get(field)
        if descriptor is None:
            continue

        lower, upper = (list(bounds) + [None, None])[:2]

        if descriptor.is_array:
            if lower is not None and lower > 0:
                clause[f"{field}.{lower - 1}"] = {"$exists": True}
            if upper is not None:
                clause[f"{field}.{upper}"] = {"$exists": False}
            continue

        condition = {"$ne": None}
        if lower is not None:
            condition["$gte"] = cast_value(lower)
        if upper is not None:
            condition["$lte"] = cast_value(upper)
        clause[field] = condition

    return clause


def generate_match_query(matches: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Translate field matches into a filter clause.

    Args:
        matches: A mapping of field name to a value, or to a sequence of
            acceptable values.

    Returns:
        The filter clause.
    """
    clause = {}

    for field, value in matches.items():
        if is_sequence(value):
            clause[field] = {"$in": [cast_value(item) for item in value]}
        else:
            clause[field] = cast_value(value)

    return clause


def generate_exists_query(fields: Mapping[str, FieldDescriptor], exists: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Translate existence checks into a filter clause.

    An array field exists when it is not empty, a scalar field exists when it
    is not null. Fields that are not in the schema are ignored.

    Args:
        fields: The schema of the queried record type.
        exists: A mapping of field name to True (must exist) or False (must not).

    Returns:
        The filter clause, empty if nothing applied.
    """
    clause = {}

    for field, should_exist in exists.items():
        descriptor = fields.get(field)
        if descriptor is None:
            continue

        empty = [] if descriptor.is_array else None
        clause[field] = {"$ne": empty} if should_exist else {"$eq": empty}

    return clause


def _negate_condition(condition: Any) -> Dict[str, Any]:
    """Invert the condition placed on a single field."""
    if not isinstance(condition, Mapping):
        return {"$nin": [condition]}
    if list(condition) == ["$in"]:
        return {"$nin": condition["$in"]}
    return {"$not": dict(condition)}


def _negate_fields(clause: Mapping[str, Any]) -> Dict[str, Any]:
    """Invert each field condition of a clause, leaving combinators as they are."""
    return {key: value if key.startswith("$") else _negate_condition(value) for key, value in clause.items()}


def negate_clause(clause: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Shallowly invert a compiled clause.

    Field conditions are inverted one by one. For `$and`/`$or` keys the
    combinator is kept and the field conditions of each member are inverted;
    combinators nested inside those members are left untouched.

    Args:
        clause: A compiled filter clause.

    Returns:
        The inverted clause.
    """
    negated = {}

    for key, value in clause.items():
        if key in COMBINATORS.values():
            negated[key] = [_negate_fields(member) for member in value]
        elif key.startswith("$"):
            negated[key] = value
        else:
            negated[key] = _negate_condition(value)

    return negated


def generate_query(fields: Mapping[str, FieldDescriptor], options: Mapping[str, Any], negate: bool = False) -> Dict:
    """
    Compile ORM query options into a native filter document.

    Each recognised key produces one clause. When `negate` is set, the clauses
    compiled at this level are inverted with `negate_clause`; a nested `not`
    is compiled with the opposite polarity instead. `and`/`or` sub-queries are
    always compiled un-negated. Unrecognised keys are ignored.

    Args:
        fields: The schema of the queried record type.
        options: The ORM query options.
        negate: Whether the clauses compiled at this level must be inverted.

    Returns:
        `{}` when nothing applies, the only clause when there is one, or a
        `$and` of all clauses otherwise.
    """
    clauses = []

    for key, value in options.items():
        clause = None
        if key in COMBINATORS:
            sub_clauses = [generate_query(fields, sub_query) for sub_query in _sub_queries(value)]
            clause = {COMBINATORS[key]: sub_clauses}
        elif key == "not":
            # Already compiled with the flipped polarity
            clauses.append(generate_query(fields, value, not negate))
        elif key == "range":
            clause = generate_range_query(fields, value)
        elif key == "match":
            clause = generate_match_query(value)
        elif key == "exists":
            clause = generate_exists_query(fields, value)

        if clause is not None:
            clauses.append(negate_clause(clause) if negate else clause)

    clauses = [clause for clause in clauses if clause]

    if not clauses:
        query = {}
    elif len(clauses) == 1:
        query = clauses[0]
    else:
        query = {"$and": clauses}

    LOG.debug(f"Compiled query options {list(options)} into {query}")
    return query


def generate_update(update: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Translate an ORM update item into a native update document.

    `replace` becomes `$set`, `push` becomes `$push` (sequences are appended
    element-wise with `$each`) and `pull` becomes `$pull` (sequences remove
    any matching element with `$in`). Operators given in `operate` are merged
    last and win on collision.

    Args:
        update: The ORM update item.

    Returns:
        The update document, empty if the item changes nothing.
    """
    modifiers = {}

    if "replace" in update:
        modifiers["$set"] = dict(update["replace"])

    if "push" in update:
        modifiers["$push"] = map_values(
            update["push"], lambda value, _: {"$each": list(value)} if is_sequence(value) else value
        )

    if "pull" in update:
        modifiers["$pull"] = map_values(
            update["pull"], lambda value, _: {"$in": list(value)} if is_sequence(value) else value
        )

    # Custom update operators have precedence
    modifiers.update(update.get("operate") or {})

    return modifiers
