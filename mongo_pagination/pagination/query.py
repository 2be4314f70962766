"""Range filters that seek past a cursor under a multi-key sort.

For a sort ``k0, k1, ..., kn`` and a cursor with values ``v0 .. vn`` the
range predicate is the lexicographic keyset condition::

    $or: [
        {k0: {cmp0: v0}},
        {k0: v0, k1: {cmp1: v1}},
        ...
        {k0: v0, ..., kn: {cmpn: vn}},
    ]

``cmp`` is ``$gt`` when the key sorts ascending and the cursor seeks forward
(or descending and backward), ``$lt`` otherwise.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from ..constants import TIE_BREAKER_FIELD
from ..errors.problem_details import InvalidCursor
from .cursor import DirectedCursor, is_backward


logger = logging.getLogger(__name__)


def comparison_operator(direction: int, cursor: DirectedCursor) -> str:
    """Comparator selecting documents beyond the cursor for one sort key."""
    ascending = direction >= 0
    return "$gt" if ascending != is_backward(cursor) else "$lt"


def build_range_clauses(
    sort: Sequence[Tuple[str, int]],
    cursor: DirectedCursor,
    tie_breaker: str = TIE_BREAKER_FIELD
) -> List[Dict[str, Any]]:
    """Build one clause per sort key, without the caller's filter.

    Raises:
        InvalidCursor: If a single-key sort's field is missing from the cursor
    """
    if len(sort) == 1:
        field, direction = sort[0]
        if field not in cursor.edge:
            raise InvalidCursor(
                f"Cursor is missing the '{field}' key",
                missing_field=field
            )
        if field != tie_breaker:
            logger.debug(f"Single-key sort on '{field}' is not the tie-breaker '{tie_breaker}'")
        return [{field: {comparison_operator(direction, cursor): cursor.get(field)}}]

    clauses = []
    previous: Dict[str, Any] = {}
    for field, direction in sort:
        value = cursor.get(field)
        clause = dict(previous)
        clause[field] = {comparison_operator(direction, cursor): value}
        clauses.append(clause)
        previous[field] = value
    return clauses


def build_range_filter(
    filter: Optional[Mapping[str, Any]],
    sort: Sequence[Tuple[str, int]],
    cursor: Optional[DirectedCursor],
    tie_breaker: str = TIE_BREAKER_FIELD
) -> Dict[str, Any]:
    """Build the filter to execute for a page.

    Args:
        filter: Caller filter, left untouched
        sort: Declared sort of the query, not inverted for backward cursors
        cursor: Optional cursor to seek from
        tie_breaker: Field guaranteed unique per document

    Returns:
        Filter restricted to documents beyond the cursor

    Raises:
        InvalidCursor: If the cursor cannot seek under this sort
    """
    base = dict(filter or {})
    if cursor is None or not sort:
        return base

    clauses = build_range_clauses(sort, cursor, tie_breaker)

    sort_fields = {field for field, _direction in sort}
    overlap = sort_fields.intersection(base)
    if overlap:
        # Inlining would overwrite the caller's own condition on these fields
        logger.debug(f"Filter constrains sort fields {sorted(overlap)}, combining with $and")
        predicate = clauses[0] if len(clauses) == 1 else {"$or": clauses}
        return {"$and": [base, predicate]}

    clauses = [{**base, **clause} for clause in clauses]
    if len(clauses) == 1:
        return clauses[0]
    return {"$or": clauses}
