"""Helpers for relation values stored on documents.

A relation is stored either as a bare id (int or str) or as a populated
document carrying an ``id``. Ids are compared by their string form.
"""

from typing import Any, Iterable


def get_relation_id(value: Any) -> int | str | None:
    """Extract the id from a relation value, or None if it holds no id."""
    if value is None or value == '' or isinstance(value, bool):
        return None
    if isinstance(value, (int, str)):
        return value
    if isinstance(value, dict):
        return get_relation_id(value.get('id'))
    return None


def same_id(a: Any, b: Any) -> bool:
    """True when both ids are present and equal by string form."""
    return a is not None and b is not None and str(a) == str(b)


def same_nullable_id(a: Any, b: Any) -> bool:
    """Like same_id, but two missing ids also count as equal."""
    return (a is None and b is None) or same_id(a, b)


def unique_ids(values: Iterable[Any]) -> list[int | str]:
    """Return relation ids in first-seen order, without string-form duplicates."""
    seen: dict[str, int | str] = {}
    for value in values:
        rid = get_relation_id(value)
        if rid is None:
            continue
        seen.setdefault(str(rid), rid)
    return list(seen.values())
