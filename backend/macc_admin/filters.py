"""Pure filters and summary counts over a resource collection.

Nothing here mutates its input; views are recomputed from the
authoritative collection every time they are asked for.
"""

from typing import Any, Callable, Iterable, Mapping, Sequence, TypeVar

T = TypeVar("T")

ALL = "all"

Extractor = Callable[[Any], Any]


def distinct_values(items: Iterable[T], key: Extractor) -> list:
    """Distinct non-empty values of `key` across `items`, sorted."""
    return sorted({v for v in (key(item) for item in items) if v not in (None, "")})


def matches(item: Any, dimensions: Mapping[str, Extractor], selected: Mapping[str, Any]) -> bool:
    """AND across dimensions; a dimension set to ALL (or unset) always passes."""
    for name, key in dimensions.items():
        value = selected.get(name, ALL)
        if value == ALL:
            continue
        if key(item) != value:
            return False
    return True


def apply_filters(items: Sequence[T], dimensions: Mapping[str, Extractor], selected: Mapping[str, Any]) -> list[T]:
    """Subset of `items` passing every active dimension, in original order."""
    return [item for item in items if matches(item, dimensions, selected)]


def search(items: Sequence[T], key: Extractor, query: str) -> list[T]:
    """Rows whose `key` text contains `query`, ignoring case.

    A blank query keeps every row; a row whose key is missing never matches.
    """
    needle = (query or "").strip().casefold()
    if not needle:
        return list(items)
    return [item for item in items if needle in str(key(item) or "").casefold()]


def count_by(items: Iterable[T], key: Extractor) -> dict:
    counts: dict = {}
    for item in items:
        value = key(item)
        counts[value] = counts.get(value, 0) + 1
    return counts


def activity_counts(items: Sequence[Any]) -> dict[str, int]:
    """Total / active / inactive for records with an `is_active` flag."""
    active = sum(1 for item in items if item.is_active)
    return {"total": len(items), "active": active, "inactive": len(items) - active}


def status_counts(items: Sequence[Any], statuses: Sequence[str]) -> dict[str, int]:
    """Per-status counts with every known status present, plus total."""
    counts = count_by(items, lambda item: item.status)
    result = {"total": len(items)}
    for status in statuses:
        result[status] = counts.get(status, 0)
    return result


def active_label(item: Any) -> str:
    return "active" if item.is_active else "inactive"
