"""Row selection for bulk actions, keyed by entity id.

Keying by id rather than row position means a refetch that reorders or
filters rows cannot retarget a pending bulk action at rows the user never
picked.
"""

from typing import Any, Iterable, Sequence


def _id(item: Any) -> str:
    return item.id


class Selection:
    def __init__(self):
        self._ids: set[str] = set()

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, id: str) -> bool:
        return id in self._ids

    @property
    def ids(self) -> frozenset[str]:
        return frozenset(self._ids)

    def select(self, *ids: str) -> None:
        self._ids.update(ids)

    def deselect(self, *ids: str) -> None:
        self._ids.difference_update(ids)

    def toggle(self, id: str) -> bool:
        """Flip one row. Returns the new state."""
        if id in self._ids:
            self._ids.discard(id)
            return False
        self._ids.add(id)
        return True

    def select_all(self, rows: Iterable[Any]) -> None:
        self._ids.update(_id(r) for r in rows)

    def clear(self) -> None:
        self._ids.clear()

    def prune(self, rows: Iterable[Any]) -> None:
        """Drop ids whose entities are gone from the collection."""
        self._ids.intersection_update(_id(r) for r in rows)

    def resolve(self, rows: Sequence[Any]) -> list[str]:
        """Selected ids present in `rows`, in row order."""
        return [_id(r) for r in rows if _id(r) in self._ids]
