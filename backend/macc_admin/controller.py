"""Page-level owners of a resource collection.

A ListController holds the one authoritative in-memory copy of a
collection. It never patches that copy locally: every successful mutation
is followed by a full refetch, and a failed one leaves it untouched.
"""

import logging
from typing import Any, Callable, Iterable, Mapping, Optional

from macc_admin import filters
from macc_admin.errors import AdminError
from macc_admin.models import APPLICATION_STATUSES, ROLES, Application, Career
from macc_admin.notify import Notifier
from macc_admin.resources import ApplicationsClient, CareersClient, ResourceClient, ServicesClient, UsersClient
from macc_admin.selection import Selection

logger = logging.getLogger(__name__)


def _failure_message(error: AdminError, fallback: str) -> str:
    """Server-supplied message when there is one, else the action's fallback."""
    return getattr(error, "server_message", None) or fallback


class ListController:
    """Loading -> Ready, re-entered only through fetch_data().

    `dimensions` maps a filter name to the function extracting the compared
    value from a row; every filter starts at filters.ALL.
    `search_key` extracts the text the free-text search box matches against;
    the search ANDs with the dropdown filters.
    """

    label = "items"  # plural, for list-level messages
    deleted_message = "Item deleted"
    delete_failed_message = "Failed to delete item"
    dimensions: Mapping[str, filters.Extractor] = {}
    search_key: Optional[filters.Extractor] = None

    def __init__(self, client: ResourceClient, notifier: Optional[Notifier] = None):
        self.client = client
        self.notifier = notifier or Notifier()
        self.items: list = []
        self.loading = False
        self.state = "idle"  # idle, loading, ready
        self.filters: dict[str, Any] = {name: filters.ALL for name in self.dimensions}
        self.query = ""
        self.selection = Selection()
        self.pending_delete: Optional[str] = None
        self.pending_bulk_delete = False

    # --- Loading ---

    def mount(self) -> bool:
        """Fresh page: start from an empty collection and fetch."""
        self.items = []
        self.selection.clear()
        return self.fetch_data()

    def fetch_data(self) -> bool:
        """Replace the collection wholesale with what list() returns."""
        self.loading = True
        self.state = "loading"
        try:
            items = self.client.list()
        except AdminError as e:
            logger.error("Failed to fetch %s: %s", self.label, getattr(e, "detail", None) or e)
            self.notifier.error(f"Failed to fetch {self.label}")
            return False
        else:
            self.items = list(items)
            self.selection.prune(self.items)
            return True
        finally:
            self.loading = False
            self.state = "ready"

    def find(self, id: str) -> Optional[Any]:
        return next((item for item in self.items if item.id == id), None)

    # --- Filters ---

    def set_filter(self, name: str, value: Any) -> None:
        if name not in self.dimensions:
            raise KeyError(f"Unknown filter: {name}")
        self.filters[name] = value

    def reset_filters(self) -> None:
        self.filters = {name: filters.ALL for name in self.dimensions}
        self.query = ""

    def search(self, query: str) -> None:
        if self.search_key is None:
            raise KeyError(f"{self.label} has no search")
        self.query = query or ""

    @property
    def filtered(self) -> list:
        rows = filters.apply_filters(self.items, self.dimensions, self.filters)
        if self.search_key is not None:
            rows = filters.search(rows, self.search_key, self.query)
        return rows

    def options(self, name: str) -> list:
        """Values to offer in the dropdown for filter `name`."""
        return filters.distinct_values(self.items, self.dimensions[name])

    def counts(self) -> dict[str, int]:
        return {"total": len(self.items)}

    # --- Mutations ---

    def run(self, call: Callable[[], Any], success: str, failure: str) -> bool:
        """Fire one mutation; refetch on success, change nothing on failure."""
        try:
            call()
        except AdminError as e:
            logger.error("%s: %s", failure, getattr(e, "detail", None) or e)
            self.notifier.error(_failure_message(e, failure))
            return False
        self.notifier.success(success)
        self.fetch_data()
        return True

    def request_delete(self, id: str) -> None:
        """Open the confirmation step. Nothing is sent yet."""
        self.pending_delete = id

    def cancel_delete(self) -> None:
        self.pending_delete = None

    def confirm_delete(self) -> bool:
        if self.pending_delete is None:
            return False
        id = self.pending_delete
        try:
            return self.run(
                lambda: self.client.delete(id),
                self.deleted_message,
                self.delete_failed_message,
            )
        finally:
            self.pending_delete = None

    # --- Bulk ---

    def request_bulk_delete(self) -> list[str]:
        """Open the confirmation step for the current selection.

        Returns the ids that would go; empty means nothing to confirm.
        """
        ids = self.selection.resolve(self.filtered)
        self.pending_bulk_delete = bool(ids)
        return ids

    def cancel_bulk_delete(self) -> None:
        self.pending_bulk_delete = False

    def confirm_bulk_delete(self) -> bool:
        """One batched call for the selected rows still in view."""
        if not self.pending_bulk_delete:
            return False
        self.pending_bulk_delete = False
        ids = self.selection.resolve(self.filtered)
        if not ids:
            return False
        try:
            self.client.bulk_delete(ids)
        except AdminError as e:
            logger.error("Bulk delete of %d %s failed: %s", len(ids), self.label, getattr(e, "detail", None) or e)
            self.notifier.error(_failure_message(e, f"Failed to delete selected {self.label}"))
            return False
        self.selection.clear()
        self.notifier.success(f"Deleted {len(ids)} {self.label}")
        self.fetch_data()
        return True


class ServicesController(ListController):
    label = "services"
    deleted_message = "Service Section deleted"
    delete_failed_message = "Failed to delete section"
    dimensions = {"status": filters.active_label}
    search_key = staticmethod(lambda s: s.header.title.en)

    client: ServicesClient

    def counts(self) -> dict[str, int]:
        counts = filters.activity_counts(self.items)
        counts["items"] = sum(len(s.services) for s in self.items)
        return counts


class CareersController(ListController):
    label = "careers"
    deleted_message = "Career deleted"
    delete_failed_message = "Failed to delete career"
    dimensions = {
        "department": lambda c: c.department.en,
        "location": lambda c: c.location.en,
        "status": filters.active_label,
    }
    search_key = staticmethod(lambda c: c.title.en)

    client: CareersClient

    def counts(self) -> dict[str, int]:
        return filters.activity_counts(self.items)

    def toggle(self, id: str) -> bool:
        return self.run(lambda: self.client.toggle_status(id), "Status updated", "Failed to update status")


class ApplicationsController(ListController):
    label = "applications"
    deleted_message = "Application deleted"
    delete_failed_message = "Failed to delete application"
    dimensions = {
        "job": lambda a: a.career_id,
        "status": lambda a: a.status,
    }
    search_key = staticmethod(lambda a: a.email)

    client: ApplicationsClient

    def counts(self) -> dict[str, int]:
        return filters.status_counts(self.items, APPLICATION_STATUSES)

    def update_status(self, id: str, status: str) -> bool:
        return self.run(
            lambda: self.client.update_status(id, status),
            f"Application status updated to {status}",
            "Failed to update status",
        )

    def resolved(self, careers: Iterable[Career]) -> list[Application]:
        """Filtered rows with career references populated where possible."""
        careers = list(careers)
        return [a.resolve(careers) for a in self.filtered]


class UsersController(ListController):
    label = "users"
    deleted_message = "User deleted successfully"
    delete_failed_message = "Failed to delete user"
    dimensions = {
        "role": lambda u: u.role,
        "status": filters.active_label,
    }
    search_key = staticmethod(lambda u: u.email)

    client: UsersClient

    def counts(self) -> dict[str, int]:
        counts = filters.activity_counts(self.items)
        by_role = filters.count_by(self.items, lambda u: u.role)
        for role in ROLES:
            counts[role] = by_role.get(role, 0)
        return counts
