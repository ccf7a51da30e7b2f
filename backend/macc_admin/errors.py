"""Exceptions raised by the dashboard client."""

from typing import Optional

FALLBACK_MESSAGE = "Something went wrong"


class AdminError(Exception):
    """Base class for dashboard client failures."""
    pass


class ApiError(AdminError):
    """A backend call failed: non-2xx status, unreadable body, or transport error.

    `message` is what the server said when it said anything, else the
    generic fallback. `detail` keeps the raw excerpt for logs.
    """

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        code: str = "HTTP_ERROR",
        detail: Optional[str] = None,
    ):
        self.server_message = message
        self.message = message or FALLBACK_MESSAGE
        self.status_code = status_code
        self.code = code
        self.detail = detail
        super().__init__(self.message)

    @property
    def unauthorized(self) -> bool:
        return self.status_code == 401


class ValidationFailed(AdminError):
    """Draft failed its schema. Raised before any network call."""

    def __init__(self, errors: dict[str, str]):
        self.errors = errors
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()))


class UnsupportedOperation(AdminError):
    """The backend exposes no endpoint for this operation on this resource."""
    pass
