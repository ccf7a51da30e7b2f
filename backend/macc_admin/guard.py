"""Client-side gate for protected pages.

This is a convenience redirect, not a security boundary: the backend still
rejects requests without a valid bearer token.
"""

import logging
from typing import Callable, Optional, TypeVar

from macc_admin import config
from macc_admin.session import Session

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SessionGuard:
    def __init__(self, session: Session, redirect: Callable[[str], None], login_url: str = config.LOGIN_URL):
        self.session = session
        self.redirect = redirect
        self.login_url = login_url

    @property
    def authorized(self) -> bool:
        return self.session.is_authenticated

    def mount(self, render: Callable[[], T]) -> Optional[T]:
        """Render the protected children, or redirect without rendering them."""
        if not self.authorized:
            logger.info("No session token, redirecting to %s", self.login_url)
            self.redirect(self.login_url)
            return None
        return render()
