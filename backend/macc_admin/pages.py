"""
Dashboard pages for the terminal front end.

A Dashboard wires one session, one HTTP client and one notifier into every
resource client, and hands out a fresh controller per page mount.
The formatters below render rows as terse pipe-delimited lines.

Usage:
    from macc_admin import Dashboard

    dash = Dashboard()
    dash.sign_in("admin@macc-fm.com", "secret")

    page = dash.careers_page()
    page.mount()
    page.set_filter("status", "active")
    for career in page.filtered:
        print(fmt_career(career))
"""

from __future__ import annotations

import logging
from typing import Optional

from macc_admin.controller import ApplicationsController, CareersController, ServicesController, UsersController
from macc_admin.errors import AdminError, ApiError
from macc_admin.forms import CareerForm, ServiceItemsDialog, ServiceSectionForm, UserForm
from macc_admin.guard import SessionGuard
from macc_admin.http import HttpClient
from macc_admin.models import Application, Career, DashboardStats, ServiceItem, ServiceSection, User
from macc_admin.notify import Notifier
from macc_admin.resources import (
    ApplicationsClient,
    AuthClient,
    CareersClient,
    LoginResult,
    ServicesClient,
    StatisticsClient,
    UsersClient,
)
from macc_admin.session import Session

logger = logging.getLogger(__name__)


# --- Terse Output Formatters ---


def _sanitize(s: Optional[str]) -> str:
    """Replace pipe delimiters and newlines in source data."""
    return (s or "").replace("|", "-").replace("\n", " ")


def _flag(active: bool) -> str:
    return "on" if active else "off"


def fmt_service(s: ServiceSection) -> str:
    return "|".join([
        s.id,
        _sanitize(s.header.title.en),
        _sanitize(s.header.title.ar),
        f"items={len(s.services)}",
        _flag(s.is_active),
    ])


def fmt_item(i: ServiceItem) -> str:
    return "|".join([
        i.id or "-",
        str(i.order),
        _sanitize(i.title.en),
        _sanitize(i.category.en),
        "img" if i.image else "-",
    ])


def fmt_career(c: Career) -> str:
    return "|".join([
        c.id,
        _sanitize(c.title.en),
        _sanitize(c.department.en),
        _sanitize(c.location.en),
        _sanitize(c.employment_type.en),
        _flag(c.is_active),
    ])


def fmt_application(a: Application) -> str:
    """Career title when resolved, else the bare career id."""
    job = _sanitize(a.resolved_career().title.en) if a.is_resolved else (a.career_id or "-")
    return "|".join([
        a.id,
        _sanitize(a.full_name),
        a.email,
        _sanitize(a.phone) or "-",
        job,
        a.status,
        "cv" if a.cv else "-",
    ])


def fmt_user(u: User) -> str:
    return "|".join([
        u.id,
        _sanitize(u.username),
        u.email,
        u.role,
        _flag(u.is_active),
    ])


def fmt_counts(counts: dict[str, int]) -> str:
    return " | ".join(f"{k}: {v}" for k, v in counts.items())


def fmt_career_detail(c: Career) -> str:
    lines = [
        f"# {c.title.en} / {c.title.ar}",
        f"{c.department.en} | {c.location.en} | {c.employment_type.en} | {_flag(c.is_active)}",
    ]
    if c.short_description and c.short_description.en:
        lines += ["", c.short_description.en]
    if c.description and c.description.en:
        lines += ["", c.description.en]
    for title, group in (("Responsibilities", c.responsibilities), ("Requirements", c.requirements)):
        if group and group.en:
            lines += ["", f"{title}:"] + [f"- {line}" for line in group.en]
    return "\n".join(lines)


# --- Wiring ---


class Dashboard:
    """One signed-in (or not yet signed-in) dashboard session."""

    def __init__(
        self,
        session: Optional[Session] = None,
        http: Optional[HttpClient] = None,
        notifier: Optional[Notifier] = None,
    ):
        self.session = session if session is not None else Session.from_disk()
        self.http = http if http is not None else HttpClient(self.session)
        self.notifier = notifier if notifier is not None else Notifier()

        self.auth = AuthClient(self.http)
        self.services = ServicesClient(self.http)
        self.careers = CareersClient(self.http)
        self.applications = ApplicationsClient(self.http)
        self.users = UsersClient(self.http)
        self.statistics = StatisticsClient(self.http)

    def guard(self, redirect) -> SessionGuard:
        return SessionGuard(self.session, redirect)

    # --- Pages ---

    def services_page(self) -> ServicesController:
        return ServicesController(self.services, self.notifier)

    def careers_page(self) -> CareersController:
        return CareersController(self.careers, self.notifier)

    def applications_page(self) -> ApplicationsController:
        return ApplicationsController(self.applications, self.notifier)

    def users_page(self) -> UsersController:
        return UsersController(self.users, self.notifier)

    # --- Dialogs ---

    def service_form(self, page: ServicesController) -> ServiceSectionForm:
        return ServiceSectionForm(self.services, self.notifier, on_success=page.fetch_data)

    def service_items(self, page: ServicesController, section: ServiceSection) -> ServiceItemsDialog:
        return ServiceItemsDialog(page, section)

    def career_form(self, page: CareersController) -> CareerForm:
        return CareerForm(self.careers, self.notifier, on_success=page.fetch_data)

    def user_form(self, page: UsersController) -> UserForm:
        return UserForm(self.users, self.notifier, on_success=page.fetch_data)

    # --- Home ---

    def stats(self) -> DashboardStats:
        """Counts for the home cards. A failed fetch shows zeros."""
        try:
            return self.statistics.fetch()
        except AdminError as e:
            logger.error("Failed to fetch dashboard stats: %s", getattr(e, "detail", None) or e)
            return DashboardStats()

    # --- Auth ---

    def sign_in(self, email: str, password: str) -> Optional[LoginResult]:
        """Log in and persist the token to local storage and cookie."""
        try:
            result = self.auth.login(email, password)
        except AdminError as e:
            logger.error("Login failed: %s", getattr(e, "detail", None) or e)
            self.notifier.error(getattr(e, "server_message", None) or "Invalid email or password")
            return None
        self.session.write(result.token, result.user)
        self.notifier.success("Login successful")
        return result

    def sign_out(self) -> None:
        """Tell the backend, then drop the local session whatever it answered."""
        token = self.session.token
        try:
            if token:
                self.auth.logout(token)
        except ApiError as e:
            logger.warning("Logout call failed: %s", e.detail or e.message)
        finally:
            self.session.clear()
        self.notifier.success("Logged out")

    def forgot_password(self, email: str) -> bool:
        try:
            self.auth.forgot_password(email)
        except AdminError as e:
            logger.error("Forgot password failed: %s", getattr(e, "detail", None) or e)
            self.notifier.error(getattr(e, "server_message", None) or "Failed to send reset link")
            return False
        self.notifier.success("Reset link sent to your email")
        return True

    def reset_password(self, token: str, new_password: str) -> bool:
        try:
            self.auth.reset_password(token, new_password)
        except AdminError as e:
            logger.error("Reset password failed: %s", getattr(e, "detail", None) or e)
            self.notifier.error(getattr(e, "server_message", None) or "Failed to reset password")
            return False
        self.notifier.success("Password reset successfully")
        return True

    def change_password(self, new_password: str, email: Optional[str] = None) -> bool:
        """Change the password of `email`, defaulting to the signed-in user."""
        email = email or (self.session.user or {}).get("email")
        if not email:
            self.notifier.error("No email for password change")
            return False
        try:
            self.auth.change_password(email, new_password)
        except AdminError as e:
            logger.error("Change password failed: %s", getattr(e, "detail", None) or e)
            self.notifier.error(getattr(e, "server_message", None) or "Failed to change password")
            return False
        self.notifier.success("Password changed successfully")
        return True
