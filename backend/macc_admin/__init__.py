"""Admin dashboard client for the MACC services backend."""

from macc_admin.http import URL as MACC_API_URL, HttpClient
from macc_admin.errors import AdminError, ApiError, UnsupportedOperation, ValidationFailed
from macc_admin.session import CookieJar, FileStorage, MemoryStorage, Session
from macc_admin.guard import SessionGuard
from macc_admin.notify import Notification, Notifier
from macc_admin.models import (
    # Shared
    Localized,
    ImageRef,
    # Resources
    ServiceSection,
    ServiceHeader,
    ServiceItem,
    Career,
    Application,
    UnresolvedCareer,
    ResolvedCareer,
    CvFile,
    User,
    DashboardStats,
)
from macc_admin.resources import (
    ServicesClient,
    CareersClient,
    ApplicationsClient,
    UsersClient,
    AuthClient,
    StatisticsClient,
    LoginResult,
)
from macc_admin.controller import (
    ListController,
    ServicesController,
    CareersController,
    ApplicationsController,
    UsersController,
)
from macc_admin.forms import (
    CareerForm,
    ServiceItemForm,
    ServiceItemsDialog,
    ServiceSectionForm,
    UserForm,
    lines_to_list,
    list_to_lines,
)
from macc_admin.pages import Dashboard

__all__ = [
    "MACC_API_URL",
    "HttpClient",
    # Errors
    "AdminError", "ApiError", "UnsupportedOperation", "ValidationFailed",
    # Session
    "CookieJar", "FileStorage", "MemoryStorage", "Session", "SessionGuard",
    "Notification", "Notifier",
    # Models
    "Localized", "ImageRef", "ServiceSection", "ServiceHeader", "ServiceItem",
    "Career", "Application", "UnresolvedCareer", "ResolvedCareer", "CvFile",
    "User", "DashboardStats",
    # Clients
    "ServicesClient", "CareersClient", "ApplicationsClient", "UsersClient",
    "AuthClient", "StatisticsClient", "LoginResult",
    # Pages
    "ListController", "ServicesController", "CareersController",
    "ApplicationsController", "UsersController",
    "CareerForm", "ServiceItemForm", "ServiceItemsDialog", "ServiceSectionForm", "UserForm",
    "lines_to_list", "list_to_lines",
    "Dashboard",
]
