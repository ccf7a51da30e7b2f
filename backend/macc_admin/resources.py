"""Typed clients for the dashboard's REST resources.

Each client turns domain operations into exactly one HTTP call and parses
the response envelope into models. Failures surface as ApiError, whether
the HTTP layer raised it or a body could not be parsed; nothing retries.
"""

from __future__ import annotations

import mimetypes
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ValidationError

from macc_admin.errors import ApiError, UnsupportedOperation, ValidationFailed
from macc_admin.http import HttpClient
from macc_admin.models import (
    APPLICATION_STATUSES,
    Application,
    Career,
    DashboardStats,
    ServiceSection,
    User,
    WireModel,
)


def _form_value(value: Any) -> str:
    """Multipart fields are strings; booleans go over as "true"/"false"."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _validate(model: type[BaseModel], data: Any):
    """Parse one record; a body the models cannot read is an invalid response."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ApiError(code="INVALID_RESPONSE", detail=f"Unreadable {model.__name__}: {e}") from e


def _image_file(image: Path) -> tuple:
    image = Path(image)
    mime = mimetypes.guess_type(image.name)[0] or "application/octet-stream"
    return (image.name, image.read_bytes(), mime)


class ResourceClient:
    """list / get / create / update / delete / bulk_delete for one collection.

    Subclasses fill in paths and envelope keys; a path left as None means the
    backend has no such endpoint and the call raises UnsupportedOperation.
    """

    model: type[WireModel]
    name: str = "resource"

    list_path: Optional[str] = None
    list_key: str = ""
    get_path: Optional[str] = None  # formatted with id=
    item_key: str = ""
    create_path: Optional[str] = None
    update_path: Optional[str] = None
    delete_path: Optional[str] = None
    bulk_delete_path: Optional[str] = None
    multipart: bool = False

    def __init__(self, http: HttpClient):
        self.http = http

    # --- Envelope helpers ---

    def _parse(self, data: Any):
        return _validate(self.model, data)

    def _unwrap_list(self, body: Any) -> list:
        if isinstance(body, list):
            return body
        if not isinstance(body, dict):
            return []
        return body.get(self.list_key) or []

    def _unwrap_one(self, body: Any):
        if isinstance(body, dict) and body.get(self.item_key) is not None:
            return body[self.item_key]
        return body

    def _parse_optional(self, body: Any):
        """Mutations echo the entity under `item_key`; tolerate its absence."""
        if isinstance(body, dict) and body.get(self.item_key):
            return self._parse(body[self.item_key])
        return None

    def _encode(self, payload: dict, image: Optional[Path] = None) -> dict:
        """Request kwargs: JSON body, or multipart when an image may ride along."""
        if not self.multipart:
            return {"json": payload}
        kwargs: dict[str, Any] = {
            "data": {k: _form_value(v) for k, v in payload.items() if v is not None},
        }
        if image is not None:
            kwargs["files"] = {"image": _image_file(image)}
        return kwargs

    def _require(self, path: Optional[str], operation: str) -> str:
        if path is None:
            raise UnsupportedOperation(f"{self.name} does not support {operation}")
        return path

    # --- Operations ---

    def list(self) -> list:
        body = self.http.get(self._require(self.list_path, "list"))
        return [self._parse(d) for d in self._unwrap_list(body)]

    def get(self, id: str):
        body = self.http.get(self._require(self.get_path, "get").format(id=id))
        return self._parse(self._unwrap_one(body))

    def create(self, payload: dict, image: Optional[Path] = None):
        body = self.http.post(self._require(self.create_path, "create"), **self._encode(payload, image))
        return self._parse_optional(body)

    def update(self, id: str, payload: dict, image: Optional[Path] = None):
        path = self._require(self.update_path, "update").format(id=id)
        body = self.http.put(path, **self._encode(payload, image))
        return self._parse_optional(body)

    def delete(self, id: str) -> None:
        self.http.delete(self._require(self.delete_path, "delete").format(id=id))

    def bulk_delete(self, ids: list[str]) -> None:
        self.http.post(self._require(self.bulk_delete_path, "bulk delete"), json={"ids": list(ids)})


# --- Services ---


class ServicesClient(ResourceClient):
    model = ServiceSection
    name = "services"
    list_path = "/services"
    list_key = "services"
    get_path = "/services/{id}"
    item_key = "service"
    create_path = "/services/add"
    update_path = "/services/{id}"
    delete_path = "/services/{id}"
    bulk_delete_path = "/services/multy"
    multipart = True

    # Items live under their section; every call returns the updated section as `data`

    def _section(self, body: Any) -> Optional[ServiceSection]:
        data = body.get("data") if isinstance(body, dict) else None
        return _validate(ServiceSection, data) if data else None

    def add_item(self, section_id: str, payload: dict, image: Optional[Path] = None) -> Optional[ServiceSection]:
        body = self.http.post(f"/services/{section_id}/items", **self._encode(payload, image))
        return self._section(body)

    def update_item(
        self, section_id: str, item_id: str, payload: dict, image: Optional[Path] = None
    ) -> Optional[ServiceSection]:
        body = self.http.put(f"/services/{section_id}/items/{item_id}", **self._encode(payload, image))
        return self._section(body)

    def delete_item(self, section_id: str, item_id: str) -> Optional[ServiceSection]:
        body = self.http.delete(f"/services/{section_id}/items/{item_id}")
        return self._section(body)


# --- Careers ---


class CareersClient(ResourceClient):
    model = Career
    name = "careers"
    list_path = "/careers"
    list_key = "careers"
    get_path = "/careers/one/{id}"
    item_key = "career"
    create_path = "/careers/create"
    update_path = "/careers/{id}"
    delete_path = "/careers/{id}"
    bulk_delete_path = "/careers/bulk-delete"

    def toggle_status(self, id: str) -> None:
        self.http.patch(f"/careers/{id}/toggle")


# --- Applications ---


class ApplicationsClient(ResourceClient):
    """Applications are submitted by the public site; staff only review them."""

    model = Application
    name = "applications"
    list_path = "/applications"
    list_key = "applications"
    get_path = "/applications/{id}"
    item_key = "application"
    delete_path = "/applications/{id}"

    def list_by_career(self, career_id: str) -> list[Application]:
        body = self.http.get(f"/applications/byjob/{career_id}")
        return [self._parse(d) for d in self._unwrap_list(body)]

    def update_status(self, id: str, status: str) -> Optional[Application]:
        if status not in APPLICATION_STATUSES:
            raise ValidationFailed({"status": f"Status must be one of: {', '.join(APPLICATION_STATUSES)}"})
        body = self.http.patch(f"/applications/{id}/status", json={"status": status})
        return self._parse_optional(body)


# --- Users ---


class UsersClient(ResourceClient):
    model = User
    name = "users"
    list_path = "/users"
    list_key = "users"
    get_path = "/users/{id}"
    item_key = "user"
    create_path = "/users/add"
    update_path = "/users/{id}"
    delete_path = "/users/{id}"
    bulk_delete_path = "/users/multy"
    multipart = True


# --- Auth ---


class LoginResult(BaseModel):
    message: str = ""
    token: str
    user: dict


class AuthClient:
    """Consumes the backend's auth endpoints. Token issuance is the server's job."""

    def __init__(self, http: HttpClient):
        self.http = http

    def login(self, email: str, password: str) -> LoginResult:
        body = self.http.post("/users/login", json={"email": email, "password": password})
        if not isinstance(body, dict):
            body = {}
        profile = dict(body.get("userUpdated") or {})
        token = profile.pop("token", None)
        if not token:
            raise ValidationFailed({"token": "Login response carried no token"})
        return _validate(LoginResult, {"message": body.get("message") or "", "token": token, "user": profile})

    def logout(self, token: str) -> None:
        self.http.post("/users/logout", json={"token": token})

    def forgot_password(self, email: str) -> dict:
        """Returns {message, resetToken?}; the token usually only goes out by email."""
        return self.http.post("/users/forget-password", json={"email": email})

    def reset_password(self, token: str, new_password: str) -> None:
        self.http.post(f"/users/reset/{token}", json={"newPassword": new_password})

    def change_password(self, email: str, new_password: str) -> None:
        self.http.post("/users/change_password", json={"email": email, "newPassword": new_password})


# --- Statistics ---


class StatisticsClient:
    def __init__(self, http: HttpClient):
        self.http = http

    def fetch(self) -> DashboardStats:
        body = self.http.get("/statistics")
        stats = body.get("stats") if isinstance(body, dict) else None
        return _validate(DashboardStats, stats or {})
