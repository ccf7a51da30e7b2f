"""API routes for the mock admin backend.

Every route lives under /api/v1. Login, forget-password and reset are
public; everything else needs `Authorization: Bearer <token>` from login.
Errors come back as `{"message": ...}`.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from starlette.datastructures import UploadFile

from server.data import NotFoundError, hash_password, new_id, public_user, store, verify_password
from server.models import (
    APPLICATION_STATUSES,
    ROLES,
    CareerCreate,
    CareerUpdate,
    ChangePasswordRequest,
    ForgotPasswordRequest,
    IdsRequest,
    LoginRequest,
    LogoutRequest,
    ResetPasswordRequest,
    StatusRequest,
)

PREFIX = "/api/v1"

HEADER_FIELDS = ("title_en", "title_ar", "sub_title_en", "sub_title_ar", "description_en", "description_ar")
ITEM_FIELDS = ("title_en", "title_ar", "category_en", "category_ar", "description_en", "description_ar")


# --- Auth dependency ---


def current_user(authorization: Optional[str] = Header(default=None)) -> dict:
    """Resolve the bearer token to a user, or 401."""
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Not authorized, no token")
    user = store.user_for_token(authorization[len("Bearer "):])
    if user is None:
        raise HTTPException(status_code=401, detail="Not authorized, token failed")
    return user


public = APIRouter(prefix=PREFIX)
router = APIRouter(prefix=PREFIX, dependencies=[Depends(current_user)])


# --- Helpers ---


def _get(kind: str, id: str) -> dict:
    try:
        return store.get(kind, id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


def _flag(value) -> bool:
    return str(value).lower() == "true"


async def _upload(form) -> Optional[dict]:
    image = form.get("image")
    if not isinstance(image, UploadFile):
        return None
    content = await image.read()
    return store.save_upload(image.filename or "upload", content, image.content_type or "application/octet-stream")


def _require_fields(values: dict, fields: tuple, what: str) -> None:
    missing = [f for f in fields if not values.get(f)]
    if missing:
        raise HTTPException(status_code=400, detail=f"Missing {what} fields: {', '.join(missing)}")


def _find_item(section: dict, item_id: str) -> int:
    for i, item in enumerate(section["services"]):
        if item.get("_id") == item_id:
            return i
    raise HTTPException(status_code=404, detail=f"Item {item_id} not found")


# --- Services ---


@router.get("/services")
def list_services():
    return {"services": store.list("services")}


@router.get("/services/{id}")
def get_service(id: str):
    return {"service": _get("services", id)}


@router.post("/services/add", status_code=201)
async def create_service(request: Request):
    form = await request.form()
    header = {f: form.get(f"header[{f}]") for f in HEADER_FIELDS}
    _require_fields(header, HEADER_FIELDS, "header")
    image = await _upload(form)
    if image:
        header["image"] = image
    section = store.insert("services", {
        "header": header,
        "services": [],
        "isActive": _flag(form.get("isActive", "true")),
    })
    return {"message": "Service section created", "service": section}


@router.put("/services/{id}")
async def update_service(id: str, request: Request):
    section = _get("services", id)
    form = await request.form()
    header = dict(section["header"])
    for f in HEADER_FIELDS:
        value = form.get(f"header[{f}]")
        if value is not None:
            header[f] = value
    image = await _upload(form)
    if image:
        header["image"] = image
    changes = {"header": header}
    if form.get("isActive") is not None:
        changes["isActive"] = _flag(form.get("isActive"))
    return {"message": "Service section updated", "service": store.update("services", id, changes)}


@router.delete("/services/{id}")
def delete_service(id: str):
    store.delete("services", _get("services", id)["_id"])
    return {"message": "Service section deleted"}


@router.post("/services/multy")
def delete_services(req: IdsRequest):
    count = store.delete_many("services", req.ids)
    return {"message": f"{count} service sections deleted", "deletedCount": count}


@router.post("/services/{id}/items", status_code=201)
async def add_service_item(id: str, request: Request):
    section = _get("services", id)
    form = await request.form()
    item = {"_id": new_id(), **{f: form.get(f) for f in ITEM_FIELDS}}
    _require_fields(item, ITEM_FIELDS, "item")
    try:
        item["order"] = int(form.get("order") or len(section["services"]) + 1)
    except ValueError:
        raise HTTPException(status_code=400, detail="Order must be a number")
    image = await _upload(form)
    if image:
        item["image"] = image
    updated = store.update("services", id, {"services": section["services"] + [item]})
    return {"success": True, "message": "Item added", "data": updated}


@router.put("/services/{id}/items/{item_id}")
async def update_service_item(id: str, item_id: str, request: Request):
    section = _get("services", id)
    index = _find_item(section, item_id)
    form = await request.form()
    item = dict(section["services"][index])
    for f in ITEM_FIELDS:
        value = form.get(f)
        if value is not None:
            item[f] = value
    if form.get("order") is not None:
        try:
            item["order"] = int(form.get("order"))
        except ValueError:
            raise HTTPException(status_code=400, detail="Order must be a number")
    image = await _upload(form)
    if image:
        item["image"] = image
    items = list(section["services"])
    items[index] = item
    updated = store.update("services", id, {"services": items})
    return {"success": True, "message": "Item updated", "data": updated}


@router.delete("/services/{id}/items/{item_id}")
def delete_service_item(id: str, item_id: str):
    section = _get("services", id)
    index = _find_item(section, item_id)
    items = section["services"][:index] + section["services"][index + 1:]
    updated = store.update("services", id, {"services": items})
    return {"success": True, "message": "Item deleted", "data": updated}


# --- Careers ---


@router.get("/careers")
def list_careers():
    return {"careers": store.list("careers")}


@router.get("/careers/one/{id}")
def get_career(id: str):
    return {"career": _get("careers", id)}


@router.post("/careers/create", status_code=201)
def create_career(req: CareerCreate):
    career = store.insert("careers", req.model_dump(by_alias=True, exclude_none=True))
    return {"message": "Career created", "career": career}


@router.put("/careers/{id}")
def update_career(id: str, req: CareerUpdate):
    _get("careers", id)
    career = store.update("careers", id, req.model_dump(by_alias=True, exclude_none=True))
    return {"message": "Career updated", "career": career}


@router.patch("/careers/{id}/toggle")
def toggle_career(id: str):
    career = _get("careers", id)
    career = store.update("careers", id, {"isActive": not career.get("isActive", True)})
    return {"message": "Career status updated", "career": career}


@router.delete("/careers/{id}")
def delete_career(id: str):
    store.delete("careers", _get("careers", id)["_id"])
    return {"message": "Career deleted"}


@router.post("/careers/bulk-delete")
def delete_careers(req: IdsRequest):
    count = store.delete_many("careers", req.ids)
    return {"message": f"{count} careers deleted", "deletedCount": count}


# --- Applications ---


@router.get("/applications")
def list_applications():
    return {"applications": [store.application_view(a) for a in store.list("applications")]}


@router.get("/applications/byjob/{career_id}")
def list_applications_by_career(career_id: str):
    apps = [a for a in store.list("applications") if a["career"] == career_id]
    return {"applications": [store.application_view(a) for a in apps]}


@router.get("/applications/{id}")
def get_application(id: str):
    return {"application": store.application_view(_get("applications", id))}


@router.patch("/applications/{id}/status")
def update_application_status(id: str, req: StatusRequest):
    _get("applications", id)
    if req.status not in APPLICATION_STATUSES:
        raise HTTPException(status_code=400, detail=f"Invalid status: {req.status}")
    application = store.update("applications", id, {"status": req.status})
    return {"message": "Application status updated", "application": store.application_view(application)}


@router.delete("/applications/{id}")
def delete_application(id: str):
    store.delete("applications", _get("applications", id)["_id"])
    return {"message": "Application deleted"}


# --- Users ---


async def _user_fields(request: Request) -> tuple[dict, object]:
    form = await request.form()
    fields = {k: form.get(k) for k in ("userName", "email", "password", "role") if form.get(k)}
    if form.get("isActive") is not None:
        fields["isActive"] = _flag(form.get("isActive"))
    if "role" in fields and fields["role"] not in ROLES:
        raise HTTPException(status_code=400, detail=f"Invalid role: {fields['role']}")
    return fields, form


@router.get("/users")
def list_users():
    return {"users": [public_user(u) for u in store.list("users")]}


@router.get("/users/{id}")
def get_user(id: str):
    return {"user": public_user(_get("users", id))}


@router.post("/users/add", status_code=201)
async def create_user(request: Request):
    fields, form = await _user_fields(request)
    _require_fields(fields, ("userName", "email", "password"), "user")
    if store.find("users", email=fields["email"]):
        raise HTTPException(status_code=400, detail="Email already in use")
    fields["password"] = hash_password(fields["password"])
    fields.setdefault("role", "user")
    fields.setdefault("isActive", True)
    image = await _upload(form)
    if image:
        fields["image"] = image
    user = store.insert("users", fields)
    return {"message": "User created", "user": public_user(user)}


@router.put("/users/{id}")
async def update_user(id: str, request: Request):
    _get("users", id)
    fields, form = await _user_fields(request)
    if "password" in fields:
        fields["password"] = hash_password(fields["password"])
    image = await _upload(form)
    if image:
        fields["image"] = image
    return {"message": "User updated", "user": public_user(store.update("users", id, fields))}


@router.delete("/users/{id}")
def delete_user(id: str):
    store.delete("users", _get("users", id)["_id"])
    return {"message": "User deleted"}


@router.post("/users/multy")
def delete_users(req: IdsRequest):
    count = store.delete_many("users", req.ids)
    return {"message": f"{count} users deleted", "deletedCount": count}


@router.post("/users/logout")
def logout(req: LogoutRequest):
    if req.token:
        store.revoke(req.token)
    return {"message": "Logged out"}


@router.post("/users/change_password")
def change_password(req: ChangePasswordRequest):
    user = store.find("users", email=req.email)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    store.update("users", user["_id"], {"password": hash_password(req.new_password)})
    return {"message": "Password changed"}


# --- Auth (public) ---


@public.post("/users/login")
def login(req: LoginRequest):
    user = store.find("users", email=req.email)
    if user is None or not verify_password(req.password, user.get("password")):
        raise HTTPException(status_code=401, detail="Invalid email or password")
    if not user.get("isActive", True):
        raise HTTPException(status_code=403, detail="Account is disabled")
    token = store.issue_token(user["_id"])
    return {"message": "Login successful", "userUpdated": {**public_user(user), "token": token}}


@public.post("/users/forget-password")
def forget_password(req: ForgotPasswordRequest):
    user = store.find("users", email=req.email)
    if user is None:
        raise HTTPException(status_code=404, detail="No account with that email")
    # Dev backend: the reset token is returned instead of mailed
    return {"message": "Reset link sent", "resetToken": store.issue_reset_token(user["_id"])}


@public.post("/users/reset/{token}")
def reset_password(token: str, req: ResetPasswordRequest):
    user_id = store.redeem_reset_token(token)
    if user_id is None:
        raise HTTPException(status_code=400, detail="Reset token is invalid or expired")
    store.update("users", user_id, {"password": hash_password(req.new_password)})
    return {"message": "Password reset"}


# --- Statistics ---


@router.get("/statistics")
def statistics():
    return {"stats": store.stats()}
