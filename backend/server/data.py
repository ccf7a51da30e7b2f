"""In-memory data layer for the mock admin backend.

Records are stored in their wire shape (`_id`, flat `_en/_ar` fields,
camelCase flags) so routes can return them as-is. The store starts from
two demo service sections and one admin account; `reset()` restores that.
"""

from __future__ import annotations

import os
import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from jwt.exceptions import InvalidTokenError
from passlib.context import CryptContext

ADMIN_EMAIL = os.environ.get("MACC_MOCK_ADMIN_EMAIL", "admin@macc-fm.com")
ADMIN_PASSWORD = os.environ.get("MACC_MOCK_ADMIN_PASSWORD", "admin123")
SECRET_KEY = os.environ.get("MACC_MOCK_SECRET_KEY", "macc-mock-dev-secret")
JWT_ALG = "HS256"
TOKEN_TTL = timedelta(days=7)

KINDS = ("services", "careers", "applications", "users")


class NotFoundError(Exception):
    """Raised when a record id is not in its collection."""

    def __init__(self, kind: str, id: str):
        self.kind = kind
        self.id = id
        super().__init__(f"{kind[:-1].capitalize()} {id} not found")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def new_id() -> str:
    """24 hex chars, shaped like the ids the real backend hands out."""
    return uuid.uuid4().hex[:24]


pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: Optional[str]) -> bool:
    if not hashed:
        return False
    return pwd_context.verify(plain, hashed)


_admin_hash: Optional[str] = None


def _seed_admin_hash() -> str:
    """Hashed once per process; reset() reuses it."""
    global _admin_hash
    if _admin_hash is None:
        _admin_hash = hash_password(ADMIN_PASSWORD)
    return _admin_hash


# --- Seed ---


def _seed_services() -> list[dict]:
    return [
        {
            "header": {
                "title_en": "Water Insulation",
                "title_ar": "العزل المائي",
                "sub_title_en": "Advanced Protection",
                "sub_title_ar": "حماية متقدمة",
                "description_en": "Complete water insulation solutions for all surfaces",
                "description_ar": "حلول عزل مائي متكاملة لجميع الأسطح",
            },
            "services": [
                {
                    "_id": new_id(),
                    "title_en": "Roof Insulation",
                    "title_ar": "عزل الأسطح",
                    "category_en": "Water",
                    "category_ar": "مائي",
                    "description_en": "Professional roof insulation service",
                    "description_ar": "خدمة عزل أسطح احترافية",
                    "image": {"imageLink": "/services/roof-insulation.jpg", "public_id": "roof-1"},
                    "order": 1,
                }
            ],
            "isActive": True,
        },
        {
            "header": {
                "title_en": "Thermal Insulation",
                "title_ar": "العزل الحراري",
                "sub_title_en": "Energy Efficiency",
                "sub_title_ar": "كفاءة الطاقة",
                "description_en": "Best thermal insulation for your building",
                "description_ar": "أفضل عزل حراري لمبناك",
            },
            "services": [
                {
                    "_id": new_id(),
                    "title_en": "Foam Insulation",
                    "title_ar": "عزل الفوم",
                    "category_en": "Thermal",
                    "category_ar": "حراري",
                    "description_en": "High quality foam insulation",
                    "description_ar": "عزل فوم عالي الجودة",
                    "order": 2,
                }
            ],
            "isActive": True,
        },
    ]


# --- Store ---


class Store:
    def __init__(self):
        self.reset()

    def reset(self) -> None:
        self.collections: dict[str, dict[str, dict]] = {kind: {} for kind in KINDS}
        self.revoked: set[str] = set()  # logged-out bearer tokens
        self.reset_tokens: dict[str, str] = {}  # reset token -> user id
        self.uploads: dict[str, tuple[bytes, str]] = {}  # name -> (content, media type)
        for section in _seed_services():
            self.insert("services", section)
        self.insert("users", {
            "userName": "admin",
            "email": ADMIN_EMAIL,
            "password": _seed_admin_hash(),
            "role": "admin",
            "isActive": True,
        })

    # --- Collections ---

    def list(self, kind: str) -> list[dict]:
        return list(self.collections[kind].values())

    def get(self, kind: str, id: str) -> dict:
        try:
            return self.collections[kind][id]
        except KeyError:
            raise NotFoundError(kind, id)

    def find(self, kind: str, **match) -> Optional[dict]:
        for record in self.collections[kind].values():
            if all(record.get(k) == v for k, v in match.items()):
                return record
        return None

    def insert(self, kind: str, record: dict) -> dict:
        now = _now()
        record = {"_id": new_id(), **record, "createdAt": now, "updatedAt": now}
        self.collections[kind][record["_id"]] = record
        return record

    def update(self, kind: str, id: str, changes: dict) -> dict:
        record = self.get(kind, id)
        record.update(changes)
        record["updatedAt"] = _now()
        return record

    def delete(self, kind: str, id: str) -> dict:
        record = self.get(kind, id)
        del self.collections[kind][id]
        return record

    def delete_many(self, kind: str, ids: list[str]) -> int:
        """Remove every listed id that exists. Returns how many went."""
        collection = self.collections[kind]
        found = [id for id in ids if id in collection]
        for id in found:
            del collection[id]
        return len(found)

    # --- Auth ---

    def issue_token(self, user_id: str) -> str:
        now = datetime.now(timezone.utc)
        claims = {"sub": user_id, "jti": new_id(), "iat": now, "exp": now + TOKEN_TTL}
        return jwt.encode(claims, SECRET_KEY, algorithm=JWT_ALG)

    def user_for_token(self, token: str) -> Optional[dict]:
        """User behind a live bearer token; None when expired, forged or revoked."""
        if token in self.revoked:
            return None
        try:
            claims = jwt.decode(token, SECRET_KEY, algorithms=[JWT_ALG])
        except InvalidTokenError:
            return None
        return self.collections["users"].get(claims.get("sub"))

    def revoke(self, token: str) -> None:
        self.revoked.add(token)

    def issue_reset_token(self, user_id: str) -> str:
        token = secrets.token_urlsafe(24)
        self.reset_tokens[token] = user_id
        return token

    def redeem_reset_token(self, token: str) -> Optional[str]:
        return self.reset_tokens.pop(token, None)

    # --- Uploads ---

    def save_upload(self, filename: str, content: bytes, media_type: str) -> dict:
        public_id = new_id()
        name = f"{public_id}-{filename}"
        self.uploads[name] = (content, media_type)
        return {"imageLink": f"/uploads/{name}", "public_id": public_id}

    # --- Views ---

    def application_view(self, application: dict) -> dict:
        """Embed the career when it still exists, else leave the bare id."""
        career = self.collections["careers"].get(application["career"])
        if career is None:
            return dict(application)
        return {**application, "career": career}

    def stats(self) -> dict:
        return {
            "applications": len(self.collections["applications"]),
            "services": len(self.collections["services"]),
            "careers": len(self.collections["careers"]),
        }


def public_user(user: dict) -> dict:
    """User record without its password hash."""
    return {k: v for k, v in user.items() if k != "password"}


store = Store()
