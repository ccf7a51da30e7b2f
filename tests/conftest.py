"""Shared fixtures: wire-shaped records and in-memory session state."""

from unittest.mock import MagicMock

import pytest

from macc_admin.notify import Notifier
from macc_admin.session import CookieJar, MemoryStorage, Session


@pytest.fixture
def session():
    """Empty session backed by memory only."""
    return Session(MemoryStorage(), CookieJar(MemoryStorage()))


@pytest.fixture
def signed_in(session):
    session.write("tok-123", {"userName": "admin", "email": "admin@macc-fm.com", "role": "admin"})
    return session


@pytest.fixture
def notifier():
    return Notifier()


@pytest.fixture
def http():
    """Stand-in for HttpClient; every verb returns an empty body unless set."""
    mock = MagicMock()
    for verb in ("get", "post", "put", "patch", "delete"):
        getattr(mock, verb).return_value = {}
    return mock


@pytest.fixture
def career_wire():
    def make(id, title="Site Engineer", department="Engineering", location="Riyadh", active=True, **extra):
        return {
            "_id": id,
            "title_en": title,
            "title_ar": "مهندس موقع",
            "department_en": department,
            "department_ar": "الهندسة",
            "location_en": location,
            "location_ar": "الرياض",
            "employmentType_en": "Full-Time",
            "employmentType_ar": "دوام كامل",
            "isActive": active,
            **extra,
        }
    return make


@pytest.fixture
def application_wire():
    def make(id, career="c1", status="Pending", name="Sara Ali"):
        return {
            "_id": id,
            "career": career,
            "fullName": name,
            "email": f"{id}@example.com",
            "phone": "0500000000",
            "cv": {"fileUrl": f"https://files.example.com/{id}.pdf", "public_id": f"cv-{id}"},
            "status": status,
            "createdAt": "2026-01-05T10:00:00Z",
        }
    return make


@pytest.fixture
def section_wire():
    def make(id, title="Water Insulation", active=True, items=None):
        return {
            "_id": id,
            "header": {
                "title_en": title,
                "title_ar": "العزل المائي",
                "sub_title_en": "Advanced Protection",
                "sub_title_ar": "حماية متقدمة",
                "description_en": "Complete water insulation solutions",
                "description_ar": "حلول عزل مائي متكاملة",
            },
            "services": items if items is not None else [
                {
                    "_id": f"{id}-i1",
                    "title_en": "Roof Insulation",
                    "title_ar": "عزل الأسطح",
                    "category_en": "Water",
                    "category_ar": "مائي",
                    "description_en": "Professional roof insulation service",
                    "description_ar": "خدمة عزل أسطح احترافية",
                    "image": {"imageLink": "/services/roof.jpg", "public_id": "roof-1"},
                    "order": 1,
                }
            ],
            "isActive": active,
        }
    return make


@pytest.fixture
def user_wire():
    def make(id, name="hr.lead", role="hr", active=True):
        return {
            "_id": id,
            "userName": name,
            "email": f"{name}@macc-fm.com",
            "role": role,
            "isActive": active,
        }
    return make
