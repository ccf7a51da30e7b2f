"""Tests for the mock backend's REST surface."""

import hashlib
from datetime import datetime, timedelta, timezone

import jwt
import pytest
from fastapi.testclient import TestClient

from server.app import app
from server.data import ADMIN_EMAIL, ADMIN_PASSWORD, JWT_ALG, SECRET_KEY, Store, store, verify_password

API = "/api/v1"

HEADER = {
    "header[title_en]": "Waterproofing",
    "header[title_ar]": "العزل",
    "header[sub_title_en]": "Membranes",
    "header[sub_title_ar]": "أغشية",
    "header[description_en]": "Bitumen and PVC membranes",
    "header[description_ar]": "أغشية بيتومين و PVC",
}

ITEM = {
    "title_en": "Basement Insulation",
    "title_ar": "عزل القبو",
    "category_en": "Water",
    "category_ar": "مائي",
    "description_en": "Membrane systems for basements",
    "description_ar": "أنظمة أغشية للأقبية",
}

CAREER = {
    "title_en": "Site Engineer",
    "title_ar": "مهندس موقع",
    "department_en": "Engineering",
    "department_ar": "الهندسة",
    "location_en": "Riyadh",
    "location_ar": "الرياض",
    "employmentType_en": "Full-Time",
    "employmentType_ar": "دوام كامل",
    "responsibilities_en": ["Supervise crews"],
}


@pytest.fixture(autouse=True)
def fresh_store():
    store.reset()
    yield
    store.reset()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def auth(client):
    """Bearer header for the seeded admin."""
    resp = client.post(f"{API}/users/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    return {"Authorization": f"Bearer {resp.json()['userUpdated']['token']}"}


def _career(client, auth, **overrides):
    resp = client.post(f"{API}/careers/create", json={**CAREER, **overrides}, headers=auth)
    assert resp.status_code == 201
    return resp.json()["career"]


class TestAuth:
    def test_health_is_open(self, client):
        assert client.get("/health").json() == {"status": "ok"}

    def test_missing_token(self, client):
        resp = client.get(f"{API}/services")
        assert resp.status_code == 401
        assert resp.json() == {"message": "Not authorized, no token"}

    def test_unknown_token(self, client):
        resp = client.get(f"{API}/careers", headers={"Authorization": "Bearer nope"})
        assert resp.status_code == 401
        assert resp.json()["message"] == "Not authorized, token failed"

    def test_forged_token(self, client):
        admin = store.find("users", email=ADMIN_EMAIL)
        forged = jwt.encode({"sub": admin["_id"]}, "not-the-server-key", algorithm=JWT_ALG)
        resp = client.get(f"{API}/careers", headers={"Authorization": f"Bearer {forged}"})
        assert resp.status_code == 401

    def test_expired_token(self, client):
        admin = store.find("users", email=ADMIN_EMAIL)
        past = datetime.now(timezone.utc) - timedelta(days=1)
        stale = jwt.encode({"sub": admin["_id"], "exp": past}, SECRET_KEY, algorithm=JWT_ALG)
        resp = client.get(f"{API}/careers", headers={"Authorization": f"Bearer {stale}"})
        assert resp.status_code == 401

    def test_passwords_are_stored_hashed(self, client, auth):
        client.post(
            f"{API}/users/add",
            data={"userName": "hr.lead", "email": "hr@macc-fm.com", "password": "s3cret", "role": "hr"},
            headers=auth,
        )
        for email, plain in ((ADMIN_EMAIL, ADMIN_PASSWORD), ("hr@macc-fm.com", "s3cret")):
            stored = store.find("users", email=email)["password"]
            assert stored != plain
            assert stored != hashlib.sha256(plain.encode()).hexdigest()
            assert stored.startswith("$2")
            assert verify_password(plain, stored)
            assert not verify_password("wrong", stored)

    def test_login_returns_profile_and_token(self, client):
        body = client.post(f"{API}/users/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD}).json()

        assert body["message"] == "Login successful"
        assert body["userUpdated"]["email"] == ADMIN_EMAIL
        assert body["userUpdated"]["token"]
        assert "password" not in body["userUpdated"]

    def test_bad_password(self, client):
        resp = client.post(f"{API}/users/login", json={"email": ADMIN_EMAIL, "password": "wrong"})
        assert resp.status_code == 401
        assert resp.json()["message"] == "Invalid email or password"

    def test_logout_revokes_token(self, client, auth):
        token = auth["Authorization"].split()[1]
        client.post(f"{API}/users/logout", json={"token": token}, headers=auth)
        assert client.get(f"{API}/services", headers=auth).status_code == 401

    def test_forgot_then_reset(self, client):
        reset = client.post(f"{API}/users/forget-password", json={"email": ADMIN_EMAIL}).json()["resetToken"]

        assert client.post(f"{API}/users/reset/{reset}", json={"newPassword": "fresh-pass"}).status_code == 200
        # Tokens are single use
        assert client.post(f"{API}/users/reset/{reset}", json={"newPassword": "again"}).status_code == 400

        login = client.post(f"{API}/users/login", json={"email": ADMIN_EMAIL, "password": "fresh-pass"})
        assert login.status_code == 200

    def test_forgot_unknown_email(self, client):
        assert client.post(f"{API}/users/forget-password", json={"email": "who@x.co"}).status_code == 404

    def test_change_password(self, client, auth):
        resp = client.post(
            f"{API}/users/change_password", json={"email": ADMIN_EMAIL, "newPassword": "changed"}, headers=auth
        )
        assert resp.status_code == 200
        assert client.post(f"{API}/users/login", json={"email": ADMIN_EMAIL, "password": "changed"}).status_code == 200


class TestServices:
    def test_seeded_sections(self, client, auth):
        sections = client.get(f"{API}/services", headers=auth).json()["services"]
        assert [s["header"]["title_en"] for s in sections] == ["Water Insulation", "Thermal Insulation"]

    def test_create_with_image(self, client, auth):
        resp = client.post(
            f"{API}/services/add",
            data={**HEADER, "isActive": "false"},
            files={"image": ("cover.png", b"\x89PNG", "image/png")},
            headers=auth,
        )
        assert resp.status_code == 201
        section = resp.json()["service"]
        assert section["isActive"] is False
        assert section["services"] == []

        link = section["header"]["image"]["imageLink"]
        upload = client.get(link)
        assert upload.content == b"\x89PNG"
        assert upload.headers["content-type"] == "image/png"

    def test_create_requires_header(self, client, auth):
        resp = client.post(f"{API}/services/add", data={"header[title_en]": "Only"}, headers=auth)
        assert resp.status_code == 400
        assert "title_ar" in resp.json()["message"]

    def test_item_lifecycle(self, client, auth):
        section_id = client.get(f"{API}/services", headers=auth).json()["services"][0]["_id"]

        added = client.post(
            f"{API}/services/{section_id}/items",
            data={**ITEM, "order": "2"},
            files={"image": ("basement.jpg", b"jpeg", "image/jpeg")},
            headers=auth,
        ).json()
        assert added["success"] is True
        items = added["data"]["services"]
        assert [i["order"] for i in items] == [1, 2]
        item_id = items[1]["_id"]

        updated = client.put(f"{API}/services/{section_id}/items/{item_id}", data={"order": "7"}, headers=auth).json()
        assert updated["data"]["services"][1]["order"] == 7
        assert updated["data"]["services"][1]["title_en"] == "Basement Insulation"

        deleted = client.delete(f"{API}/services/{section_id}/items/{item_id}", headers=auth).json()
        assert len(deleted["data"]["services"]) == 1

    def test_unknown_item(self, client, auth):
        section_id = client.get(f"{API}/services", headers=auth).json()["services"][0]["_id"]
        assert client.delete(f"{API}/services/{section_id}/items/nope", headers=auth).status_code == 404

    def test_bulk_delete(self, client, auth):
        ids = [s["_id"] for s in client.get(f"{API}/services", headers=auth).json()["services"]]
        body = client.post(f"{API}/services/multy", json={"ids": ids + ["ghost"]}, headers=auth).json()

        assert body["deletedCount"] == 2
        assert client.get(f"{API}/services", headers=auth).json()["services"] == []


class TestCareers:
    def test_create_get_update(self, client, auth):
        career = _career(client, auth)
        assert career["isActive"] is True
        assert career["employmentType_ar"] == "دوام كامل"

        fetched = client.get(f"{API}/careers/one/{career['_id']}", headers=auth).json()["career"]
        assert fetched["responsibilities_en"] == ["Supervise crews"]

        updated = client.put(f"{API}/careers/{career['_id']}", json={"title_en": "Senior Engineer"}, headers=auth)
        assert updated.json()["career"]["title_en"] == "Senior Engineer"
        assert updated.json()["career"]["department_en"] == "Engineering"

    def test_missing_field_is_400_with_message(self, client, auth):
        resp = client.post(f"{API}/careers/create", json={"title_en": "Half"}, headers=auth)
        assert resp.status_code == 400
        assert "Field required" in resp.json()["message"]

    def test_toggle(self, client, auth):
        career = _career(client, auth)
        toggled = client.patch(f"{API}/careers/{career['_id']}/toggle", headers=auth).json()["career"]
        assert toggled["isActive"] is False

    def test_delete_and_bulk_delete(self, client, auth):
        ids = [_career(client, auth, title_en=f"Job {n}")["_id"] for n in range(3)]

        assert client.delete(f"{API}/careers/{ids[0]}", headers=auth).status_code == 200
        assert client.delete(f"{API}/careers/{ids[0]}", headers=auth).status_code == 404

        client.post(f"{API}/careers/bulk-delete", json={"ids": ids[1:]}, headers=auth)
        assert client.get(f"{API}/careers", headers=auth).json()["careers"] == []


class TestApplications:
    def _apply(self, career_id, status="Pending"):
        return store.insert("applications", {
            "career": career_id,
            "fullName": "Sara Ali",
            "email": "sara@example.com",
            "phone": "0500000000",
            "status": status,
        })

    def test_embeds_existing_career(self, client, auth):
        career = _career(client, auth)
        self._apply(career["_id"])
        self._apply("gone")

        apps = client.get(f"{API}/applications", headers=auth).json()["applications"]
        assert apps[0]["career"]["title_en"] == "Site Engineer"
        assert apps[1]["career"] == "gone"

    def test_by_job(self, client, auth):
        career = _career(client, auth)
        self._apply(career["_id"])
        self._apply("other")

        apps = client.get(f"{API}/applications/byjob/{career['_id']}", headers=auth).json()["applications"]
        assert len(apps) == 1

    def test_status_update(self, client, auth):
        app_id = self._apply("c1")["_id"]

        resp = client.patch(f"{API}/applications/{app_id}/status", json={"status": "Accepted"}, headers=auth)
        assert resp.json()["application"]["status"] == "Accepted"

        bad = client.patch(f"{API}/applications/{app_id}/status", json={"status": "Archived"}, headers=auth)
        assert bad.status_code == 400
        assert store.get("applications", app_id)["status"] == "Accepted"

    def test_delete(self, client, auth):
        app_id = self._apply("c1")["_id"]
        client.delete(f"{API}/applications/{app_id}", headers=auth)
        assert client.get(f"{API}/applications", headers=auth).json()["applications"] == []


class TestUsers:
    def _create(self, client, auth, **fields):
        data = {"userName": "hr.lead", "email": "hr@macc-fm.com", "password": "s3cret", "role": "hr", **fields}
        return client.post(f"{API}/users/add", data=data, headers=auth)

    def test_create_hides_password(self, client, auth):
        resp = self._create(client, auth)
        assert resp.status_code == 201
        assert "password" not in resp.json()["user"]
        assert all("password" not in u for u in client.get(f"{API}/users", headers=auth).json()["users"])

    def test_duplicate_email(self, client, auth):
        self._create(client, auth)
        resp = self._create(client, auth, userName="other")
        assert resp.status_code == 400
        assert resp.json()["message"] == "Email already in use"

    def test_invalid_role(self, client, auth):
        assert self._create(client, auth, role="owner").status_code == 400

    def test_disabled_account_cannot_log_in(self, client, auth):
        self._create(client, auth, isActive="false")
        resp = client.post(f"{API}/users/login", json={"email": "hr@macc-fm.com", "password": "s3cret"})
        assert resp.status_code == 403

    def test_update_keeps_password_when_omitted(self, client, auth):
        user_id = self._create(client, auth).json()["user"]["_id"]
        client.put(f"{API}/users/{user_id}", data={"userName": "hr.head"}, headers=auth)

        assert client.get(f"{API}/users/{user_id}", headers=auth).json()["user"]["userName"] == "hr.head"
        login = client.post(f"{API}/users/login", json={"email": "hr@macc-fm.com", "password": "s3cret"})
        assert login.status_code == 200


class TestStatistics:
    def test_counts_collections(self, client, auth):
        _career(client, auth)
        stats = client.get(f"{API}/statistics", headers=auth).json()["stats"]
        assert stats == {"applications": 0, "services": 2, "careers": 1}


class TestStore:
    def test_fresh_store_lists_and_deletes(self):
        fresh = Store()
        ids = [s["_id"] for s in fresh.list("services")]
        assert len(ids) == 2

        assert fresh.delete_many("services", ids + ["ghost"]) == 2
        assert fresh.list("services") == []
        assert fresh.stats() == {"applications": 0, "services": 0, "careers": 0}

    def test_reset_restores_seed(self):
        fresh = Store()
        fresh.delete_many("services", [s["_id"] for s in fresh.list("services")])
        fresh.reset()
        assert len(fresh.list("services")) == 2
        assert fresh.find("users", email=ADMIN_EMAIL)["role"] == "admin"
