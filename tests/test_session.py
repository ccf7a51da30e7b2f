"""Tests for local storage, cookie jar and the session context."""

import json

from macc_admin.session import CookieJar, FileStorage, MemoryStorage, Session, token_cookie


class Clock:
    def __init__(self, now=1_000_000.0):
        self.now = now

    def __call__(self):
        return self.now


class TestFileStorage:
    def test_round_trip(self, tmp_path):
        storage = FileStorage(tmp_path / "state" / "storage.json")
        storage.set("token", "abc")
        storage.set("user", '{"userName": "سارة"}')

        reopened = FileStorage(tmp_path / "state" / "storage.json")
        assert reopened.get("token") == "abc"
        assert json.loads(reopened.get("user")) == {"userName": "سارة"}

    def test_missing_or_corrupt_file_reads_empty(self, tmp_path):
        path = tmp_path / "storage.json"
        assert FileStorage(path).get("token") is None
        path.write_text("{not json")
        assert FileStorage(path).get("token") is None
        path.write_text('["a list"]')
        assert FileStorage(path).get("token") is None

    def test_remove(self, tmp_path):
        storage = FileStorage(tmp_path / "storage.json")
        storage.set("token", "abc")
        storage.remove("token")
        storage.remove("never-set")
        assert storage.get("token") is None


class TestCookies:
    def test_token_cookie_format(self):
        assert token_cookie("abc") == "token=abc; path=/; max-age=604800; SameSite=Lax"

    def test_expires_after_max_age(self):
        clock = Clock()
        jar = CookieJar(MemoryStorage(), clock=clock)
        jar.set("token", "abc", 60)
        assert jar.get("token") == "abc"
        assert "token" in jar

        clock.now += 61
        assert jar.get("token") is None
        assert "token" not in jar

    def test_zero_max_age_deletes(self):
        jar = CookieJar(MemoryStorage())
        jar.set("token", "abc", 60)
        assert jar.set("token", "", 0) == "token=; path=/; max-age=0; SameSite=Lax"
        assert jar.get("token") is None


class TestSession:
    def test_write_stores_token_profile_and_cookie(self, session):
        cookie = session.write("tok-1", {"userName": "admin", "token": "tok-1", "role": "admin"})

        assert cookie == "token=tok-1; path=/; max-age=604800; SameSite=Lax"
        assert session.storage.get("token") == "tok-1"
        assert session.user == {"userName": "admin", "role": "admin"}
        assert session.cookies.get("token") == "tok-1"
        assert session.is_authenticated

    def test_cookie_alone_authenticates(self):
        cookies = CookieJar(MemoryStorage())
        cookies.set("token", "from-cookie", 600)
        session = Session(MemoryStorage(), cookies)

        assert session.is_authenticated
        assert session.token == "from-cookie"

    def test_storage_alone_authenticates(self):
        session = Session(MemoryStorage({"token": "from-storage"}), CookieJar(MemoryStorage()))
        assert session.is_authenticated
        assert session.token == "from-storage"

    def test_clear(self, signed_in):
        signed_in.clear()
        assert signed_in.token is None
        assert signed_in.user is None
        assert not signed_in.is_authenticated

    def test_empty(self, session):
        assert session.token is None
        assert session.user is None
        assert not session.is_authenticated

    def test_from_disk_shares_state_across_instances(self, tmp_path):
        first = Session.from_disk(tmp_path / "storage.json", tmp_path / "cookies.json")
        first.write("tok-disk", {"userName": "admin"})

        second = Session.from_disk(tmp_path / "storage.json", tmp_path / "cookies.json")
        assert second.token == "tok-disk"
        assert second.user == {"userName": "admin"}
