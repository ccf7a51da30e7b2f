"""Persisted session state: the browser's local storage and cookie jar.

The token lives in two places, mirroring the web dashboard: local storage
key `token` (plus `user`, the profile without its token) and a plain cookie
`token=<value>; path=/; max-age=604800; SameSite=Lax`. Either one is enough
for the session guard to let a visitor through.
"""

import json
import time
from pathlib import Path
from typing import Any, Optional, Protocol

from macc_admin import config

TOKEN_KEY = "token"
USER_KEY = "user"


# --- File Operations ---


def _read_json(path: Path, default: dict) -> dict:
    """Read JSON file, return default if not exists or invalid."""
    if not path.exists():
        return default
    try:
        data = json.loads(path.read_text())
        if not isinstance(data, dict):
            return default
        return data
    except (json.JSONDecodeError, IOError):
        return default


def _write_json(path: Path, data: dict) -> None:
    """Write JSON file with pretty formatting."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False))


# --- Storage ---


class Storage(Protocol):
    def get(self, key: str) -> Optional[str]: ...
    def set(self, key: str, value: str) -> None: ...
    def remove(self, key: str) -> None: ...


class MemoryStorage:
    """String key/value store kept in memory."""

    def __init__(self, data: Optional[dict[str, str]] = None):
        self._data = dict(data or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class FileStorage:
    """String key/value store persisted to a JSON file."""

    def __init__(self, path: Path = config.STORAGE_FILE):
        self.path = Path(path)

    def get(self, key: str) -> Optional[str]:
        return _read_json(self.path, {}).get(key)

    def set(self, key: str, value: str) -> None:
        data = _read_json(self.path, {})
        data[key] = value
        _write_json(self.path, data)

    def remove(self, key: str) -> None:
        data = _read_json(self.path, {})
        if key in data:
            del data[key]
            _write_json(self.path, data)


# --- Cookies ---


def cookie_string(name: str, value: str, max_age: int) -> str:
    return f"{name}={value}; path=/; max-age={max_age}; SameSite=Lax"


def token_cookie(value: str, max_age: int = config.TOKEN_COOKIE_MAX_AGE) -> str:
    """Render the token cookie the way the dashboard writes it."""
    return cookie_string(TOKEN_KEY, value, max_age)


class CookieJar:
    """Name -> value cookies with max-age expiry.

    Backed by a Storage so cookies persist next to local storage; each
    cookie is one JSON-encoded entry `{"value", "expires_at"}`.
    """

    def __init__(self, storage: Optional[Storage] = None, clock=time.time):
        self.storage = storage if storage is not None else MemoryStorage()
        self.clock = clock

    def set(self, name: str, value: str, max_age: int) -> str:
        if max_age <= 0:
            self.storage.remove(name)
        else:
            entry = {"value": value, "expires_at": self.clock() + max_age}
            self.storage.set(name, json.dumps(entry))
        return cookie_string(name, value, max_age)

    def get(self, name: str) -> Optional[str]:
        raw = self.storage.get(name)
        if not raw:
            return None
        try:
            entry = json.loads(raw)
        except json.JSONDecodeError:
            return None
        if entry.get("expires_at", 0) <= self.clock():
            self.storage.remove(name)
            return None
        return entry.get("value")

    def __contains__(self, name: str) -> bool:
        return self.get(name) is not None


# --- Session ---


class Session:
    """Single source of truth for the signed-in user.

    Every component reads the token through here instead of touching
    storage directly.
    """

    def __init__(self, storage: Optional[Storage] = None, cookies: Optional[CookieJar] = None):
        self.storage = storage if storage is not None else MemoryStorage()
        self.cookies = cookies if cookies is not None else CookieJar()

    @classmethod
    def from_disk(cls, storage_file: Path = config.STORAGE_FILE, cookies_file: Path = config.COOKIES_FILE) -> "Session":
        return cls(FileStorage(storage_file), CookieJar(FileStorage(cookies_file)))

    @property
    def token(self) -> Optional[str]:
        return self.storage.get(TOKEN_KEY) or self.cookies.get(TOKEN_KEY)

    @property
    def user(self) -> Optional[dict[str, Any]]:
        raw = self.storage.get(USER_KEY)
        if not raw:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            return None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.storage.get(TOKEN_KEY)) or TOKEN_KEY in self.cookies

    def write(self, token: str, user: Optional[dict[str, Any]] = None) -> str:
        """Persist a fresh login. Returns the cookie string that was set."""
        self.storage.set(TOKEN_KEY, token)
        profile = {k: v for k, v in (user or {}).items() if k != TOKEN_KEY}
        self.storage.set(USER_KEY, json.dumps(profile, ensure_ascii=False))
        return self.cookies.set(TOKEN_KEY, token, config.TOKEN_COOKIE_MAX_AGE)

    def clear(self) -> None:
        self.storage.remove(TOKEN_KEY)
        self.storage.remove(USER_KEY)
        self.cookies.set(TOKEN_KEY, "", 0)
