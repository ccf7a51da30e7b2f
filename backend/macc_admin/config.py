"""Runtime configuration, resolved from the environment at import time."""

import os
from pathlib import Path

API_URL = os.environ.get("MACC_API_URL", "http://localhost:8080/api/v1").rstrip("/")

# Where the session guard sends visitors without a token
LOGIN_URL = os.environ.get("MACC_LOGIN_URL", "https://macc-fm.com/admin/login")

# Persisted client state (local storage + cookies)
HOME_DIR = Path(os.environ.get("MACC_ADMIN_HOME", Path.home() / ".macc-admin"))
STORAGE_FILE = HOME_DIR / "storage.json"
COOKIES_FILE = HOME_DIR / "cookies.json"

HTTP_TIMEOUT = int(os.environ.get("MACC_HTTP_TIMEOUT", "10"))

TOKEN_COOKIE_MAX_AGE = 60 * 60 * 24 * 7  # 7 days
