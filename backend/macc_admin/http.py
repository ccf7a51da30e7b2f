"""HTTP wrapper for the dashboard REST API."""

import logging
from typing import Callable, Optional

import requests

from macc_admin import config
from macc_admin.errors import ApiError

logger = logging.getLogger(__name__)

URL = config.API_URL


def _server_message(resp: requests.Response) -> Optional[str]:
    """Pull the `message` the backend puts in error bodies, if any."""
    try:
        body = resp.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        return body.get("message") or body.get("error")
    return None


class HttpClient:
    """One-shot JSON/multipart requests against the API base URL.

    The bearer token is read from `session` on every call, so a login or
    logout takes effect on the next request without rebuilding clients.
    """

    def __init__(
        self,
        session=None,
        base_url: Optional[str] = None,
        timeout: int = config.HTTP_TIMEOUT,
        on_unauthorized: Optional[Callable[[ApiError], None]] = None,
    ):
        self.session = session
        self.base_url = (base_url or URL).rstrip("/")
        self.timeout = timeout
        self.on_unauthorized = on_unauthorized

    def _headers(self) -> dict:
        token = self.session.token if self.session is not None else None
        if token:
            return {"Authorization": f"Bearer {token}"}
        return {}

    def _make_request(self, method: str, path: str, timeout: Optional[int] = None, **kwargs) -> dict:
        """Single attempt, no retries. Raises ApiError on any failure."""
        headers = {**self._headers(), **kwargs.pop("headers", {})}
        url = f"{self.base_url}{path}"
        try:
            resp = getattr(requests, method)(url, timeout=timeout or self.timeout, headers=headers, **kwargs)
            resp.raise_for_status()
            if not resp.content:
                return {}
            return resp.json()
        except requests.exceptions.HTTPError:
            body = resp.text[:200] if resp.text else "(empty)"
            err = ApiError(
                _server_message(resp),
                status_code=resp.status_code,
                code="HTTP_ERROR",
                detail=f"Server returned {resp.status_code}: {body}",
            )
            if err.unauthorized:
                # Stale or missing token. Left to the caller; no forced re-login.
                logger.warning("%s %s unauthorized: %s", method.upper(), path, err.message)
                if self.on_unauthorized:
                    self.on_unauthorized(err)
            raise err
        except requests.exceptions.JSONDecodeError:
            body = resp.text[:200] if resp.text else "(empty)"
            raise ApiError(
                status_code=resp.status_code,
                code="INVALID_RESPONSE",
                detail=f"Invalid response ({resp.status_code}): {body}",
            )
        except requests.RequestException as e:
            raise ApiError(code="NETWORK_ERROR", detail=str(e))

    def get(self, path: str, **kwargs) -> dict:
        return self._make_request("get", path, **kwargs)

    def post(self, path: str, **kwargs) -> dict:
        return self._make_request("post", path, **kwargs)

    def put(self, path: str, **kwargs) -> dict:
        return self._make_request("put", path, **kwargs)

    def patch(self, path: str, **kwargs) -> dict:
        return self._make_request("patch", path, **kwargs)

    def delete(self, path: str, **kwargs) -> dict:
        return self._make_request("delete", path, **kwargs)
