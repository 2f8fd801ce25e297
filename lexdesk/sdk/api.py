import logging
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger(__name__)


class ApiClientError(Exception):
    """Raised for any non-2xx response or transport failure.

    ``status`` is 0 when the request never reached the server.
    """

    def __init__(self, status: int, message: str, errors: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.status = status
        self.message = message
        self.errors = errors

    @property
    def retryable(self) -> bool:
        return self.status == 0 or self.status >= 500


class ApiClient:
    """Thin wrapper over a ``requests.Session`` that speaks the API envelope.

    Any object with a compatible ``request(method, url, **kwargs)`` method can
    be passed as ``session``, e.g. a FastAPI ``TestClient``.
    """

    def __init__(self, base_url: str = "http://localhost:5000", token: Optional[str] = None,
                 session=None, timeout: float = 30):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout

    def _headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    def request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        headers = {**self._headers(), **kwargs.pop("headers", {})}
        try:
            response = self.session.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise ApiClientError(0, f"Request failed: {e}")

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.status_code >= 400:
            message = body.get("message") if isinstance(body, dict) else None
            errors = body.get("errors") if isinstance(body, dict) else None
            raise ApiClientError(response.status_code, message or f"HTTP {response.status_code}", errors)
        return body

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Any = None, **kwargs) -> Any:
        return self.request("POST", path, json=json, **kwargs)

    def put(self, path: str, json: Any = None, **kwargs) -> Any:
        return self.request("PUT", path, json=json, **kwargs)

    def patch(self, path: str, json: Any = None) -> Any:
        return self.request("PATCH", path, json=json)

    def delete(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("DELETE", path, params=params)

    # Auth

    def login(self, email: str, password: str) -> Dict[str, Any]:
        """Log in and keep the issued token for later calls."""
        body = self.post("/api/auth/login", json={"email": email, "password": password})
        self.token = body["data"]["token"]
        return body["data"]["user"]

    def register(self, name: str, email: str, password: str, role: str, phone: Optional[str] = None) -> Dict[str, Any]:
        body = self.post("/api/auth/register", json={
            "name": name,
            "email": email,
            "password": password,
            "role": role,
            "phone": phone,
        })
        self.token = body["data"]["token"]
        return body["data"]["user"]

    def logout(self):
        self.token = None
