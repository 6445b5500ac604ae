"""
Thin client for the hosted Supabase project (PostgREST rows + GoTrue identities).

Only the calls the admin functions need are implemented. Every call is a
single HTTP round trip; failures of any kind are raised as BackendError so
handlers can decide how each one maps to a response.
"""
import logging
from typing import Any, Dict, List, Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10


class BackendError(Exception):
    """Raised when Supabase rejects a call or cannot be reached"""

    def __init__(self, message: str, status_code: Optional[int] = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code


def _error_message(resp: requests.Response) -> str:
    try:
        payload = resp.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        for key in ("message", "msg", "error_description", "error"):
            if payload.get(key):
                return str(payload[key])

    return resp.text or f"HTTP {resp.status_code}"


def _filters(eq: Dict[str, Any], neq: Optional[Dict[str, Any]] = None) -> Dict[str, str]:
    params = {column: f"eq.{value}" for column, value in eq.items()}
    for column, value in (neq or {}).items():
        params[column] = f"neq.{value}"
    return params


class SupabaseBackend:
    """
    Backend Data & Auth Service used by the handlers.

    url: project base URL, e.g. https://xyz.supabase.co
    service_role_key: privileged key; sent as both apikey and bearer token
    """

    def __init__(self, url: str, service_role_key: str, timeout: float = DEFAULT_TIMEOUT,
                 session: Optional[requests.Session] = None):
        self.url = (url or "").rstrip("/")
        self.service_role_key = service_role_key or ""
        self.timeout = timeout
        self.session = session or requests.Session()

    def _headers(self, token: Optional[str] = None) -> Dict[str, str]:
        return {
            "apikey": self.service_role_key,
            "Authorization": f"Bearer {self.service_role_key if token is None else token}",
        }

    def _request(self, method: str, path: str, token: Optional[str] = None,
                 headers: Optional[Dict[str, str]] = None, **kwargs) -> Any:
        all_headers = self._headers(token)
        if headers:
            all_headers.update(headers)

        try:
            resp = self.session.request(
                method,
                f"{self.url}{path}",
                headers=all_headers,
                timeout=self.timeout,
                **kwargs,
            )
        except requests.exceptions.RequestException as e:
            raise BackendError(f"Request to Supabase failed: {e}")

        if resp.status_code >= 400:
            code = None
            try:
                payload = resp.json()
                if isinstance(payload, dict):
                    code = payload.get("code") or payload.get("error_code")
            except ValueError:
                pass
            raise BackendError(_error_message(resp), status_code=resp.status_code,
                               code=str(code) if code is not None else None)

        if resp.status_code == 204 or not resp.content:
            return None
        try:
            return resp.json()
        except ValueError:
            return None

    # ------------------------------------------------------------------
    # Auth (GoTrue)
    # ------------------------------------------------------------------
    def get_user(self, token: str) -> Optional[Dict[str, Any]]:
        """Exchange a user access token for the identity it belongs to"""
        user = self._request("GET", "/auth/v1/user", token=token)
        if not isinstance(user, dict) or not user.get("id"):
            return None
        return user

    def delete_identity(self, user_id: str) -> None:
        self._request("DELETE", f"/auth/v1/admin/users/{user_id}")

    # ------------------------------------------------------------------
    # Rows (PostgREST)
    # ------------------------------------------------------------------
    def select(self, table: str, columns: str = "*", neq: Optional[Dict[str, Any]] = None,
               **eq: Any) -> List[Dict[str, Any]]:
        params = {"select": columns}
        params.update(_filters(eq, neq))
        rows = self._request("GET", f"/rest/v1/{table}", params=params)
        return rows or []

    def update(self, table: str, values: Dict[str, Any], **eq: Any) -> None:
        self._request(
            "PATCH",
            f"/rest/v1/{table}",
            params=_filters(eq),
            json=values,
            headers={"Prefer": "return=minimal"},
        )

    def delete(self, table: str, **eq: Any) -> None:
        if not eq:
            # PostgREST refuses unfiltered deletes; fail before the round trip
            raise BackendError(f"Refusing to delete from {table} without a filter")
        self._request(
            "DELETE",
            f"/rest/v1/{table}",
            params=_filters(eq),
            headers={"Prefer": "return=minimal"},
        )

    def get_user_role(self, user_id: str) -> Optional[str]:
        """Role lookup against the users table"""
        rows = self.select("users", "role", id=user_id)
        if not rows:
            return None
        return rows[0].get("role")
