"""
Portal API Client
=================

Thin async wrapper over the REST API. Every call is one round trip with a
per-request timeout and no retry; failures come back as ``Result`` values,
never as exceptions.
"""
import logging
from typing import Any, Dict, Optional

import httpx

from prefect_portal.client.session import Session
from prefect_portal.core.result import ErrorKind, Result, kind_for_status

DEFAULT_TIMEOUT = 10.0

logger = logging.getLogger("prefect_portal.client")


def _clean(params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    return {k: (v.isoformat() if hasattr(v, "isoformat") else v) for k, v in (params or {}).items() if v is not None}


def failure_from_response(response: httpx.Response) -> Result:
    """Rebuild a Result from a portal error body (or a bare HTTP error)"""
    kind = kind_for_status(response.status_code)
    message = f"Request failed with status {response.status_code}"
    field = None
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict):
            message = error.get("message") or message
            field = (error.get("details") or {}).get("field")
        elif body.get("detail"):
            message = str(body["detail"])
    return Result.failure(kind, message, field=field)


class ResourceApi:
    """CRUD calls for one resource prefix, e.g. ``client.resource("complaints")``"""

    def __init__(self, client: "PortalClient", path: str):
        self.client = client
        self.path = path.strip("/")

    async def list(self, **filters) -> Result:
        return await self.client.request("GET", f"/{self.path}/", params=filters)

    async def get(self, record_id: str) -> Result:
        return await self.client.request("GET", f"/{self.path}/{record_id}")

    async def create(self, payload: Dict[str, Any]) -> Result:
        return await self.client.request("POST", f"/{self.path}/", json=payload)

    async def update(self, record_id: str, changes: Dict[str, Any]) -> Result:
        return await self.client.request("PATCH", f"/{self.path}/{record_id}", json=changes)

    async def delete(self, record_id: str) -> Result:
        return await self.client.request("DELETE", f"/{self.path}/{record_id}")

    async def change_status(self, record_id: str, status: str) -> Result:
        return await self.client.request("PATCH", f"/{self.path}/{record_id}/status", json={"status": status})

    async def stats(self) -> Result:
        return await self.client.request("GET", f"/{self.path}/stats")


class PortalClient:
    """
    Async client bound to one API base URL and one session.

    Usage:
        async with PortalClient("http://localhost:8000/api/v1") as client:
            result = await client.sign_in("prefect@school.edu", "secret")
            if result.ok:
                complaints = await client.resource("complaints").list(status="pending")
    """

    def __init__(self, base_url: str, timeout: float = DEFAULT_TIMEOUT,
                 session: Optional[Session] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or Session()
        self._http = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

    async def __aenter__(self) -> "PortalClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self._http.aclose()

    def _headers(self) -> Dict[str, str]:
        if self.session.access_token:
            return {"Authorization": f"Bearer {self.session.access_token}"}
        return {}

    async def request(self, method: str, path: str, params: Optional[Dict[str, Any]] = None,
                      json: Any = None, files: Any = None) -> Result:
        try:
            response = await self._http.request(
                method, path, params=_clean(params), json=json, files=files, headers=self._headers()
            )
        except httpx.TimeoutException:
            return Result.failure(ErrorKind.TIMEOUT, f"{method} {path} timed out after {self.timeout}s")
        except httpx.HTTPError as e:
            logger.warning(f"[Client] {method} {path} failed: {e}")
            return Result.failure(ErrorKind.BACKEND, str(e) or e.__class__.__name__)

        if response.is_success:
            return Result.success(response.json() if response.content else None)
        return failure_from_response(response)

    def resource(self, path: str) -> ResourceApi:
        return ResourceApi(self, path)

    # ==================== Authentication ====================

    async def sign_in(self, email: str, password: str) -> Result:
        result = await self.request("POST", "/auth/signin", json={"email": email, "password": password})
        if result.ok:
            self._store(result.value)
        return result

    async def sign_up(self, email: str, password: str, first_name: str, last_name: str,
                      confirm_password: Optional[str] = None) -> Result:
        payload = {
            "email": email,
            "password": password,
            "first_name": first_name,
            "last_name": last_name,
            "confirm_password": confirm_password,
        }
        result = await self.request("POST", "/auth/signup", json={k: v for k, v in payload.items() if v is not None})
        if result.ok:
            self._store(result.value)
        return result

    async def refresh(self) -> Result:
        if not self.session.refresh_token:
            return Result.failure(ErrorKind.FORBIDDEN, "Not signed in")
        result = await self.request("POST", "/auth/refresh", json={"refresh_token": self.session.refresh_token})
        if result.ok:
            self.session.apply_tokens(result.value)
        return result

    async def sign_out(self) -> Result:
        result = Result.success(None)
        if self.session.access_token:
            result = await self.request("POST", "/auth/signout")
        self.session.clear()
        return result

    async def current_user(self):
        """Principal for the stored token, or None when signed out or rejected"""
        if not self.session.access_token:
            return None
        result = await self.request("GET", "/auth/me")
        if not result.ok:
            return None
        self.session.apply_session_payload(result.value)
        return self.session.current_user()

    def _store(self, payload: Dict[str, Any]) -> None:
        self.session.apply_tokens(payload)
        self.session.apply_session_payload(payload["session"])

    # ==================== Navigation ====================

    async def navigation(self) -> Result:
        return await self.request("GET", "/navigation/")

    # ==================== Conversations ====================

    async def conversation_messages(self, conversation_id: str, limit: int = 50, offset: int = 0) -> Result:
        return await self.request(
            "GET", f"/conversations/{conversation_id}/messages", params={"limit": limit, "offset": offset}
        )

    async def conversation_participants(self, conversation_id: str) -> Result:
        return await self.request("GET", f"/conversations/{conversation_id}/participants")

    async def send_message(self, conversation_id: str, message: str, attachment_url: Optional[str] = None) -> Result:
        payload = {"message": message, "attachment_url": attachment_url}
        return await self.request("POST", f"/conversations/{conversation_id}/messages", json=payload)

    def websocket_url(self, conversation_id: str) -> str:
        base = self.base_url.replace("https://", "wss://", 1).replace("http://", "ws://", 1)
        return f"{base}/conversations/ws/{conversation_id}?token={self.session.access_token or ''}"

    # ==================== Profile ====================

    async def upload_avatar(self, filename: str, content: bytes, content_type: str) -> Result:
        return await self.request("POST", "/profiles/me/avatar", files={"file": (filename, content, content_type)})
