"""
Unit Tests for PortalClient
Uses httpx.MockTransport, no server involved
"""
import json

import httpx

from prefect_portal.client import PortalClient
from prefect_portal.core.result import ErrorKind

SESSION_BODY = {
    "user": {"id": "u1", "email": "prefect@school.edu", "first_name": "Asha", "last_name": "Rao",
             "roles": ["prefect", "student"]},
    "roles": ["prefect", "student"],
    "theme": "dark",
}


def _client(handler):
    return PortalClient("http://portal.test/api/v1", transport=httpx.MockTransport(handler))


async def test_sign_in_stores_tokens_and_session():
    def handler(request):
        assert request.url.path == "/api/v1/auth/signin"
        assert json.loads(request.content) == {"email": "prefect@school.edu", "password": "secret123"}
        return httpx.Response(200, json={"access_token": "a1", "refresh_token": "r1", "session": SESSION_BODY})

    async with _client(handler) as client:
        result = await client.sign_in("prefect@school.edu", "secret123")

    assert result.ok
    assert client.session.access_token == "a1"
    assert client.session.user.full_name == "Asha Rao"
    assert client.session.primary_role == "prefect"
    assert client.session.theme == "dark"


async def test_bearer_header_sent_after_sign_in():
    seen = {}

    def handler(request):
        seen["auth"] = request.headers.get("authorization")
        return httpx.Response(200, json=[])

    async with _client(handler) as client:
        client.session.access_token = "a1"
        await client.resource("complaints").list(status="pending", department_id=None)

    assert seen["auth"] == "Bearer a1"


async def test_list_drops_empty_filters_and_uses_collection_path():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json=[{"id": "c1"}])

    async with _client(handler) as client:
        result = await client.resource("complaints").list(status="pending", department_id=None)

    assert result.value == [{"id": "c1"}]
    assert seen["path"] == "/api/v1/complaints/"
    assert seen["params"] == {"status": "pending"}


async def test_portal_error_body_becomes_result():
    def handler(request):
        body = {"success": False, "error": {"code": "CONFLICT", "message": "Attendance already recorded",
                                            "details": {"field": "date"}}}
        return httpx.Response(409, json=body)

    async with _client(handler) as client:
        result = await client.resource("attendance").create({"date": "2024-01-01"})

    assert result.error == ErrorKind.CONFLICT
    assert result.message == "Attendance already recorded"
    assert result.field == "date"


async def test_timeout_becomes_timeout_kind():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    async with _client(handler) as client:
        result = await client.resource("duties").list()

    assert result.error == ErrorKind.TIMEOUT


async def test_connection_error_becomes_backend_kind():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    async with _client(handler) as client:
        result = await client.resource("duties").list()

    assert result.error == ErrorKind.BACKEND


async def test_current_user_none_when_rejected():
    def handler(request):
        return httpx.Response(401, json={"success": False, "error": {"code": "AUTH_ERROR", "message": "expired"}})

    async with _client(handler) as client:
        client.session.access_token = "stale"
        assert await client.current_user() is None


async def test_sign_out_clears_session_even_without_token():
    def handler(request):
        raise AssertionError("no request expected")

    async with _client(handler) as client:
        result = await client.sign_out()

    assert result.ok
    assert client.session.user is None


def test_websocket_url_uses_ws_scheme_and_token():
    client = PortalClient("https://portal.test/api/v1")
    client.session.access_token = "a1"

    assert client.websocket_url("c9") == "wss://portal.test/api/v1/conversations/ws/c9?token=a1"
