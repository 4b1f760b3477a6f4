from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from client.alerts import Severity
from client.api import Envelope
from client.errors import ClientError, RemoteFailure, SessionExpired, Unreachable
from client.navigation import LoginRedirect, MemoryNavigator
from tests.conftest import envelope, make_api


def _call(handler, method="GET", path="/api/v1/info", body=None, **kwargs):
    async def scenario():
        async with make_api(handler, **kwargs) as api:
            return await api.request(method, path, body)

    return asyncio.run(scenario())


def test_success_envelope_returns_result() -> None:
    result = _call(lambda request: envelope(success=True, result={"cpus": 4}))
    assert result == {"cpus": 4}


def test_no_content_returns_none_without_decoding() -> None:
    assert _call(lambda request: httpx.Response(204, content=b"not json")) is None


def test_session_expired_redirects_to_login_with_next() -> None:
    navigator = MemoryNavigator("/dashboard")
    handler = lambda request: httpx.Response(401, content=b"token expired")

    with pytest.raises(SessionExpired) as exc_info:
        _call(handler, on_session_expired=LoginRedirect(navigator))

    assert exc_info.value.detail == "token expired"
    assert navigator.history == ["/login?next=/dashboard"]
    assert navigator.current_route() == "/login?next=/dashboard"


@pytest.mark.parametrize("route", ["/login", "/login?next=/dashboard", "/login/"])
def test_session_expired_on_login_page_does_not_redirect(route) -> None:
    navigator = MemoryNavigator(route)

    with pytest.raises(SessionExpired):
        _call(lambda request: httpx.Response(401), on_session_expired=LoginRedirect(navigator))

    assert navigator.history == []


def test_session_expired_without_policy_still_raises() -> None:
    with pytest.raises(SessionExpired):
        _call(lambda request: httpx.Response(401))


def test_failing_redirect_does_not_hide_session_expiry() -> None:
    async def broken_redirect():
        raise RuntimeError("router gone")

    with pytest.raises(SessionExpired):
        _call(lambda request: httpx.Response(401), on_session_expired=broken_redirect)


def test_back_to_back_expiries_redirect_once() -> None:
    navigator = MemoryNavigator("/instances")

    async def scenario():
        async with make_api(lambda request: httpx.Response(401),
                            on_session_expired=LoginRedirect(navigator)) as api:
            return await asyncio.gather(
                api.get("/api/v1/info"),
                api.get("/api/v1/user"),
                api.get("/api/v1/instance/"),
                return_exceptions=True,
            )

    results = asyncio.run(scenario())
    assert all(isinstance(r, SessionExpired) for r in results)
    assert navigator.history == ["/login?next=/instances"]


@pytest.mark.parametrize("status", [400, 403, 404, 429])
def test_client_errors_carry_status(status) -> None:
    with pytest.raises(ClientError) as exc_info:
        _call(lambda request: envelope(status, success=False, message="ignored"))
    assert exc_info.value.status == status


def test_failure_envelope_raises_remote_failure() -> None:
    with pytest.raises(RemoteFailure) as exc_info:
        _call(lambda request: envelope(success=False, message="auth.invalid"))

    assert exc_info.value.message == "auth.invalid"
    assert exc_info.value.cause is None


def test_failure_envelope_cause_is_read_from_err_cause() -> None:
    handler = lambda request: envelope(500, success=False, message="io", err_cause="disk full")

    with pytest.raises(RemoteFailure) as exc_info:
        _call(handler)

    assert exc_info.value.message == "io"
    assert exc_info.value.cause == "disk full"


def test_undecodable_body_is_a_remote_failure() -> None:
    with pytest.raises(RemoteFailure) as exc_info:
        _call(lambda request: httpx.Response(502, content=b"<html>Bad gateway</html>"))
    assert exc_info.value.message == "response.invalid"


def test_body_without_success_flag_is_a_remote_failure() -> None:
    with pytest.raises(RemoteFailure) as exc_info:
        _call(lambda request: httpx.Response(200, json={"hostname": "box"}))
    assert exc_info.value.message == "response.invalid"


def test_transport_failure_raises_unreachable() -> None:
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(Unreachable) as exc_info:
        _call(handler)
    assert "connection refused" in exc_info.value.reason


def test_request_bodies_and_headers() -> None:
    seen = []

    def handler(request):
        seen.append(request)
        return envelope(success=True, result=None)

    _call(handler, method="POST", path="/api/v1/instance/lobby", body={"version": "1.19"}, token="t0k3n")
    _call(handler, method="POST", path="/raw", body='{"already": "json"}')

    first, second = seen
    assert first.url == "http://backend.test/api/v1/instance/lobby"
    assert json.loads(first.content) == {"version": "1.19"}
    assert first.headers["authorization"] == "Bearer t0k3n"
    assert first.headers["cache-control"] == "no-cache"
    assert second.content == b'{"already": "json"}'
    assert second.headers["content-type"] == "application/json"
    assert "authorization" not in second.headers


def test_token_can_be_replaced_and_removed() -> None:
    seen = []

    def handler(request):
        seen.append(request.headers.get("authorization"))
        return envelope(success=True, result=None)

    async def scenario():
        async with make_api(handler, token="old") as api:
            await api.get("/a")
            api.set_token("new")
            await api.get("/b")
            api.set_token(None)
            await api.get("/c")

    asyncio.run(scenario())
    assert seen == ["Bearer old", "Bearer new", None]


def test_raw_post_returns_failure_envelope_regardless_of_status() -> None:
    async def scenario():
        handler = lambda request: envelope(403, success=False, message="auth.too_many")
        async with make_api(handler) as api:
            return await api.raw_post("/api/v1/auth/login", {"username": "a"})

    result = asyncio.run(scenario())
    assert isinstance(result, Envelope)
    assert result.success is False
    assert result.message == "auth.too_many"


def _ping(handler, notifier=None) -> bool:
    async def scenario():
        async with make_api(handler, notifier=notifier) as api:
            return await api.ping()

    return asyncio.run(scenario())


def test_ping_true_when_backend_answers(notifier, queue) -> None:
    seen = []

    def handler(request):
        seen.append(request.url.path)
        return envelope(success=True, result="pong")

    assert _ping(handler, notifier) is True
    assert seen == ["/api/v1/auth/ping"]
    assert queue.current is None


def test_ping_true_on_any_decodable_reply(notifier, queue) -> None:
    assert _ping(lambda request: envelope(401, success=False), notifier) is True
    assert queue.current is None


def test_ping_false_raises_urgent_alert(notifier, queue) -> None:
    notifier.notify("older alert")

    def handler(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    assert _ping(handler, notifier) is False
    assert queue.current.message == "server.unreachable"
    assert queue.current.typ is Severity.DANGER


def test_ping_false_on_unreadable_reply(notifier, queue) -> None:
    assert _ping(lambda request: httpx.Response(200, content=b"ok"), notifier) is False
    assert queue.current.message == "server.unreachable"


def test_ping_without_notifier() -> None:
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    assert _ping(handler) is False
