from __future__ import annotations

import asyncio
import socket

import pytest
from fastapi.testclient import TestClient

from adsquery.oauth import AuthorizationError, CallbackListener, PendingAuthorization, create_callback_app


def _client(port: int = 8080) -> tuple[PendingAuthorization, TestClient]:
    pending = PendingAuthorization(port)
    return pending, TestClient(create_callback_app(pending))


def _free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


# ------------------------------------------------------------------ #
# PendingAuthorization                                                 #
# ------------------------------------------------------------------ #


def test_redirect_uri_uses_localhost_and_port():
    assert PendingAuthorization(8080).redirect_uri == "http://localhost:8080"


def test_resolve_only_first_code_wins():
    pending = PendingAuthorization(8080)
    assert pending.resolved is False
    assert pending.resolve("first") is True
    assert pending.resolve("second") is False
    assert pending.resolved is True
    assert pending.result() == "first"


def test_wait_returns_resolved_code():
    pending = PendingAuthorization(8080)
    pending.resolve("abc")
    assert asyncio.run(pending.wait()) == "abc"


# ------------------------------------------------------------------ #
# Redirect handler                                                     #
# ------------------------------------------------------------------ #


def test_request_without_code_is_400_and_unresolved():
    pending, client = _client()
    resp = client.get("/")
    assert resp.status_code == 400
    assert "Authentication Failed" in resp.text
    assert pending.resolved is False


def test_empty_code_is_treated_as_missing():
    pending, client = _client()
    resp = client.get("/", params={"code": ""})
    assert resp.status_code == 400
    assert pending.resolved is False


def test_request_with_code_is_200_and_resolves():
    pending, client = _client()
    resp = client.get("/", params={"code": "4/0AbCd", "scope": "x"})
    assert resp.status_code == 200
    assert "Authentication Successful" in resp.text
    assert pending.result() == "4/0AbCd"


def test_any_path_is_accepted():
    pending, client = _client()
    resp = client.get("/oauth2callback", params={"code": "xyz"})
    assert resp.status_code == 200
    assert pending.result() == "xyz"


def test_second_code_does_not_replace_first():
    pending, client = _client()
    assert client.get("/", params={"code": "one"}).status_code == 200
    assert client.get("/", params={"code": "two"}).status_code == 200
    assert pending.result() == "one"


def test_failed_request_then_code_still_succeeds():
    pending, client = _client()
    assert client.get("/favicon.ico").status_code == 400
    assert pending.resolved is False
    assert client.get("/", params={"code": "later"}).status_code == 200
    assert pending.result() == "later"


def test_provider_error_is_named_and_escaped():
    pending, client = _client()
    resp = client.get("/", params={"error": "<access_denied>"})
    assert resp.status_code == 400
    assert "&lt;access_denied&gt;" in resp.text
    assert pending.resolved is False


# ------------------------------------------------------------------ #
# CallbackListener                                                     #
# ------------------------------------------------------------------ #


def test_listener_releases_port_on_exit():
    port = _free_port()

    async def _run():
        pending = PendingAuthorization(port)
        async with CallbackListener(pending, grace_seconds=0) as listener:
            assert listener.serving
        assert not listener.serving

    asyncio.run(_run())

    # Port must be bindable again right away.
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        s.bind(("127.0.0.1", port))


def test_listener_bind_conflict_raises_authorization_error():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as busy:
        busy.bind(("127.0.0.1", 0))
        busy.listen(1)
        port = busy.getsockname()[1]

        async def _run():
            async with CallbackListener(PendingAuthorization(port), grace_seconds=0):
                pass

        with pytest.raises(AuthorizationError):
            asyncio.run(_run())


def test_wait_for_code_requires_running_listener():
    listener = CallbackListener(PendingAuthorization(_free_port()))
    with pytest.raises(AuthorizationError):
        asyncio.run(listener.wait_for_code())


def test_wait_for_code_errors_when_server_stops_first():
    port = _free_port()

    async def _run():
        pending = PendingAuthorization(port)
        async with CallbackListener(pending, grace_seconds=0) as listener:
            listener._server.should_exit = True
            with pytest.raises(AuthorizationError):
                await listener.wait_for_code()
            assert pending.resolved is False

    asyncio.run(_run())
