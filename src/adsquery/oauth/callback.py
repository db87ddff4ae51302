from __future__ import annotations

import asyncio
import html
import socket
from concurrent.futures import Future, InvalidStateError
from typing import Any

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse

from adsquery.oauth.errors import AuthorizationError

SUCCESS_HTML = """<!DOCTYPE html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <title>Authentication Successful</title>
  </head>
  <body>
    <h1>Authentication Successful</h1>
    <p>You have successfully authenticated with Google Ads API.</p>
    <p>You can close this window and return to the application.</p>
  </body>
</html>
"""

FAILURE_HTML = """<!DOCTYPE html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <title>Authentication Failed</title>
  </head>
  <body>
    <h1>Authentication Failed</h1>
    <p>No authorization code was received.{detail}</p>
    <p>Please try again.</p>
  </body>
</html>
"""


class PendingAuthorization:
    """
    One in-flight authorization: the local port the provider redirects to and
    a single-slot handle for the authorization code.

    The handle is a `concurrent.futures.Future` so it can be resolved from
    whichever thread or loop serves the redirect.
    """

    def __init__(self, port: int) -> None:
        self.port = int(port)
        self._code: Future[str] = Future()

    @property
    def redirect_uri(self) -> str:
        return f"http://localhost:{self.port}"

    @property
    def resolved(self) -> bool:
        return self._code.done()

    def resolve(self, code: str) -> bool:
        """Store `code` if no code was stored yet. Returns True on the first call only."""
        try:
            self._code.set_result(code)
        except InvalidStateError:
            return False
        return True

    def result(self) -> str:
        return self._code.result(timeout=0)

    async def wait(self) -> str:
        # No timeout: the operator either finishes the browser flow or interrupts.
        return await asyncio.wrap_future(self._code)


def create_callback_app(pending: PendingAuthorization) -> FastAPI:
    app = FastAPI(docs_url=None, redoc_url=None, openapi_url=None)

    @app.get("/{path:path}", response_class=HTMLResponse)
    async def oauth_redirect(request: Request, path: str = "") -> HTMLResponse:
        code = (request.query_params.get("code") or "").strip()
        if not code:
            error = (request.query_params.get("error") or "").strip()
            detail = f" Provider error: {html.escape(error)}." if error else ""
            return HTMLResponse(FAILURE_HTML.format(detail=detail), status_code=400)

        pending.resolve(code)
        return HTMLResponse(SUCCESS_HTML, status_code=200)

    return app


def _bind_socket(host: str, port: int) -> socket.socket:
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind((host, port))
    except OSError as e:
        sock.close()
        raise AuthorizationError(f"cannot listen on {host}:{port}: {e}") from e
    return sock


class CallbackListener:
    """
    Local HTTP listener that captures the OAuth redirect for `pending`.

    Use as an async context manager: the port is bound on enter and always
    released on exit. After a code arrives the server keeps running for
    `grace_seconds` so the browser can finish loading the success page.
    """

    def __init__(
        self,
        pending: PendingAuthorization,
        *,
        host: str = "127.0.0.1",
        grace_seconds: float = 1.0,
    ) -> None:
        self.pending = pending
        self.host = host
        self.grace_seconds = max(0.0, float(grace_seconds))
        self._sock: socket.socket | None = None
        self._server: uvicorn.Server | None = None
        self._task: asyncio.Task[None] | None = None

    async def __aenter__(self) -> "CallbackListener":
        await self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    @property
    def serving(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self._task is not None:
            raise AuthorizationError("callback listener already started")

        self._sock = _bind_socket(self.host, self.pending.port)
        config = uvicorn.Config(
            create_callback_app(self.pending),
            log_config=None,
            log_level="warning",
            access_log=False,
            lifespan="off",
        )
        self._server = uvicorn.Server(config)
        self._task = asyncio.create_task(self._server.serve(sockets=[self._sock]))

        while not self._server.started:
            if self._task.done():
                sock = self._sock
                self._sock = None
                sock.close()
                raise AuthorizationError(f"callback listener failed to start on port {self.pending.port}")
            await asyncio.sleep(0.01)

    async def wait_for_code(self) -> str:
        if self._task is None:
            raise AuthorizationError("callback listener is not running")

        code_fut = asyncio.ensure_future(self.pending.wait())
        done, _ = await asyncio.wait({code_fut, self._task}, return_when=asyncio.FIRST_COMPLETED)
        if code_fut not in done:
            code_fut.cancel()
            raise AuthorizationError("callback listener stopped before an authorization code arrived")
        return code_fut.result()

    async def close(self) -> None:
        try:
            if self._server is not None and self._task is not None and not self._task.done():
                if self.pending.resolved and self.grace_seconds:
                    await asyncio.sleep(self.grace_seconds)
                self._server.should_exit = True
                await self._task
        finally:
            if self._sock is not None:
                self._sock.close()
                self._sock = None
            self._server = None
            self._task = None
