from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable
from urllib.parse import urlencode

import httpx
import typer

from adsquery.config import Credentials, Settings
from adsquery.console import Prompter, error, ok
from adsquery.oauth.callback import CallbackListener, PendingAuthorization
from adsquery.oauth.errors import AuthorizationError

ADWORDS_SCOPE = "https://www.googleapis.com/auth/adwords"


@dataclass(frozen=True)
class TokenResponse:
    access_token: str | None
    refresh_token: str | None
    expires_in: int | None = None
    token_type: str | None = None
    scope: str | None = None
    raw: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def from_json(body: dict[str, Any]) -> "TokenResponse":
        expires_raw = body.get("expires_in")
        try:
            expires_in = int(expires_raw) if expires_raw is not None else None
        except (TypeError, ValueError):
            expires_in = None
        return TokenResponse(
            access_token=str(body.get("access_token") or "") or None,
            refresh_token=str(body.get("refresh_token") or "") or None,
            expires_in=expires_in,
            token_type=str(body.get("token_type") or "") or None,
            scope=str(body.get("scope") or "") or None,
            raw=dict(body),
        )


def build_authorization_url(
    client_id: str,
    *,
    redirect_uri: str,
    auth_uri: str = "https://accounts.google.com/o/oauth2/auth",
    scopes: list[str] | None = None,
) -> str:
    params = {
        "response_type": "code",
        "client_id": client_id,
        "redirect_uri": redirect_uri,
        "scope": " ".join(scopes or [ADWORDS_SCOPE]),
        "access_type": "offline",
        # Forces a refresh token even when consent was granted before.
        "prompt": "consent",
    }
    return f"{auth_uri}?{urlencode(params)}"


async def _post_token(
    token_uri: str,
    data: dict[str, str],
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> TokenResponse:
    try:
        async with httpx.AsyncClient(timeout=30, transport=transport) as client:
            resp = await client.post(token_uri, data=data)
            resp.raise_for_status()
            body = resp.json()
    except httpx.HTTPStatusError as e:
        detail = e.response.text[:300]
        raise AuthorizationError(f"token endpoint returned HTTP {e.response.status_code}: {detail}") from e
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise AuthorizationError(f"token request failed: {type(e).__name__}: {e}") from e
    except ValueError as e:
        raise AuthorizationError("token endpoint returned a non-JSON body") from e

    if not isinstance(body, dict):
        raise AuthorizationError("token endpoint returned an unexpected payload")
    if body.get("error"):
        raise AuthorizationError(f"token endpoint error: {body.get('error_description') or body.get('error')}")
    return TokenResponse.from_json(body)


async def exchange_code(
    code: str,
    *,
    client_id: str,
    client_secret: str,
    redirect_uri: str,
    token_uri: str = "https://oauth2.googleapis.com/token",
    transport: httpx.AsyncBaseTransport | None = None,
) -> TokenResponse:
    """Exchange an authorization code for an access/refresh token pair."""
    return await _post_token(
        token_uri,
        {
            "grant_type": "authorization_code",
            "code": code,
            "client_id": client_id,
            "client_secret": client_secret,
            "redirect_uri": redirect_uri,
        },
        transport=transport,
    )


async def refresh_access_token(
    creds: Credentials,
    *,
    token_uri: str = "https://oauth2.googleapis.com/token",
    transport: httpx.AsyncBaseTransport | None = None,
) -> str:
    if not creds.refresh_token:
        raise AuthorizationError("refresh token is not set")
    tokens = await _post_token(
        token_uri,
        {
            "grant_type": "refresh_token",
            "refresh_token": creds.refresh_token,
            "client_id": creds.client_id,
            "client_secret": creds.client_secret,
        },
        transport=transport,
    )
    if not tokens.access_token:
        raise AuthorizationError("token endpoint did not return an access token")
    return tokens.access_token


def print_instructions(url: str) -> None:
    typer.echo("\n==================== AUTHORIZATION INSTRUCTIONS ====================")
    typer.echo("\n1. Open this URL in your browser:")
    typer.echo(typer.style(url, fg=typer.colors.BLUE, bold=True))
    typer.echo("\n2. Sign in with your Google account")
    typer.echo("3. Grant permissions requested by the application")
    typer.echo("4. You will be redirected to localhost where the code will be captured")
    typer.echo("\n=====================================================================")


async def capture_authorization_code(
    client_id: str,
    settings: Settings,
    *,
    on_url: Callable[[str], None] = print_instructions,
) -> tuple[str, str]:
    """
    Bind the callback port, show the authorization URL and wait for the redirect.

    Returns (code, redirect_uri). The listener is closed before returning.
    """
    pending = PendingAuthorization(settings.oauth_port)
    async with CallbackListener(
        pending,
        host=settings.oauth_host,
        grace_seconds=settings.oauth_grace_seconds,
    ) as listener:
        typer.echo(f"Local authentication server started on port {pending.port}")
        on_url(build_authorization_url(client_id, redirect_uri=pending.redirect_uri, auth_uri=settings.auth_uri))
        typer.echo("\nWaiting for authentication in browser...")
        code = await listener.wait_for_code()
    return code, pending.redirect_uri


async def obtain_refresh_token(
    creds: Credentials,
    settings: Settings,
    prompter: Prompter,
    *,
    on_url: Callable[[str], None] = print_instructions,
    transport: httpx.AsyncBaseTransport | None = None,
) -> str | None:
    """
    Run the browser authorization flow until a refresh token is stored in `creds`.

    Every failure is reported and followed by a yes/no retry question. Returns
    the refresh token, or None once the operator declines to retry; `creds`
    is only modified on success.
    """
    while True:
        try:
            code, redirect_uri = await capture_authorization_code(creds.client_id, settings, on_url=on_url)
            typer.echo("\nAuthorization code received! Exchanging for refresh token...")
            tokens = await exchange_code(
                code,
                client_id=creds.client_id,
                client_secret=creds.client_secret,
                redirect_uri=redirect_uri,
                token_uri=settings.token_uri,
                transport=transport,
            )
        except AuthorizationError as e:
            error(f"authentication failed: {e}")
        else:
            if tokens.refresh_token:
                creds.refresh_token = tokens.refresh_token
                ok("obtained refresh token")
                return tokens.refresh_token
            error('no refresh token returned. Make sure the request uses prompt="consent" and try again.')

        if not prompter.confirm("Would you like to try again?"):
            return None
