from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

import typer

from adsquery.config import REQUIRED_FIELDS, Credentials, Settings
from adsquery.console import Prompter, ok
from adsquery.oauth import obtain_refresh_token
from adsquery.util import normalize_customer_id

Authorize = Callable[[Credentials, Settings, Prompter], Awaitable[str | None]]


def _label(field_name: str) -> str:
    return field_name.replace("_", " ")


def ask_until_filled(prompter: Prompter, text: str, *, hide: bool = False) -> str:
    while True:
        answer = prompter.ask(text, hide=hide)
        if answer:
            return answer
        typer.echo("A value is required.")


def fill_required(creds: Credentials, prompter: Prompter) -> None:
    for name in REQUIRED_FIELDS:
        if not getattr(creds, name):
            setattr(creds, name, ask_until_filled(prompter, f"Please enter your {_label(name)}"))


def ask_refresh_token_manually(prompter: Prompter) -> str:
    return ask_until_filled(prompter, "Please enter your refresh token manually", hide=True)


def ensure_refresh_token(
    creds: Credentials,
    settings: Settings,
    prompter: Prompter,
    *,
    authorize: Authorize = obtain_refresh_token,
) -> None:
    if creds.refresh_token:
        return

    typer.echo("\nYou need to obtain a refresh token for Google Ads API authentication.")
    if prompter.confirm("Would you like to generate an authorization URL to get a refresh token?"):
        asyncio.run(authorize(creds, settings, prompter))

    if not creds.refresh_token:
        creds.refresh_token = ask_refresh_token_manually(prompter)


def complete_credentials(
    creds: Credentials,
    settings: Settings,
    prompter: Prompter,
    *,
    authorize: Authorize = obtain_refresh_token,
    save: bool = True,
) -> Credentials:
    """
    Prompt for every missing credential, then persist the bundle to the .env file.

    Required fields are asked until non-empty; the login (manager) customer id
    is optional.
    """
    fill_required(creds, prompter)
    ensure_refresh_token(creds, settings, prompter, authorize=authorize)

    while not creds.customer_id:
        creds.customer_id = normalize_customer_id(
            ask_until_filled(prompter, "Please enter the customer ID you want to query (without dashes)")
        )

    if not creds.login_customer_id and prompter.confirm("Do you want to specify a login customer ID?"):
        creds.login_customer_id = normalize_customer_id(prompter.ask("Please enter the login customer ID"))

    if save:
        creds.save(settings.env_path)
        ok(f"configuration saved to {settings.env_path}")
    return creds
