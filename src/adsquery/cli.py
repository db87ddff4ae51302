from __future__ import annotations

import asyncio
from pathlib import Path

import typer

from adsquery.client import AdsApiError, AdsClient
from adsquery.collector import collect_click_view
from adsquery.config import Credentials, Settings
from adsquery.console import TyperPrompter, banner, error, ok
from adsquery.menu import (
    check_connection,
    playground_menu,
    query_tool_menu,
    show_accessible_customers,
    show_query_results,
)
from adsquery.oauth import AuthorizationError, obtain_refresh_token, refresh_access_token
from adsquery.prompts import ask_refresh_token_manually, complete_credentials, fill_required

app = typer.Typer(no_args_is_help=True, help="Google Ads API query tool.")


def _bootstrap() -> tuple[Settings, Credentials, TyperPrompter]:
    settings = Settings.load()
    prompter = TyperPrompter()
    creds = complete_credentials(Credentials.from_env(), settings, prompter)
    ok("authentication completed successfully!")
    return settings, creds, prompter


@app.command("setup")
def setup_cmd() -> None:
    """Prompt for missing credentials, obtain a refresh token if needed and save .env."""
    banner("Google Ads API Query Tool", "Setup")
    _bootstrap()


@app.command("auth")
def auth_cmd(
    check: bool = typer.Option(False, "--check", help="Only verify the stored refresh token."),
) -> None:
    """Run the browser authorization flow and store a new refresh token."""
    settings = Settings.load()
    prompter = TyperPrompter()
    creds = Credentials.from_env()
    fill_required(creds, prompter)

    try:
        if check:
            asyncio.run(refresh_access_token(creds, token_uri=settings.token_uri))
            ok("refresh token is valid")
            return
        token = asyncio.run(obtain_refresh_token(creds, settings, prompter))
    except AuthorizationError as e:
        error(str(e))
        raise typer.Exit(code=2) from e

    if not token:
        creds.refresh_token = ask_refresh_token_manually(prompter)
    creds.save(settings.env_path)
    ok(f"refresh token saved to {settings.env_path}")


@app.command("accounts")
def accounts_cmd() -> None:
    """List accessible customer accounts."""
    _, creds, _ = _bootstrap()
    try:
        show_accessible_customers(AdsClient(creds))
    except AdsApiError as e:
        error(f"listing accessible customers: {e}")
        raise typer.Exit(code=2) from e


@app.command("query")
def query_cmd(
    gaql: str = typer.Argument(..., help="GAQL query to run."),
    raw: bool = typer.Option(False, "--raw/--no-raw", help="Also print the raw JSON rows."),
) -> None:
    """Run a single GAQL query."""
    _, creds, _ = _bootstrap()
    try:
        show_query_results(AdsClient(creds), gaql, raw=raw)
    except AdsApiError as e:
        error(f"running GAQL query: {e}")
        raise typer.Exit(code=2) from e


@app.command("menu")
def menu_cmd() -> None:
    """Interactive query tool."""
    banner("Google Ads API Query Tool")
    _, creds, prompter = _bootstrap()
    query_tool_menu(AdsClient(creds), prompter)


@app.command("playground")
def playground_cmd() -> None:
    """Connection test followed by a menu of example reports."""
    banner("Google Ads API Testing Playground")
    _, creds, prompter = _bootstrap()
    client = AdsClient(creds)
    check_connection(client)
    playground_menu(client, prompter)


@app.command("click-view")
def click_view_cmd(
    days: int | None = typer.Option(None, help="Number of days to collect, ending today. Defaults to ADS_COLLECT_DAYS."),
    out_dir: Path | None = typer.Option(None, file_okay=False, help="Output directory for daily JSON files."),
    list_accounts: bool = typer.Option(False, "--list-accounts/--no-list-accounts", help="List accessible accounts first."),
) -> None:
    """Collect click_view rows one day at a time into JSON files."""
    banner("Google Ads Click View Data Collector")
    settings, creds, _ = _bootstrap()
    client = AdsClient(creds)

    if list_accounts:
        try:
            show_accessible_customers(client)
        except AdsApiError as e:
            error(f"listing accessible customers: {e}")

    n_days = days if days is not None else settings.collect_days
    if n_days <= 0:
        error("days must be > 0")
        raise typer.Exit(code=2)
    target = out_dir or settings.output_dir

    summary = collect_click_view(
        client,
        days=n_days,
        out_dir=target,
        delay_seconds=settings.request_delay_seconds,
    )

    typer.echo("")
    banner("Data collection complete!")
    typer.echo(f"Total records collected: {summary.total_rows}")
    typer.echo(f"Files written: {len(summary.files)}")
    if summary.failed_days:
        typer.echo(f"Failed days: {', '.join(summary.failed_days)}")
    typer.echo(f"Data saved to: {target.resolve()}")
