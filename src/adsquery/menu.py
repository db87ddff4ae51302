from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Sequence

import typer

from adsquery import gaql
from adsquery.client import DEFAULT_APP_ANALYTICS_PROVIDER_ID, AdsApiError, AdsClient
from adsquery.console import Prompter, banner, error, ok, warn
from adsquery.formatting import money, percent, pick, project, render_table, with_derived_metrics
from adsquery.util import json_dumps

GAQL_EXAMPLE = "SELECT campaign.id, campaign.name, metrics.impressions FROM campaign"


@dataclass(frozen=True)
class MenuOption:
    key: str
    label: str
    action: Callable[[], Any] | None  # None exits the menu


def run_menu(title: str, options: Sequence[MenuOption], prompter: Prompter) -> None:
    """Show `options` until the exit option is picked. Action errors never end the loop."""
    by_key = {o.key: o for o in options}
    keys = ", ".join(o.key for o in options)
    while True:
        typer.echo("")
        banner(title)
        for o in options:
            typer.echo(f"{o.key}. {o.label}")

        choice = prompter.ask(f"\nSelect an option ({options[0].key}-{options[-1].key})")
        option = by_key.get(choice)
        if option is None:
            warn(f"invalid option. Please select one of: {keys}")
            continue
        if option.action is None:
            return
        try:
            option.action()
        except AdsApiError as e:
            error(str(e))
        except Exception as e:  # noqa: BLE001 - keep the menu alive
            error(f"{type(e).__name__}: {e}")


def show_accessible_customers(client: AdsClient) -> list[str]:
    typer.echo("\nListing accessible customer accounts...")
    ids = client.list_accessible_customers()
    if not ids:
        warn("no accessible customer accounts found.")
        return ids
    ok(f"found {len(ids)} accessible customer accounts:")
    for i, cid in enumerate(ids, start=1):
        typer.echo(f"{i}. Customer ID: {cid}")
    return ids


def _echo_customer(client: AdsClient) -> None:
    typer.echo(f"Using customer ID: {client.customer_id}")
    if client.creds.login_customer_id:
        typer.echo(f"Using login customer ID: {client.creds.login_customer_id}")


def show_query_results(client: AdsClient, query: str, *, raw: bool = True) -> list[dict[str, Any]]:
    typer.echo("\nRunning query...")
    _echo_customer(client)
    rows = client.query(query)
    if not rows:
        warn("query returned no results.")
        return rows
    ok(f"query returned {len(rows)} results:")
    typer.echo(render_table([with_derived_metrics(r) for r in rows]))
    if raw:
        typer.echo("\nRaw results (for reference):")
        typer.echo(json_dumps(rows))
    return rows


def show_conversion_actions(client: AdsClient) -> list[dict[str, Any]]:
    typer.echo("\nListing conversion actions...")
    _echo_customer(client)
    rows = client.list_conversion_actions()
    if not rows:
        warn("no conversion actions found.")
        return rows
    ok(f"found {len(rows)} conversion actions:")
    typer.echo(render_table(rows))
    return rows


def _ask_query(prompter: Prompter) -> str:
    typer.echo("\nEnter your GAQL query:")
    typer.echo(f"Example: {GAQL_EXAMPLE}")
    return prompter.ask(">")


def _enable_conversion_action(client: AdsClient, prompter: Prompter) -> None:
    show_conversion_actions(client)
    ca_id = prompter.ask("\nEnter the ID of the conversion action to update from HIDDEN to ENABLED")
    if not ca_id:
        warn("no conversion action ID provided. Operation cancelled.")
        return
    typer.echo("\nUpdating conversion action status...")
    resource_name = client.update_conversion_action_status(ca_id, "ENABLED")
    ok("updated conversion action status to ENABLED")
    typer.echo(f"Resource Name: {resource_name}")


def _create_analytics_link(client: AdsClient, prompter: Prompter) -> None:
    provider_id = DEFAULT_APP_ANALYTICS_PROVIDER_ID
    if not prompter.confirm(f"\nUse default App Analytics Provider ID ({DEFAULT_APP_ANALYTICS_PROVIDER_ID})?"):
        raw = prompter.ask("Enter the App Analytics Provider ID")
        if raw.isdigit():
            provider_id = int(raw)
        else:
            warn(f"no valid provider ID provided. Using default ({DEFAULT_APP_ANALYTICS_PROVIDER_ID}).")
    typer.echo("\nCreating Third-Party App Analytics Link...")
    _echo_customer(client)
    resource_name = client.create_app_analytics_link(provider_id)
    ok("created Third-Party App Analytics Link")
    typer.echo(f"Resource Name: {resource_name}")


def query_tool_menu(client: AdsClient, prompter: Prompter) -> None:
    options = [
        MenuOption("1", "List accessible customer accounts", lambda: show_accessible_customers(client)),
        MenuOption("2", "Run GAQL query", lambda: show_query_results(client, _ask_query(prompter))),
        MenuOption("3", "List conversion actions", lambda: show_conversion_actions(client)),
        MenuOption(
            "4",
            "Update conversion action status (HIDDEN -> ENABLED)",
            lambda: _enable_conversion_action(client, prompter),
        ),
        MenuOption("5", "Create Third-Party App Analytics Link", lambda: _create_analytics_link(client, prompter)),
        MenuOption("6", "Exit", None),
    ]
    run_menu("Main Menu", options, prompter)
    typer.echo("\nThank you for using Google Ads API Query Tool!")


# Example reports ------------------------------------------------------------


def _cost(row: dict[str, Any]) -> str:
    return money(pick(row, "metrics.cost_micros"))


def _perf_columns(row: dict[str, Any]) -> dict[str, Any]:
    return {
        "ctr": percent(pick(row, "metrics.ctr")),
        "avgCpc": money(pick(row, "metrics.average_cpc")),
        "cost": _cost(row),
    }


EXAMPLE_REPORTS: dict[str, tuple[str, gaql.ReportSpec, dict[str, str]]] = {
    "campaigns": (
        "Campaigns",
        gaql.CAMPAIGNS_REPORT,
        {
            "id": "campaign.id",
            "name": "campaign.name",
            "status": "campaign.status",
            "channel": "campaign.advertising_channel_type",
            "impressions": "metrics.impressions",
            "clicks": "metrics.clicks",
        },
    ),
    "ad_groups": (
        "Ad Groups",
        gaql.AD_GROUPS_REPORT,
        {
            "id": "ad_group.id",
            "name": "ad_group.name",
            "status": "ad_group.status",
            "campaign": "campaign.name",
            "impressions": "metrics.impressions",
            "clicks": "metrics.clicks",
        },
    ),
    "keywords": (
        "Keywords",
        gaql.KEYWORDS_REPORT,
        {
            "id": "ad_group_criterion.criterion_id",
            "keyword": "ad_group_criterion.keyword.text",
            "matchType": "ad_group_criterion.keyword.match_type",
            "status": "ad_group_criterion.status",
            "adGroup": "ad_group.name",
            "campaign": "campaign.name",
            "impressions": "metrics.impressions",
            "clicks": "metrics.clicks",
        },
    ),
    "ads": (
        "Ads",
        gaql.ADS_REPORT,
        {
            "id": "ad_group_ad.ad.id",
            "type": "ad_group_ad.ad.type",
            "finalUrls": "ad_group_ad.ad.final_urls",
            "status": "ad_group_ad.status",
            "adGroup": "ad_group.name",
            "campaign": "campaign.name",
            "impressions": "metrics.impressions",
            "clicks": "metrics.clicks",
        },
    ),
    "account_performance": (
        "Account Performance (Last 30 Days)",
        gaql.ACCOUNT_PERFORMANCE_REPORT,
        {
            "account": "customer.descriptive_name",
            "impressions": "metrics.impressions",
            "clicks": "metrics.clicks",
            "conversions": "metrics.conversions",
            "convValue": "metrics.conversions_value",
        },
    ),
    "campaign_performance": (
        "Campaign Performance (Last 30 Days)",
        gaql.CAMPAIGN_PERFORMANCE_REPORT,
        {
            "id": "campaign.id",
            "name": "campaign.name",
            "status": "campaign.status",
            "impressions": "metrics.impressions",
            "clicks": "metrics.clicks",
            "conversions": "metrics.conversions",
        },
    ),
}


def show_example_report(client: AdsClient, name: str) -> list[dict[str, Any]]:
    title, spec, columns = EXAMPLE_REPORTS[name]
    rows = client.report(spec)
    if not rows:
        warn(f"no data available for {title.lower()}.")
        return []
    table = project(rows, columns)
    for row, out in zip(rows, table):
        if "metrics.ctr" in spec.metrics:
            out.update(_perf_columns(row))
        else:
            out["cost"] = _cost(row)
    typer.echo(f"\n{title}:")
    typer.echo(render_table(table))
    return table


def check_connection(client: AdsClient) -> bool:
    try:
        ids = show_accessible_customers(client)
        typer.echo(f"\nTotal accessible accounts: {len(ids)}")
    except AdsApiError as e:
        error(f"listing accessible customers: {e}")

    try:
        client.query(gaql.CONNECTION_TEST_QUERY)
    except AdsApiError as e:
        error(f"customer account is not accessible: {e}")
        typer.echo("Please check your credentials and customer IDs.")
        return False
    ok("customer account is accessible.")
    return True


def playground_menu(client: AdsClient, prompter: Prompter) -> None:
    def _report(name: str) -> Callable[[], Any]:
        return lambda: show_example_report(client, name)

    options = [
        MenuOption("1", "List Campaigns", _report("campaigns")),
        MenuOption("2", "List Ad Groups", _report("ad_groups")),
        MenuOption("3", "List Keywords", _report("keywords")),
        MenuOption("4", "List Ads", _report("ads")),
        MenuOption("5", "Get Account Performance", _report("account_performance")),
        MenuOption("6", "Get Campaign Performance", _report("campaign_performance")),
        MenuOption("7", "Run Custom GAQL Query", lambda: show_query_results(client, _ask_query(prompter))),
        MenuOption("8", "Exit", None),
    ]
    run_menu("Available Example Queries", options, prompter)
