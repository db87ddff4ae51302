from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

from adsquery.config import Credentials
from adsquery.gaql import CONVERSION_ACTIONS_QUERY, ReportSpec, build_report_query
from adsquery.util import normalize_customer_id

DEFAULT_APP_ANALYTICS_PROVIDER_ID = 8650286658


class AdsApiError(RuntimeError):
    pass


def describe_error(e: BaseException) -> str:
    # GoogleAdsException carries a failure proto with one message per error.
    failure = getattr(e, "failure", None)
    errors = getattr(failure, "errors", None) or []
    messages = [str(getattr(x, "message", "") or "").strip() for x in errors]
    messages = [m for m in messages if m]
    if messages:
        request_id = getattr(e, "request_id", None)
        suffix = f" (request_id={request_id})" if request_id else ""
        return "; ".join(messages) + suffix
    return f"{type(e).__name__}: {e}"


@contextmanager
def _api_call(action: str) -> Iterator[None]:
    try:
        yield
    except AdsApiError:
        raise
    except Exception as e:  # noqa: BLE001 - SDK raises many types; surface one
        raise AdsApiError(f"{action} failed: {describe_error(e)}") from e


def row_to_dict(row: Any) -> dict[str, Any]:
    """Convert a proto-plus GoogleAdsRow into plain JSON-able dicts."""
    if isinstance(row, dict):
        return row
    to_dict = getattr(type(row), "to_dict", None)
    if to_dict is None:
        raise TypeError(f"cannot convert {type(row).__name__} to dict")
    return to_dict(row, use_integers_for_enums=False, preserving_proto_field_name=True)


def build_google_ads_client(creds: Credentials):
    missing = creds.missing_for_api()
    if missing:
        raise AdsApiError("missing credentials: " + ", ".join(missing))

    try:
        from google.ads.googleads.client import GoogleAdsClient  # type: ignore
    except Exception as e:  # noqa: BLE001
        raise AdsApiError("Missing dependency: google-ads") from e

    cfg: dict[str, Any] = {
        "developer_token": creds.developer_token,
        "client_id": creds.client_id,
        "client_secret": creds.client_secret,
        "refresh_token": creds.refresh_token,
        "use_proto_plus": True,
    }
    login_customer_id = normalize_customer_id(creds.login_customer_id)
    if login_customer_id:
        cfg["login_customer_id"] = login_customer_id
    with _api_call("client init"):
        return GoogleAdsClient.load_from_dict(cfg)


class AdsClient:
    """
    Google Ads operations used by the CLI.

    The underlying `GoogleAdsClient` is built lazily so prompts can finish
    filling in credentials first; tests inject a mock through `client`.
    """

    def __init__(self, creds: Credentials, client: Any | None = None):
        self.creds = creds
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = build_google_ads_client(self.creds)
        return self._client

    @property
    def customer_id(self) -> str:
        cid = normalize_customer_id(self.creds.customer_id)
        if not cid:
            raise AdsApiError("customer id is not set")
        return cid

    def list_accessible_customers(self) -> list[str]:
        with _api_call("list accessible customers"):
            svc = self.client.get_service("CustomerService")
            resp = svc.list_accessible_customers()
            # customers/1234567890
            return [str(rn).rsplit("/", 1)[-1] for rn in resp.resource_names]

    def query(self, gaql: str) -> list[dict[str, Any]]:
        q = (gaql or "").strip()
        if not q:
            raise AdsApiError("query is empty")
        cid = self.customer_id
        with _api_call("query"):
            ga_service = self.client.get_service("GoogleAdsService")
            rows: list[dict[str, Any]] = []
            for batch in ga_service.search_stream(customer_id=cid, query=q):
                for row in batch.results:
                    rows.append(row_to_dict(row))
            return rows

    def report(self, spec: ReportSpec) -> list[dict[str, Any]]:
        try:
            q = build_report_query(spec)
        except ValueError as e:
            raise AdsApiError(f"invalid report: {e}") from e
        return self.query(q)

    def list_conversion_actions(self) -> list[dict[str, Any]]:
        out: list[dict[str, Any]] = []
        for row in self.query(CONVERSION_ACTIONS_QUERY):
            ca = row.get("conversion_action") or {}
            out.append(
                {
                    "ID": ca.get("id") or "N/A",
                    "Name": ca.get("name") or "N/A",
                    "Status": ca.get("status") or "N/A",
                    "Type": ca.get("type") or "N/A",
                }
            )
        return out

    def update_conversion_action_status(self, conversion_action_id: str, status: str = "ENABLED") -> str:
        ca_id = str(conversion_action_id or "").strip()
        if not ca_id.isdigit():
            raise AdsApiError(f"conversion action id must be numeric: {conversion_action_id!r}")
        cid = self.customer_id
        resource_name = f"customers/{cid}/conversionActions/{ca_id}"

        with _api_call("update conversion action"):
            client = self.client
            svc = client.get_service("ConversionActionService")
            op = client.get_type("ConversionActionOperation")
            op.update.resource_name = resource_name
            op.update.status = getattr(client.enums.ConversionActionStatusEnum, status.upper())
            op.update_mask.paths.extend(["status"])
            resp = svc.mutate_conversion_actions(customer_id=cid, operations=[op])
            return resp.results[0].resource_name if resp.results else resource_name

    def create_app_analytics_link(
        self,
        provider_id: int = DEFAULT_APP_ANALYTICS_PROVIDER_ID,
        *,
        app_id: str | None = None,
        app_vendor: str | None = None,
    ) -> str:
        cid = self.customer_id
        with _api_call("create third-party app analytics link"):
            client = self.client
            svc = client.get_service("AccountLinkService")
            account_link = client.get_type("AccountLink")
            link = account_link.third_party_app_analytics
            link.app_analytics_provider_id = int(provider_id)
            if app_id:
                link.app_id = app_id
            if app_vendor:
                link.app_vendor = getattr(client.enums.MobileAppVendorEnum, app_vendor.upper())
            resp = svc.create_account_link(customer_id=cid, account_link=account_link)
            return str(resp.resource_name)
