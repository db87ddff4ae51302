from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")

DATE_CONSTANTS = {
    "TODAY",
    "YESTERDAY",
    "LAST_7_DAYS",
    "LAST_BUSINESS_WEEK",
    "THIS_MONTH",
    "LAST_MONTH",
    "LAST_14_DAYS",
    "LAST_30_DAYS",
    "THIS_WEEK_SUN_TODAY",
    "THIS_WEEK_MON_TODAY",
    "LAST_WEEK_SUN_SAT",
    "LAST_WEEK_MON_SUN",
}


@dataclass(frozen=True)
class Constraint:
    key: str
    op: str
    val: Any


@dataclass(frozen=True)
class ReportSpec:
    entity: str
    attributes: list[str] = field(default_factory=list)
    metrics: list[str] = field(default_factory=list)
    segments: list[str] = field(default_factory=list)
    constraints: list[Constraint] = field(default_factory=list)
    date_constant: str | None = None
    order_by: str | None = None
    limit: int | None = None


def gaql_literal(val: Any) -> str:
    if isinstance(val, bool):
        return "TRUE" if val else "FALSE"
    if isinstance(val, (int, float)):
        return str(val)
    if isinstance(val, (list, tuple, set)):
        return "(" + ", ".join(gaql_literal(v) for v in val) + ")"
    s = str(val)
    return "'" + s.replace("\\", "\\\\").replace("'", "\\'") + "'"


def build_report_query(spec: ReportSpec) -> str:
    entity = spec.entity.strip()
    if not entity:
        raise ValueError("report entity is required")
    fields = [*spec.attributes, *spec.metrics, *spec.segments]
    if not fields:
        raise ValueError("report needs at least one attribute, metric or segment")

    lines = ["SELECT", "  " + ",\n  ".join(fields), f"FROM {entity}"]

    where: list[str] = []
    for c in spec.constraints:
        op = c.op.strip().upper()
        where.append(f"{c.key} {op} {gaql_literal(c.val)}")
    if spec.date_constant:
        dc = spec.date_constant.strip().upper()
        if dc not in DATE_CONSTANTS:
            raise ValueError(f"unknown date constant: {spec.date_constant!r}")
        where.append(f"segments.date DURING {dc}")
    if where:
        lines.append("WHERE " + "\n  AND ".join(where))

    if spec.order_by:
        lines.append(f"ORDER BY {spec.order_by}")
    if spec.limit is not None:
        if int(spec.limit) <= 0:
            raise ValueError("limit must be > 0")
        lines.append(f"LIMIT {int(spec.limit)}")
    return "\n".join(lines)


def click_view_query(day: str) -> str:
    if not _DATE_RE.fullmatch(day or ""):
        raise ValueError(f"day must be YYYY-MM-DD: {day!r}")
    # click_view only accepts a single-day filter.
    return f"""
SELECT
  click_view.gclid,
  click_view.page_number,
  click_view.ad_group_ad,
  click_view.keyword,
  click_view.area_of_interest.city,
  campaign.id,
  campaign.name,
  ad_group.id,
  ad_group.name,
  segments.date,
  segments.device,
  segments.ad_network_type,
  segments.click_type,
  metrics.clicks
FROM click_view
WHERE segments.date = '{day}'
""".strip()


CONVERSION_ACTIONS_QUERY = """
SELECT
  conversion_action.id,
  conversion_action.name,
  conversion_action.status,
  conversion_action.type
FROM conversion_action
ORDER BY conversion_action.id
""".strip()

CONNECTION_TEST_QUERY = "SELECT customer.id FROM customer LIMIT 1"

_BASIC_METRICS = ["metrics.impressions", "metrics.clicks", "metrics.cost_micros"]

CAMPAIGNS_REPORT = ReportSpec(
    entity="campaign",
    attributes=[
        "campaign.id",
        "campaign.name",
        "campaign.status",
        "campaign.advertising_channel_type",
        "campaign.start_date",
    ],
    metrics=_BASIC_METRICS,
    limit=20,
)

AD_GROUPS_REPORT = ReportSpec(
    entity="ad_group",
    attributes=["ad_group.id", "ad_group.name", "ad_group.status", "campaign.name"],
    metrics=_BASIC_METRICS,
    limit=20,
)

KEYWORDS_REPORT = ReportSpec(
    entity="ad_group_criterion",
    attributes=[
        "ad_group_criterion.criterion_id",
        "ad_group_criterion.keyword.text",
        "ad_group_criterion.keyword.match_type",
        "ad_group_criterion.status",
        "ad_group.name",
        "campaign.name",
    ],
    metrics=_BASIC_METRICS,
    constraints=[Constraint("ad_group_criterion.type", "=", "KEYWORD")],
    limit=20,
)

ADS_REPORT = ReportSpec(
    entity="ad_group_ad",
    attributes=[
        "ad_group_ad.ad.id",
        "ad_group_ad.ad.final_urls",
        "ad_group_ad.status",
        "ad_group_ad.ad.type",
        "ad_group.name",
        "campaign.name",
    ],
    metrics=_BASIC_METRICS,
    limit=20,
)

ACCOUNT_PERFORMANCE_REPORT = ReportSpec(
    entity="customer",
    attributes=["customer.id", "customer.descriptive_name"],
    metrics=[
        "metrics.impressions",
        "metrics.clicks",
        "metrics.cost_micros",
        "metrics.conversions",
        "metrics.conversions_value",
        "metrics.average_cpc",
        "metrics.ctr",
    ],
    date_constant="LAST_30_DAYS",
)

CAMPAIGN_PERFORMANCE_REPORT = ReportSpec(
    entity="campaign",
    attributes=["campaign.id", "campaign.name", "campaign.status"],
    metrics=[
        "metrics.impressions",
        "metrics.clicks",
        "metrics.cost_micros",
        "metrics.conversions",
        "metrics.average_cpc",
        "metrics.ctr",
    ],
    date_constant="LAST_30_DAYS",
    limit=20,
)
