from __future__ import annotations

import pytest

from adsquery import gaql
from adsquery.gaql import Constraint, ReportSpec, build_report_query, click_view_query, gaql_literal


@pytest.mark.parametrize(
    "val,expected",
    [
        (True, "TRUE"),
        (False, "FALSE"),
        (42, "42"),
        (1.5, "1.5"),
        ("ENABLED", "'ENABLED'"),
        ("O'Brien", "'O\\'Brien'"),
        (["A", "B"], "('A', 'B')"),
    ],
)
def test_gaql_literal(val, expected):
    assert gaql_literal(val) == expected


def test_build_report_query_full():
    spec = ReportSpec(
        entity="campaign",
        attributes=["campaign.id", "campaign.name"],
        metrics=["metrics.clicks"],
        segments=["segments.date"],
        constraints=[
            Constraint("campaign.status", "in", ["ENABLED", "PAUSED"]),
            Constraint("metrics.clicks", ">", 0),
        ],
        date_constant="last_7_days",
        order_by="metrics.clicks DESC",
        limit=5,
    )
    assert build_report_query(spec) == (
        "SELECT\n"
        "  campaign.id,\n"
        "  campaign.name,\n"
        "  metrics.clicks,\n"
        "  segments.date\n"
        "FROM campaign\n"
        "WHERE campaign.status IN ('ENABLED', 'PAUSED')\n"
        "  AND metrics.clicks > 0\n"
        "  AND segments.date DURING LAST_7_DAYS\n"
        "ORDER BY metrics.clicks DESC\n"
        "LIMIT 5"
    )


def test_build_report_query_minimal():
    q = build_report_query(ReportSpec(entity="customer", attributes=["customer.id"]))
    assert q == "SELECT\n  customer.id\nFROM customer"


@pytest.mark.parametrize(
    "spec",
    [
        ReportSpec(entity=" ", attributes=["campaign.id"]),
        ReportSpec(entity="campaign"),
        ReportSpec(entity="campaign", attributes=["campaign.id"], date_constant="YESTERYEAR"),
        ReportSpec(entity="campaign", attributes=["campaign.id"], limit=0),
    ],
)
def test_build_report_query_rejects_bad_specs(spec):
    with pytest.raises(ValueError):
        build_report_query(spec)


def test_keywords_report_filters_keyword_criteria():
    q = build_report_query(gaql.KEYWORDS_REPORT)
    assert "FROM ad_group_criterion" in q
    assert "WHERE ad_group_criterion.type = 'KEYWORD'" in q
    assert q.endswith("LIMIT 20")


def test_performance_reports_cover_last_30_days():
    for spec in (gaql.ACCOUNT_PERFORMANCE_REPORT, gaql.CAMPAIGN_PERFORMANCE_REPORT):
        assert "segments.date DURING LAST_30_DAYS" in build_report_query(spec)


def test_click_view_query_filters_single_day():
    q = click_view_query("2024-03-01")
    assert q.startswith("SELECT")
    assert "FROM click_view" in q
    assert q.endswith("WHERE segments.date = '2024-03-01'")


@pytest.mark.parametrize("day", ["", "2024-3-1", "yesterday", "2024-03-01' OR 1=1"])
def test_click_view_query_rejects_non_dates(day):
    with pytest.raises(ValueError):
        click_view_query(day)
