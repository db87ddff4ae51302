from __future__ import annotations

import json
from datetime import date
from unittest.mock import MagicMock

from adsquery.client import AdsApiError
from adsquery.collector import collect_click_view, save_day


def _client(rows_by_day: dict[str, object]) -> MagicMock:
    """Mock AdsClient whose query() answers by the date in the click_view filter."""
    client = MagicMock()

    def query(q: str):
        day = q.rsplit("'", 2)[-2]
        result = rows_by_day.get(day, [])
        if isinstance(result, Exception):
            raise result
        return result

    client.query.side_effect = query
    return client


def test_save_day_skips_empty_rows(tmp_path):
    assert save_day(tmp_path / "out", "2024-03-01", []) is None
    assert not (tmp_path / "out").exists()


def test_save_day_writes_json(tmp_path):
    path = save_day(tmp_path / "out", "2024-03-01", [{"click_view": {"gclid": "g1"}}])
    assert path == tmp_path / "out" / "click_view_2024-03-01.json"
    assert json.loads(path.read_text(encoding="utf-8")) == [{"click_view": {"gclid": "g1"}}]


def test_collect_walks_back_from_today(tmp_path):
    client = _client(
        {
            "2024-03-03": [{"click_view": {"gclid": "a"}}, {"click_view": {"gclid": "b"}}],
            "2024-03-01": [{"click_view": {"gclid": "c"}}],
        }
    )
    sleeps: list[float] = []

    summary = collect_click_view(
        client,
        days=3,
        out_dir=tmp_path,
        delay_seconds=0.25,
        today=date(2024, 3, 3),
        sleep=sleeps.append,
    )

    queried = [c.args[0].rsplit("'", 2)[-2] for c in client.query.call_args_list]
    assert queried == ["2024-03-03", "2024-03-02", "2024-03-01"]
    assert summary.days == 3
    assert summary.total_rows == 3
    assert [p.name for p in summary.files] == ["click_view_2024-03-03.json", "click_view_2024-03-01.json"]
    assert not (tmp_path / "click_view_2024-03-02.json").exists()
    assert summary.failed_days == []
    assert sleeps == [0.25, 0.25, 0.25]


def test_collect_failed_day_does_not_stop_batch(tmp_path):
    client = _client(
        {
            "2024-03-02": AdsApiError("query failed: quota"),
            "2024-03-01": [{"click_view": {"gclid": "c"}}],
        }
    )

    summary = collect_click_view(
        client,
        days=2,
        out_dir=tmp_path,
        delay_seconds=0,
        today=date(2024, 3, 2),
        sleep=lambda s: None,
    )

    assert summary.failed_days == ["2024-03-02"]
    assert summary.total_rows == 1
    assert [p.name for p in summary.files] == ["click_view_2024-03-01.json"]


def test_collect_without_delay_never_sleeps(tmp_path):
    slept: list[float] = []
    collect_click_view(
        _client({}),
        days=2,
        out_dir=tmp_path,
        delay_seconds=0,
        today=date(2024, 3, 2),
        sleep=slept.append,
    )
    assert slept == []
