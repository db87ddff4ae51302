from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Callable

import typer

from adsquery.client import AdsApiError, AdsClient
from adsquery.console import error, ok
from adsquery.gaql import click_view_query
from adsquery.util import last_n_days


@dataclass
class CollectSummary:
    days: int = 0
    total_rows: int = 0
    files: list[Path] = field(default_factory=list)
    failed_days: list[str] = field(default_factory=list)


def save_day(out_dir: Path, day: str, rows: list[dict[str, Any]]) -> Path | None:
    if not rows:
        return None
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / f"click_view_{day}.json"
    path.write_text(json.dumps(rows, ensure_ascii=False, indent=2, default=str), encoding="utf-8")
    return path


def fetch_day(client: AdsClient, day: str) -> list[dict[str, Any]]:
    typer.echo(f"Running query for date: {day}...")
    rows = client.query(click_view_query(day))
    ok(f"query returned {len(rows)} results for {day}")
    return rows


def collect_click_view(
    client: AdsClient,
    *,
    days: int,
    out_dir: Path,
    delay_seconds: float = 0.1,
    today: date | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> CollectSummary:
    """
    Query click_view one day at a time, newest first, and write one JSON file per
    day that returned rows. A failing day is reported and skipped.
    """
    dates = last_n_days(days, today=today)
    summary = CollectSummary(days=len(dates))
    typer.echo(f"\nPreparing to collect data for the last {len(dates)} days")

    for day in dates:
        try:
            rows = fetch_day(client, day)
        except AdsApiError as e:
            error(f"query for {day}: {e}")
            summary.failed_days.append(day)
            rows = []

        summary.total_rows += len(rows)
        path = save_day(out_dir, day, rows)
        if path is not None:
            summary.files.append(path)
            ok(f"saved {len(rows)} results to {path}")

        # Space requests out to stay clear of rate limits.
        if delay_seconds:
            sleep(delay_seconds)

    return summary
