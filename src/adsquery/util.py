from __future__ import annotations

import json
import re
from datetime import date, timedelta
from typing import Any


def normalize_customer_id(raw: str | None) -> str:
    # Google Ads customer id is digits only (UI shows hyphens).
    return re.sub(r"\D+", "", str(raw or ""))


def is_yes(answer: str | None) -> bool:
    return (answer or "").strip().lower() in {"y", "yes"}


def to_float(v: Any) -> float:
    try:
        return float(v or 0)
    except (TypeError, ValueError):
        return 0.0


def micros_to_currency(micros: Any) -> float:
    return to_float(micros) / 1_000_000.0


def last_n_days(n: int, today: date | None = None) -> list[str]:
    """Return `n` ISO dates, newest first, starting at `today`."""
    d0 = today or date.today()
    return [(d0 - timedelta(days=i)).isoformat() for i in range(max(0, n))]


def json_dumps(obj: Any) -> str:
    return json.dumps(obj, ensure_ascii=False, indent=2, default=str)
