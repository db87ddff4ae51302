from __future__ import annotations

from typing import Any, Mapping, Sequence

from adsquery.util import micros_to_currency, to_float


def money(micros: Any) -> str:
    return f"${micros_to_currency(micros):.2f}"


def percent(ratio: Any) -> str:
    return f"{to_float(ratio) * 100:.2f}%"


def with_derived_metrics(row: Mapping[str, Any]) -> dict[str, Any]:
    """Copy `row`, adding dollar/percent renderings of micros and ratio metrics."""
    out = dict(row)
    metrics = row.get("metrics")
    if not isinstance(metrics, Mapping):
        return out
    m = dict(metrics)
    if m.get("cost_micros"):
        m["cost"] = money(m["cost_micros"])
    if m.get("ctr"):
        m["ctr_percent"] = percent(m["ctr"])
    if m.get("average_cpc"):
        m["average_cpc_dollars"] = money(m["average_cpc"])
    out["metrics"] = m
    return out


def flatten(row: Mapping[str, Any], prefix: str = "") -> dict[str, Any]:
    flat: dict[str, Any] = {}
    for key, value in row.items():
        name = f"{prefix}{key}"
        if isinstance(value, Mapping):
            flat.update(flatten(value, prefix=f"{name}."))
        else:
            flat[name] = value
    return flat


def pick(row: Mapping[str, Any], path: str, default: Any = None) -> Any:
    cur: Any = row
    for part in path.split("."):
        if not isinstance(cur, Mapping) or part not in cur:
            return default
        cur = cur[part]
    return cur


def project(rows: Sequence[Mapping[str, Any]], columns: Mapping[str, str]) -> list[dict[str, Any]]:
    """Map each row to {label: value at dotted path}."""
    return [{label: pick(row, path) for label, path in columns.items()} for row in rows]


def _cell(v: Any) -> str:
    if v is None:
        return ""
    if isinstance(v, (list, tuple)):
        return ", ".join(_cell(x) for x in v)
    return str(v)


def render_table(rows: Sequence[Mapping[str, Any]]) -> str:
    if not rows:
        return "(no rows)"
    flat_rows = [flatten(r) for r in rows]
    columns: list[str] = []
    for r in flat_rows:
        for k in r:
            if k not in columns:
                columns.append(k)

    cells = [[_cell(r.get(c)) for c in columns] for r in flat_rows]
    widths = [max(len(c), *(len(row[i]) for row in cells)) for i, c in enumerate(columns)]

    def _line(values: Sequence[str]) -> str:
        return " | ".join(v.ljust(w) for v, w in zip(values, widths)).rstrip()

    out = [_line(columns), "-+-".join("-" * w for w in widths)]
    out.extend(_line(row) for row in cells)
    return "\n".join(out)
