"""Run report aggregation."""

from __future__ import annotations

from collections import Counter
from pathlib import Path

from bomfeeds.common.fs import write_json


def summarise_rows(rows: list[dict], *, location_key: str, joined_column: str) -> dict:
    per_product = Counter(row.get("product_id") for row in rows)
    unmatched = sorted({row.get(location_key) for row in rows if row.get(joined_column) is None})
    return {
        "rows": len(rows),
        "rows_by_product": dict(sorted(per_product.items())),
        "locations": len({row.get(location_key) for row in rows}),
        "unmatched_locations": unmatched,
    }


def write_run_summary(
    data_dir: Path,
    *,
    run_id: str,
    command: str,
    region: str,
    output_path: Path,
    counts: dict,
) -> Path:
    status = "partial" if counts.get("unmatched_locations") else "success"
    payload = {
        "run_id": run_id,
        "command": command,
        "region": region,
        "status": status,
        "output": str(output_path),
        "counts": counts,
    }
    summary_path = data_dir / "out" / "reports" / f"{run_id}_summary.json"
    write_json(summary_path, payload)
    return summary_path
