from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable

from auction.storage import ItemStore

EXPORT_FORMATS = ("json", "ndjson")


def export_items(store: ItemStore, closed_only: bool = False) -> list[dict[str, Any]]:
    records: list[dict[str, Any]] = []
    for item_id, item in store.scan():
        if closed_only and item.new_owner is None:
            continue
        highest = item.highest_bid()
        records.append(
            {
                "id": item_id,
                **item.model_dump(mode="json"),
                "highest_bid": highest[1] if highest else None,
            }
        )
    return records


def write_export(records: Iterable[dict[str, Any]], path: Path, fmt: str = "json") -> int:
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Unsupported export format: {fmt}")

    rows = list(records)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    with tmp_path.open("w", encoding="utf-8") as handle:
        if fmt == "ndjson":
            for row in rows:
                handle.write(json.dumps(row, ensure_ascii=False) + "\n")
        else:
            json.dump(rows, handle, ensure_ascii=False, indent=2)
    tmp_path.replace(path)
    return len(rows)
