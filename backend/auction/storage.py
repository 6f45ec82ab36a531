from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from auction.config import MAX_ITEM_BYTES
from auction.schemas import Item

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


class StorageError(Exception):
    """The storage substrate failed; not part of the auction error taxonomy."""


def encode_item(item: Item) -> bytes:
    return json.dumps(item.model_dump(mode="json"), ensure_ascii=True, separators=(",", ":")).encode("utf-8")


def read_snapshot(path: Path) -> dict[int, Item]:
    if not path.exists():
        return {}
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except (OSError, json.JSONDecodeError) as err:
        raise StorageError(f"Cannot read item snapshot {path}: {err}") from err

    if not isinstance(data, dict) or data.get("version") != SNAPSHOT_VERSION:
        raise StorageError(f"Unsupported item snapshot format in {path}")

    items: dict[int, Item] = {}
    try:
        for raw_id, raw_item in data.get("items", {}).items():
            items[int(raw_id)] = Item.model_validate(raw_item)
    except (ValueError, ValidationError) as err:
        raise StorageError(f"Corrupt item record in {path}: {err}") from err
    return items


def write_snapshot(path: Path, items: dict[int, Item]) -> None:
    data = {
        "version": SNAPSHOT_VERSION,
        "items": {str(item_id): items[item_id].model_dump(mode="json") for item_id in sorted(items)},
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(".tmp")
    try:
        with tmp_path.open("w", encoding="utf-8") as handle:
            json.dump(data, handle, ensure_ascii=True, indent=2)
        tmp_path.replace(path)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise


class ItemStore:
    """Ordered ``item id -> Item`` mapping, optionally backed by a JSON snapshot.

    Every read hands out a copy and every write stores a copy, so callers
    never share a record with the store. ``lock`` is re-entrant: services
    hold it across a read-modify-write while ``get``/``put`` take it again.
    """

    def __init__(self, path: Optional[Path] = None, max_item_bytes: int = MAX_ITEM_BYTES):
        self.path = path
        self.max_item_bytes = max_item_bytes
        self.lock = threading.RLock()
        self._items: dict[int, Item] = read_snapshot(path) if path else {}
        if path:
            logger.info("Loaded %d items from %s", len(self._items), path)

    def get(self, item_id: int) -> Optional[Item]:
        with self.lock:
            item = self._items.get(item_id)
            return item.model_copy(deep=True) if item else None

    def put(self, item_id: int, item: Item) -> Optional[Item]:
        size = len(encode_item(item))
        if size > self.max_item_bytes:
            raise StorageError(
                f"Encoded item {item_id} is {size} bytes, limit is {self.max_item_bytes}"
            )

        with self.lock:
            previous = self._items.get(item_id)
            self._items[item_id] = item.model_copy(deep=True)
            if self.path:
                try:
                    write_snapshot(self.path, self._items)
                except OSError as err:
                    if previous is None:
                        del self._items[item_id]
                    else:
                        self._items[item_id] = previous
                    logger.error("Failed to persist item %s: %s", item_id, err)
                    raise StorageError(f"Cannot write item snapshot {self.path}: {err}") from err
            return previous

    def scan(self) -> list[tuple[int, Item]]:
        with self.lock:
            return [(item_id, self._items[item_id].model_copy(deep=True)) for item_id in sorted(self._items)]

    def count(self) -> int:
        with self.lock:
            return len(self._items)
