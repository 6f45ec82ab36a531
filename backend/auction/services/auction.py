from __future__ import annotations

import logging
from typing import Optional

from auction.schemas import Item
from auction.storage import ItemStore

logger = logging.getLogger(__name__)


class AuctionError(Exception):
    code = "AuctionError"

    def __init__(self, item_id: int, message: str):
        super().__init__(message)
        self.item_id = item_id


class InvalidBid(AuctionError):
    code = "InvalidBid"


class ItemIsNotActive(AuctionError):
    code = "ItemIsNotActive"


class NoSuchItem(AuctionError):
    code = "NoSuchItem"


class AccessRejected(AuctionError):
    code = "AccessRejected"


class UpdateError(AuctionError):
    code = "UpdateError"


class AlreadyExists(AuctionError):
    code = "AlreadyExists"


class AuctionService:
    """
    Business rules for items and bids on top of an ``ItemStore``.

    Each mutating call reads the record, validates, and writes it back while
    holding the store lock, so two operations on the same item never
    interleave. ``caller`` always comes from the trusted request context.
    """

    def __init__(self, store: ItemStore, reject_duplicate_ids: bool = False):
        self.store = store
        self.reject_duplicate_ids = reject_duplicate_ids

    def create_item(self, caller: str, item_id: int, description: str, is_active: bool) -> Optional[Item]:
        item = Item(
            description=description,
            is_active=is_active,
            owner=caller,
            new_owner=None,
            bid_count=0,
            bids={},
        )
        with self.store.lock:
            if self.reject_duplicate_ids and self.store.get(item_id) is not None:
                raise AlreadyExists(item_id, f"Item {item_id} already exists")
            previous = self.store.put(item_id, item)

        if previous is not None:
            logger.warning("Item %s overwritten by %s (previous owner %s)", item_id, caller, previous.owner)
        else:
            logger.info("Item %s created by %s", item_id, caller)
        return previous

    def bid_item(self, caller: str, item_id: int, amount: int) -> Item:
        with self.store.lock:
            item = self._require_item(item_id)
            if not item.is_active:
                raise ItemIsNotActive(item_id, f"Item {item_id} is closed")

            # An empty bid map counts as a zero seed: any positive first bid wins.
            highest = item.highest_bid()
            current = highest[1] if highest else 0
            if amount <= current:
                raise InvalidBid(item_id, f"Bid {amount} does not exceed current highest {current}")

            item.bids[caller] = amount
            item.bids = dict(sorted(item.bids.items()))
            item.bid_count += 1
            self._replace(item_id, item)

        logger.info("Bid %s on item %s by %s accepted", amount, item_id, caller)
        return item

    def edit_item(self, caller: str, item_id: int, new_description: str) -> Item:
        with self.store.lock:
            item = self._require_item(item_id)
            self._require_owner(item, item_id, caller)
            if not item.is_active:
                raise ItemIsNotActive(item_id, f"Item {item_id} is closed")

            item.description = new_description
            self._replace(item_id, item)

        logger.info("Item %s description edited by %s", item_id, caller)
        return item

    def stop_item(self, caller: str, item_id: int) -> Item:
        with self.store.lock:
            item = self._require_item(item_id)
            self._require_owner(item, item_id, caller)

            highest = item.highest_bid()
            if highest is None:
                raise NoSuchItem(item_id, f"Item {item_id} has no bids to close on")

            item.is_active = False
            item.new_owner = highest[0]
            self._replace(item_id, item)

        logger.info("Item %s closed by %s, sold to %s for %s", item_id, caller, highest[0], highest[1])
        return item

    def get_item(self, item_id: int) -> Optional[Item]:
        return self.store.get(item_id)

    def get_item_count(self) -> int:
        return self.store.count()

    def get_all_items(self) -> dict[int, Item]:
        return dict(self.store.scan())

    def get_item_sold_for_the_most(self) -> Optional[Item]:
        best: Optional[Item] = None
        best_amount = 0
        for item_id, item in self.store.scan():
            if item.new_owner is None:
                continue
            highest = item.highest_bid()
            if highest is None:
                raise NoSuchItem(item_id, f"Closed item {item_id} has no bids")
            if best is None or highest[1] > best_amount:
                best, best_amount = item, highest[1]
        return best

    def get_item_bid_on_the_most(self) -> Optional[Item]:
        best: Optional[Item] = None
        for _, item in self.store.scan():
            if item.bid_count > (best.bid_count if best else 0):
                best = item
        return best

    def _require_item(self, item_id: int) -> Item:
        item = self.store.get(item_id)
        if item is None:
            raise NoSuchItem(item_id, f"Item {item_id} not found")
        return item

    @staticmethod
    def _require_owner(item: Item, item_id: int, caller: str) -> None:
        if caller != item.owner:
            raise AccessRejected(item_id, f"Caller {caller} does not own item {item_id}")

    def _replace(self, item_id: int, item: Item) -> None:
        if self.store.put(item_id, item) is None:
            raise UpdateError(item_id, f"Item {item_id} vanished during update")
