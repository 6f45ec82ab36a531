from typing import Optional

from pydantic import BaseModel, Field, field_validator

from auction.config import MAX_U64


class Item(BaseModel):
    description: str
    is_active: bool
    owner: str
    new_owner: Optional[str] = None
    bid_count: int = Field(default=0, ge=0)
    bids: dict[str, int] = Field(default_factory=dict)

    @field_validator("bids")
    @classmethod
    def sort_bids(cls, value: dict[str, int]) -> dict[str, int]:
        # Bids iterate in bidder order, like the persisted map.
        return dict(sorted(value.items()))

    def highest_bid(self) -> Optional[tuple[str, int]]:
        """Return ``(bidder, amount)`` for the largest amount, or None without bids.

        The winner is found by amount, not by key order. Equal amounts keep
        the first bidder in key order.
        """

        best: Optional[tuple[str, int]] = None
        for bidder, amount in self.bids.items():
            if best is None or amount > best[1]:
                best = (bidder, amount)
        return best


class ItemCreate(BaseModel):
    description: str
    is_active: bool = True


class ItemEdit(BaseModel):
    description: str


class BidRequest(BaseModel):
    amount: int = Field(ge=0, le=MAX_U64)


class CreateItemResponse(BaseModel):
    previous: Optional[Item] = None


class ItemCountResponse(BaseModel):
    count: int


class CallerResponse(BaseModel):
    caller: str


class ErrorDetail(BaseModel):
    error: str
    message: str
