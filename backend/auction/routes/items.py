import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Request

from auction.config import MAX_U64
from auction.routes.auth import get_caller
from auction.schemas import (
    BidRequest,
    CreateItemResponse,
    ErrorDetail,
    Item,
    ItemCountResponse,
    ItemCreate,
    ItemEdit,
)
from auction.services.auction import (
    AccessRejected,
    AuctionError,
    AuctionService,
    NoSuchItem,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/items", tags=["items"])

ItemId = Annotated[int, Path(ge=0, le=MAX_U64)]


def get_service(request: Request) -> AuctionService:
    return request.app.state.auction_service


def to_http_error(err: AuctionError) -> HTTPException:
    if isinstance(err, NoSuchItem):
        status_code = 404
    elif isinstance(err, AccessRejected):
        status_code = 403
    else:
        status_code = 409
    logger.warning("Rejected on item %s: %s (%s)", err.item_id, err.code, err)
    return HTTPException(
        status_code=status_code,
        detail=ErrorDetail(error=err.code, message=str(err)).model_dump(),
    )


@router.get("/", response_model=dict[int, Item])
async def list_items(service: AuctionService = Depends(get_service)):
    return service.get_all_items()


@router.get("/count", response_model=ItemCountResponse)
async def count_items(service: AuctionService = Depends(get_service)):
    return ItemCountResponse(count=service.get_item_count())


@router.get("/stats/sold-for-the-most", response_model=Optional[Item])
async def sold_for_the_most(service: AuctionService = Depends(get_service)):
    try:
        return service.get_item_sold_for_the_most()
    except AuctionError as err:
        raise to_http_error(err) from err


@router.get("/stats/bid-on-the-most", response_model=Optional[Item])
async def bid_on_the_most(service: AuctionService = Depends(get_service)):
    return service.get_item_bid_on_the_most()


@router.get("/{item_id}", response_model=Item)
async def get_item(item_id: ItemId, service: AuctionService = Depends(get_service)):
    item = service.get_item(item_id)
    if not item:
        raise HTTPException(status_code=404, detail="Item not found")
    return item


@router.put("/{item_id}", response_model=CreateItemResponse)
async def create_item(
    payload: ItemCreate,
    item_id: ItemId,
    caller: str = Depends(get_caller),
    service: AuctionService = Depends(get_service),
):
    try:
        previous = service.create_item(caller, item_id, payload.description, payload.is_active)
    except AuctionError as err:
        raise to_http_error(err) from err
    return CreateItemResponse(previous=previous)


@router.post("/{item_id}/bids", response_model=Item)
async def bid_item(
    payload: BidRequest,
    item_id: ItemId,
    caller: str = Depends(get_caller),
    service: AuctionService = Depends(get_service),
):
    try:
        return service.bid_item(caller, item_id, payload.amount)
    except AuctionError as err:
        raise to_http_error(err) from err


@router.patch("/{item_id}", response_model=Item)
async def edit_item(
    payload: ItemEdit,
    item_id: ItemId,
    caller: str = Depends(get_caller),
    service: AuctionService = Depends(get_service),
):
    try:
        return service.edit_item(caller, item_id, payload.description)
    except AuctionError as err:
        raise to_http_error(err) from err


@router.post("/{item_id}/stop", response_model=Item)
async def stop_item(
    item_id: ItemId,
    caller: str = Depends(get_caller),
    service: AuctionService = Depends(get_service),
):
    try:
        return service.stop_item(caller, item_id)
    except AuctionError as err:
        raise to_http_error(err) from err
