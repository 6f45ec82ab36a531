import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from auction.config import ITEMS_PATH, LOG_LEVEL, MAX_ITEM_BYTES, REJECT_DUPLICATE_IDS
from auction.routes.auth import router as auth_router
from auction.routes.items import router as items_router
from auction.services.auction import AuctionService
from auction.storage import ItemStore, StorageError

APP_VERSION = "0.1.0"

logger = logging.getLogger(__name__)


def configure_logging(level: str = LOG_LEVEL) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=507,
        content={"detail": {"error": "StorageError", "message": str(exc)}},
    )


def create_app(store: Optional[ItemStore] = None) -> FastAPI:
    if store is None:
        store = ItemStore(ITEMS_PATH, max_item_bytes=MAX_ITEM_BYTES)

    app = FastAPI(title="Auction API", version=APP_VERSION)
    app.state.auction_service = AuctionService(store, reject_duplicate_ids=REJECT_DUPLICATE_IDS)
    app.include_router(auth_router)
    app.include_router(items_router)
    app.add_exception_handler(StorageError, storage_error_handler)

    @app.get("/api/health")
    async def health():
        return {"status": "ok", "version": APP_VERSION, "items": store.count()}

    return app
