from fastapi import APIRouter, Depends, HTTPException, Request

from auction.config import CALLER_HEADER
from auction.schemas import CallerResponse

router = APIRouter(prefix="/api", tags=["auth"])

MAX_CALLER_LENGTH = 128


def get_caller(request: Request) -> str:
    """
    Resolve the calling identity from the gateway-supplied header.

    Request bodies never carry identity; the header is the only source.
    """

    raw = request.headers.get(CALLER_HEADER, "").strip()
    if not raw:
        raise HTTPException(status_code=401, detail=f"{CALLER_HEADER} header is required")
    if len(raw) > MAX_CALLER_LENGTH:
        raise HTTPException(status_code=400, detail=f"{CALLER_HEADER} header is too long")
    return raw


@router.get("/whoami", response_model=CallerResponse)
async def whoami(caller: str = Depends(get_caller)):
    return CallerResponse(caller=caller)
