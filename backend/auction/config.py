import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def parse_bool(raw: Optional[str], default: bool = False) -> bool:
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off"}:
        return False
    return default


APP_DIR = Path(__file__).resolve().parent

DATA_DIR = Path(os.environ.get("AUCTION_DATA_DIR", str(APP_DIR / "data")))
ITEMS_PATH = Path(os.environ.get("AUCTION_ITEMS_PATH", str(DATA_DIR / "items.json")))

# Upper bound for one encoded item record, bids included.
MAX_ITEM_BYTES = int(os.environ.get("AUCTION_MAX_ITEM_BYTES", "5000"))

REJECT_DUPLICATE_IDS = parse_bool(os.environ.get("AUCTION_REJECT_DUPLICATE_IDS"))

CALLER_HEADER = os.environ.get("AUCTION_CALLER_HEADER", "X-Caller-Id")

LOG_LEVEL = os.environ.get("AUCTION_LOG_LEVEL", "INFO")

MAX_U64 = 2**64 - 1
