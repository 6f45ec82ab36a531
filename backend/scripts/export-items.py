#!/usr/bin/env python3
import argparse
import os
import pathlib
import sys
import time
from dataclasses import dataclass

from dotenv import load_dotenv

BACKEND_DIR = pathlib.Path(__file__).resolve().parent.parent
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from auction.services.export import EXPORT_FORMATS, export_items, write_export  # noqa: E402
from auction.storage import ItemStore  # noqa: E402


@dataclass
class CliOptions:
    items_path: pathlib.Path
    output_path: pathlib.Path
    fmt: str
    closed_only: bool


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Export auction items from the item snapshot")
    parser.add_argument("--items-path", type=str, default=None, help="Item snapshot (default: AUCTION_ITEMS_PATH)")
    parser.add_argument(
        "--output",
        type=str,
        default="./exports/items.json",
        help="Destination file",
    )
    parser.add_argument("--format", type=str, default="json", help="json or ndjson")
    parser.add_argument("--closed-only", action="store_true", help="Only export closed items")
    return parser.parse_args()


def parse_options(args: argparse.Namespace) -> CliOptions:
    if args.format not in EXPORT_FORMATS:
        raise ValueError(f"Unsupported --format value: {args.format}")

    items_path = args.items_path or os.getenv("AUCTION_ITEMS_PATH")
    if not items_path:
        raise ValueError("Item snapshot path is not set. Use --items-path or AUCTION_ITEMS_PATH.")

    return CliOptions(
        items_path=pathlib.Path(items_path).resolve(),
        output_path=pathlib.Path(args.output).resolve(),
        fmt=args.format,
        closed_only=bool(args.closed_only),
    )


def main() -> int:
    load_dotenv()
    try:
        options = parse_options(parse_args())
    except ValueError as error:
        print(f"[export-items] {error}", file=sys.stderr)
        return 2

    print(
        f"[export-items] source={options.items_path} output={options.output_path} "
        f"format={options.fmt} closed_only={options.closed_only}"
    )

    if not options.items_path.exists():
        print(f"[export-items] snapshot not found: {options.items_path}", file=sys.stderr)
        return 1

    try:
        start = time.time()
        store = ItemStore(options.items_path)
        written = write_export(export_items(store, closed_only=options.closed_only), options.output_path, options.fmt)
        duration_ms = int((time.time() - start) * 1000)
        print(f"[export-items] done: scanned={store.count()} exported={written} duration_ms={duration_ms}")
        return 0
    except Exception as error:
        print(f"[export-items] failed: {error}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
