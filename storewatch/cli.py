"""
Command line entry point for running extraction and diffs on local files.

Usage:
    storewatch parse-page page.html [--strategy json-ld]
    storewatch diff-catalog existing.json fetched.json
    storewatch diff-videos existing_videos.json scraped_videos.json
    storewatch snapshots cdx.json [--known processed_keys.json]
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

from storewatch.detect.engine import ExistingProductState, compute_sync_diff
from storewatch.detect.video_diff import ExistingVideo, compute_video_diff
from storewatch.ingest.base import ExtractionStrategy, VideoData
from storewatch.ingest.product_page import parse_product_page
from storewatch.ingest.script_extract import extract_script_tags
from storewatch.ingest.shopify import CatalogValidationError, parse_products, parse_products_response
from storewatch.ingest.strategies import get_strategy
from storewatch.ingest.wayback import (
    deduplicate_by_digest_day,
    filter_new_snapshots,
    parse_cdx_rows,
    wayback_timestamp_to_iso,
    wayback_url,
)
from storewatch.logging_config import get_logger, setup_logging

logger = logging.getLogger(__name__)

EXIT_NOT_FOUND = 1
EXIT_BAD_INPUT = 2


def _read_json(path: str) -> Any:
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def _print_json(data: Any) -> None:
    json.dump(data, sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write("\n")


def cmd_parse_page(args: argparse.Namespace) -> int:
    html = Path(args.file).read_text(encoding="utf-8", errors="replace")

    if args.strategy:
        result = get_strategy(args.strategy)(extract_script_tags(html))
    else:
        result = parse_product_page(html)

    if result is None:
        logger.warning(f"No product data found in {args.file}")
        _print_json(None)
        return EXIT_NOT_FOUND

    logger.info(f"Extracted product from {args.file} via {result.strategy.value}")
    _print_json(result.to_dict())
    return 0


def cmd_diff_catalog(args: argparse.Namespace) -> int:
    existing = [ExistingProductState.from_dict(item) for item in _read_json(args.existing)]

    payload = _read_json(args.fetched)
    if isinstance(payload, dict):
        fetched = parse_products_response(payload)
    else:
        fetched = parse_products(payload)

    diff = compute_sync_diff(existing, fetched)
    _print_json(diff.to_dict())
    return 0


def cmd_diff_videos(args: argparse.Namespace) -> int:
    existing = [ExistingVideo.from_dict(item) for item in _read_json(args.existing)]
    scraped = [VideoData.from_dict(item) for item in _read_json(args.scraped)]

    _print_json(compute_video_diff(existing, scraped).to_dict())
    return 0


def cmd_snapshots(args: argparse.Namespace) -> int:
    known_keys = set(_read_json(args.known)) if args.known else set()

    snapshots = filter_new_snapshots(
        deduplicate_by_digest_day(parse_cdx_rows(_read_json(args.cdx))),
        known_keys,
    )
    logger.info(f"{len(snapshots)} archived product snapshots to process")

    _print_json([
        {
            "url": snapshot.url,
            "handle": snapshot.handle,
            "timestamp": snapshot.timestamp,
            "captured_at": wayback_timestamp_to_iso(snapshot.timestamp),
            "digest": snapshot.digest,
            "key": snapshot.key,
            "archive_url": wayback_url(snapshot.timestamp, snapshot.url),
        }
        for snapshot in snapshots
    ])
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="storewatch",
        description="Extract product data from storefront pages and diff catalog state",
    )
    parser.add_argument("--log-level", default=None, help="Override STOREWATCH_LOG_LEVEL")
    parser.add_argument("--log-dir", default=None, help="Write JSON logs to this directory")
    subparsers = parser.add_subparsers(dest="command", required=True)

    parse_page = subparsers.add_parser("parse-page", help="Extract product data from an HTML file")
    parse_page.add_argument("file", help="HTML file (live page or archived snapshot)")
    parse_page.add_argument(
        "--strategy",
        choices=[s.value for s in ExtractionStrategy],
        help="Run a single strategy instead of the full chain",
    )
    parse_page.set_defaults(func=cmd_parse_page)

    diff_catalog = subparsers.add_parser("diff-catalog", help="Diff stored products against a fetched catalog")
    diff_catalog.add_argument("existing", help="JSON list of stored product state")
    diff_catalog.add_argument("fetched", help="Catalog JSON: {\"products\": [...]} or a list")
    diff_catalog.set_defaults(func=cmd_diff_catalog)

    diff_videos = subparsers.add_parser("diff-videos", help="Diff stored videos against scraped videos")
    diff_videos.add_argument("existing", help="JSON list of stored videos")
    diff_videos.add_argument("scraped", help="JSON list of scraped videos in page order")
    diff_videos.set_defaults(func=cmd_diff_videos)

    snapshots = subparsers.add_parser("snapshots", help="List archived product page snapshots to process")
    snapshots.add_argument("cdx", help="CDX output=json response body")
    snapshots.add_argument("--known", help="JSON list of already processed digest:timestamp keys")
    snapshots.set_defaults(func=cmd_snapshots)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(level=args.log_level, log_dir=args.log_dir)
    log = get_logger(__name__, command=args.command)

    try:
        return args.func(args)
    except CatalogValidationError as e:
        log.error(f"Catalog validation failed: {e}")
        return EXIT_BAD_INPUT
    except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
        log.error(f"Could not read input: {e}")
        return EXIT_BAD_INPUT


if __name__ == "__main__":
    sys.exit(main())
