"""Helpers for archived product page snapshots (Wayback Machine CDX rows).

Querying the CDX API is the orchestrator's job; these functions turn its
rows into snapshot records and pick which snapshots to parse.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Iterable, List

logger = logging.getLogger(__name__)

WAYBACK_BASE = "https://web.archive.org/web"

CDX_FIELDS = ("urlkey", "timestamp", "original", "mimetype", "statuscode", "digest", "length")

# Paths under /products/ that are not product pages
NON_PRODUCT_SEGMENTS = ("page", "collections", "tags", ".js", ".css", ".json")

_HANDLE_PATTERN = re.compile(r"/products/([^/?#]+)")


@dataclass(frozen=True)
class WaybackSnapshot:
    """An archived capture of a product page."""

    url: str
    handle: str
    timestamp: str  # 14 digits: YYYYMMDDHHmmss
    digest: str
    status_code: int
    mime_type: str
    length: int

    @property
    def key(self) -> str:
        """Identity used to skip snapshots that were already processed."""
        return f"{self.digest}:{self.timestamp}"


def extract_product_handle(url: str) -> str:
    """Return the handle from a ``/products/{handle}`` URL, or ""."""
    match = _HANDLE_PATTERN.search(url)
    return match.group(1) if match else ""


def _to_int(value: str, default: int = 0) -> int:
    digits = re.match(r"\s*[-+]?\d+", value)
    return int(digits.group(0)) if digits else default


def parse_cdx_row(row: List[str]) -> WaybackSnapshot:
    """Convert one CDX JSON row into a snapshot record."""
    _, timestamp, original, mimetype, statuscode, digest, length = row
    return WaybackSnapshot(
        url=original,
        handle=extract_product_handle(original),
        timestamp=timestamp,
        digest=digest,
        status_code=_to_int(statuscode),
        mime_type=mimetype,
        length=_to_int(length),
    )


def _is_cdx_row(row: Any) -> bool:
    return (
        isinstance(row, list)
        and len(row) == len(CDX_FIELDS)
        and all(isinstance(value, str) for value in row)
    )


def is_product_page(snapshot: WaybackSnapshot) -> bool:
    """Whether a snapshot is of an actual product page."""
    if not snapshot.handle:
        return False
    return not any(
        segment in snapshot.handle or f"/products/{segment}" in snapshot.url
        for segment in NON_PRODUCT_SEGMENTS
    )


def parse_cdx_rows(rows: Any) -> List[WaybackSnapshot]:
    """
    Parse a CDX ``output=json`` response body.

    The first row is the field header. Malformed rows and non-product pages
    are dropped.
    """
    if not isinstance(rows, list) or len(rows) <= 1:
        return []

    snapshots = []
    for row in rows[1:]:
        if not _is_cdx_row(row):
            logger.debug(f"Skipping malformed CDX row: {row!r}")
            continue
        snapshot = parse_cdx_row(row)
        if is_product_page(snapshot):
            snapshots.append(snapshot)
    return snapshots


def wayback_url(timestamp: str, original_url: str) -> str:
    """Raw-content (``id_``) archive URL, without the Wayback toolbar."""
    return f"{WAYBACK_BASE}/{timestamp}id_/{original_url}"


def deduplicate_by_digest_day(snapshots: Iterable[WaybackSnapshot]) -> List[WaybackSnapshot]:
    """Keep the first snapshot per (content digest, capture day)."""
    seen = set()
    unique = []
    for snapshot in snapshots:
        key = (snapshot.digest, snapshot.timestamp[:8])
        if key in seen:
            continue
        seen.add(key)
        unique.append(snapshot)
    return unique


def wayback_timestamp_to_iso(timestamp: str) -> str:
    """Convert ``YYYYMMDDHHmmss`` to an ISO 8601 UTC string."""
    ts = timestamp
    return f"{ts[0:4]}-{ts[4:6]}-{ts[6:8]}T{ts[8:10]}:{ts[10:12]}:{ts[12:14]}Z"


def filter_new_snapshots(
    snapshots: Iterable[WaybackSnapshot],
    known_keys: set[str],
) -> List[WaybackSnapshot]:
    """Drop snapshots whose ``digest:timestamp`` key is already known."""
    return [snapshot for snapshot in snapshots if snapshot.key not in known_keys]
