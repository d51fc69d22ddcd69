"""Extract canonical product data from a storefront product page."""

import logging
from typing import List, Optional

from storewatch.ingest.base import ExtractionResult, ScriptTag
from storewatch.ingest.script_extract import extract_script_tags
from storewatch.ingest.strategies import get_strategy_chain

logger = logging.getLogger(__name__)


def has_minimal_data(result: ExtractionResult) -> bool:
    """
    Whether a result is worth returning over later strategies.

    Some conventions (``var meta`` in particular) match pages whose product
    payload is empty; those should not shadow a richer later match.
    """
    product = result.product
    return product.title is not None or bool(product.images) or bool(product.videos)


def run_strategies(scripts: List[ScriptTag]) -> Optional[ExtractionResult]:
    """
    Run the strategy chain over already-scanned scripts.

    Returns the first result with minimal data, else the first result of
    any kind, else None.
    """
    fallback: Optional[ExtractionResult] = None

    for name, strategy in get_strategy_chain():
        try:
            result = strategy(scripts)
        except Exception as e:
            logger.debug(f"Strategy {name.value} failed: {e}")
            continue

        if result is None:
            continue

        if has_minimal_data(result):
            logger.debug(f"Strategy {name.value} produced product data")
            return result

        if fallback is None:
            fallback = result

    if fallback is not None:
        logger.debug(f"Falling back to partial result from {fallback.strategy.value}")
    return fallback


def parse_product_page(html: str) -> Optional[ExtractionResult]:
    """
    Parse a product page and extract its product data.

    Works on live storefront pages and archived snapshots alike. Never
    raises: pages without recognisable product data return None.

    Args:
        html: Page HTML

    Returns:
        ExtractionResult or None
    """
    return run_strategies(extract_script_tags(html))
