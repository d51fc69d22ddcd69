"""Strategy: product JSON in a dedicated script element.

Matches themes that render
``<script type="application/json" data-product-json>{...}</script>`` or an
element whose id contains ``product-json``.
"""

import logging
from typing import List, Optional

from storewatch.ingest.base import ExtractionResult, ExtractionStrategy, ScriptTag
from storewatch.ingest.json_extractor import safe_json_loads
from storewatch.ingest.strategies.base import has_any_field
from storewatch.normalize.processor import normalize_product

logger = logging.getLogger(__name__)


def _is_product_json_script(script: ScriptTag) -> bool:
    return (
        "data-product-json" in script.attributes
        or "product-json" in script.attributes.get("id", "")
        or script.type == "application/json"
    )


def try_data_product_json(scripts: List[ScriptTag]) -> Optional[ExtractionResult]:
    """Decode the first JSON script that looks like a product."""
    for script in scripts:
        if not _is_product_json_script(script):
            continue

        content = script.content.strip()
        if not content:
            continue

        parsed = safe_json_loads(content)
        if not isinstance(parsed, dict):
            continue

        # Either the product itself or wrapped as {"product": {...}}
        product = parsed.get("product")
        if product is None:
            product = parsed

        if has_any_field(product, "title", "variants", "handle"):
            logger.debug("Product JSON script matched")
            return ExtractionResult(
                strategy=ExtractionStrategy.DATA_PRODUCT_JSON,
                product=normalize_product(product),
            )

    return None
