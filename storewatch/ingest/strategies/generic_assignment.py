"""Strategy: ShopifyAnalytics meta assignments.

Tried in order on scripts mentioning ``ShopifyAnalytics``:

1. ``ShopifyAnalytics.meta.product = {...}``
2. ``ShopifyAnalytics.meta = {..., "product": {...}}``
3. A regex sweep over individually labelled fields (gid, title, vendor,
   type, price), assembled into a single-variant product.

The analytics payload carries no usable variant identity for the regex
sweep, so its variant keeps ``id=None``.
"""

import logging
import re
from typing import List, Optional

from storewatch.ingest.base import (
    ExtractionResult,
    ExtractionStrategy,
    ProductData,
    ScriptTag,
    VariantData,
)
from storewatch.ingest.json_extractor import extract_balanced_object, safe_json_loads
from storewatch.ingest.strategies.base import has_any_field
from storewatch.normalize.processor import normalize_price, normalize_product

logger = logging.getLogger(__name__)

ANALYTICS_MARKER = "ShopifyAnalytics"

DIRECT_PRODUCT_PATTERN = re.compile(r"ShopifyAnalytics\.meta\.product\s*=\s*\{")
META_PATTERN = re.compile(r"ShopifyAnalytics\.meta\s*=\s*\{")

GID_PATTERN = re.compile(r"""gid\s*:\s*["']gid://shopify/Product/(\d+)["']""")
VENDOR_PATTERN = re.compile(r"""vendor\s*:\s*["']([^"']+)["']""")
TYPE_PATTERN = re.compile(r"""type\s*:\s*["']([^"']+)["']""")
TITLE_PATTERN = re.compile(r"""(?:product_)?title\s*:\s*["']([^"']+)["']""")
PRICE_PATTERN = re.compile(r"""price\s*[:=]\s*["']?(\d+(?:\.\d+)?)["']?""")


def _decode_assignment(content: str, pattern: re.Pattern) -> Optional[dict]:
    match = pattern.search(content)
    if not match:
        return None
    object_text = extract_balanced_object(content, match.end() - 1)
    if not object_text:
        return None
    parsed = safe_json_loads(object_text)
    return parsed if isinstance(parsed, dict) else None


def _sweep_labelled_fields(content: str) -> Optional[ProductData]:
    gid_match = GID_PATTERN.search(content)
    title_match = TITLE_PATTERN.search(content)
    if not gid_match and not title_match:
        return None

    vendor_match = VENDOR_PATTERN.search(content)
    type_match = TYPE_PATTERN.search(content)
    price_match = PRICE_PATTERN.search(content)

    variants = []
    if price_match:
        variants.append(VariantData(
            id=None,
            title="Default",
            price=normalize_price(price_match.group(1)),
            compare_at_price=None,
            available=True,
            sku=None,
        ))

    return ProductData.build(
        title=title_match.group(1) if title_match else None,
        vendor=vendor_match.group(1) if vendor_match else None,
        product_type=type_match.group(1) if type_match else None,
        variants=variants,
    )


def try_generic_assignment(scripts: List[ScriptTag]) -> Optional[ExtractionResult]:
    """Recover product data from ShopifyAnalytics assignments."""
    for script in scripts:
        content = script.content
        if ANALYTICS_MARKER not in content:
            continue

        product = _decode_assignment(content, DIRECT_PRODUCT_PATTERN)
        if has_any_field(product, "id", "gid", "title"):
            return ExtractionResult(
                strategy=ExtractionStrategy.GENERIC_ASSIGNMENT,
                product=normalize_product(product),
            )

        meta = _decode_assignment(content, META_PATTERN)
        if meta is not None and has_any_field(meta, "product"):
            return ExtractionResult(
                strategy=ExtractionStrategy.GENERIC_ASSIGNMENT,
                product=normalize_product(meta["product"]),
            )

        swept = _sweep_labelled_fields(content)
        if swept is not None:
            logger.debug("ShopifyAnalytics fields recovered by regex sweep")
            return ExtractionResult(
                strategy=ExtractionStrategy.GENERIC_ASSIGNMENT,
                product=swept,
            )

    return None
