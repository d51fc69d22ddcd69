"""Strategy: schema.org Product in JSON-LD script elements."""

from typing import List, Optional

from storewatch.ingest.base import ExtractionResult, ExtractionStrategy, ScriptTag
from storewatch.ingest.json_extractor import safe_json_loads
from storewatch.normalize.processor import find_json_ld_products, normalize_json_ld_product

JSON_LD_TYPE = "application/ld+json"


def try_json_ld(scripts: List[ScriptTag]) -> Optional[ExtractionResult]:
    """Normalize the first Product / ProductGroup found in ld+json scripts."""
    for script in scripts:
        if script.type != JSON_LD_TYPE:
            continue

        content = script.content.strip()
        if not content:
            continue

        parsed = safe_json_loads(content)
        if not parsed:
            continue

        # A document may hold a single object or an array of them
        items = parsed if isinstance(parsed, list) else [parsed]

        for item in items:
            products = find_json_ld_products(item)
            if products:
                return ExtractionResult(
                    strategy=ExtractionStrategy.JSON_LD,
                    product=normalize_json_ld_product(products[0]),
                )

    return None
