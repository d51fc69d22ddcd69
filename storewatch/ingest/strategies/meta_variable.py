"""Strategy: ``var meta = {"product": {...}}`` assignments."""

from typing import List, Optional

from storewatch.ingest.base import ExtractionResult, ExtractionStrategy, ScriptTag
from storewatch.ingest.json_extractor import find_object_after, safe_json_loads
from storewatch.ingest.strategies.base import has_any_field
from storewatch.normalize.processor import normalize_product

META_MARKER = "var meta"


def try_meta_variable(scripts: List[ScriptTag]) -> Optional[ExtractionResult]:
    """Decode the object assigned to ``var meta`` when it carries a product."""
    for script in scripts:
        content = script.content
        marker = content.find(META_MARKER)
        if marker == -1:
            continue

        object_text = find_object_after(content, marker)
        if not object_text:
            continue

        meta = safe_json_loads(object_text)
        if not isinstance(meta, dict):
            continue

        product = meta.get("product")
        if has_any_field(product, "title", "variants"):
            return ExtractionResult(
                strategy=ExtractionStrategy.META_VARIABLE,
                product=normalize_product(product),
            )

    return None
