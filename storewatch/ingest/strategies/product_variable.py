"""Strategy: product object literals assigned in theme scripts."""

import re
from typing import List, Optional

from storewatch.ingest.base import ExtractionResult, ExtractionStrategy, ScriptTag
from storewatch.ingest.json_extractor import extract_balanced_object, safe_json_loads
from storewatch.ingest.strategies.base import has_any_field
from storewatch.normalize.processor import normalize_product

# Checked in order; each pattern ends on the opening brace
PRODUCT_PATTERNS = [
    re.compile(r"var\s+product\s*=\s*\{"),
    re.compile(r"let\s+product\s*=\s*\{"),
    re.compile(r"const\s+product\s*=\s*\{"),
    re.compile(r"\w+\.product\s*=\s*\{"),
    re.compile(r"product\s*:\s*\{"),
]


def try_product_variable(scripts: List[ScriptTag]) -> Optional[ExtractionResult]:
    """Decode the first product-looking object assigned to a ``product`` name."""
    for script in scripts:
        content = script.content

        for pattern in PRODUCT_PATTERNS:
            match = pattern.search(content)
            if not match:
                continue

            object_text = extract_balanced_object(content, match.end() - 1)
            if not object_text:
                continue

            parsed = safe_json_loads(object_text)
            if has_any_field(parsed, "title", "variants", "handle"):
                return ExtractionResult(
                    strategy=ExtractionStrategy.PRODUCT_VARIABLE,
                    product=normalize_product(parsed),
                )

    return None
