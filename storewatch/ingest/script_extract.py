"""Pull inline script elements out of an HTML document."""

import logging
from typing import List

from selectolax.parser import HTMLParser

from storewatch.ingest.base import ScriptTag

logger = logging.getLogger(__name__)

# Attributes the extraction strategies key off
CAPTURED_ATTRIBUTES = ("data-product-json", "id")


def extract_script_tags(html: str) -> List[ScriptTag]:
    """
    Extract every <script> element in document order.

    Captures the ``type`` attribute verbatim (None when absent), the
    ``data-product-json`` and ``id`` attributes when present, and the raw
    script body. An attribute present without a value is recorded as "".

    Args:
        html: HTML document text

    Returns:
        List of ScriptTag, empty if the document cannot be parsed
    """
    if not html or not html.strip():
        return []

    scripts = []
    try:
        tree = HTMLParser(html)
        for node in tree.css("script"):
            node_attrs = node.attributes
            attributes = {
                name: node_attrs[name] or ""
                for name in CAPTURED_ATTRIBUTES
                if name in node_attrs
            }
            scripts.append(ScriptTag(
                type=node_attrs.get("type"),
                attributes=attributes,
                content=node.text(deep=True) or "",
            ))
    except Exception as e:
        logger.debug(f"Failed to scan script tags: {e}")
        return []

    return scripts
