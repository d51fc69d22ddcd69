"""Shared fixtures for storewatch tests."""

import json

import pytest

from storewatch.ingest.shopify import ShopifyProduct


def script(body, **attrs) -> str:
    """Render a <script> element; attrs with value True render bare."""
    rendered = []
    for name, value in attrs.items():
        name = name.replace("_", "-")
        if value is True:
            rendered.append(name)
        else:
            rendered.append(f'{name}="{value}"')
    attr_text = (" " + " ".join(rendered)) if rendered else ""
    if not isinstance(body, str):
        body = json.dumps(body)
    return f"<script{attr_text}>{body}</script>"


def page(*scripts: str) -> str:
    """Wrap script elements in a minimal product page."""
    return (
        "<!DOCTYPE html><html><head><title>Shop</title>"
        + "".join(scripts)
        + "</head><body><h1>Product</h1></body></html>"
    )


@pytest.fixture
def make_script():
    return script


@pytest.fixture
def make_page():
    return page


def _variant(variant_id, price="10.00", available=True, compare_at_price=None, title="Default"):
    return {
        "id": variant_id,
        "title": title,
        "sku": f"SKU-{variant_id}",
        "price": price,
        "compare_at_price": compare_at_price,
        "available": available,
        "position": 1,
    }


def _product(product_id, title=None, variants=None, images=None):
    return ShopifyProduct.model_validate({
        "id": product_id,
        "title": title or f"Product {product_id}",
        "handle": f"product-{product_id}",
        "vendor": "Acme",
        "product_type": "Shirts",
        "created_at": "2024-01-01T00:00:00Z",
        "published_at": "2024-01-01T00:00:00Z",
        "updated_at": "2024-02-01T00:00:00Z",
        "images": [{"src": url} for url in (images or [])],
        "variants": variants or [],
    })


@pytest.fixture
def make_variant():
    return _variant


@pytest.fixture
def make_product():
    return _product
