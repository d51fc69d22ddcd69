"""Tests for catalog payload validation."""

import pytest

from storewatch.ingest.shopify import (
    CatalogValidationError,
    ShopifyProduct,
    merge_catalog_pages,
    parse_products,
    parse_products_response,
)


def product_payload(product_id, **overrides):
    payload = {
        "id": product_id,
        "title": f"Product {product_id}",
        "handle": f"product-{product_id}",
        "vendor": "Acme",
        "product_type": "Shirts",
        "created_at": "2024-01-01T00:00:00Z",
        "published_at": None,
        "updated_at": "2024-02-01T00:00:00Z",
        "images": [{"src": "https://cdn.example.com/a.jpg", "width": 800}],
        "variants": [{
            "id": product_id * 10,
            "title": "Default Title",
            "sku": None,
            "price": "19.99",
            "compare_at_price": None,
            "available": True,
            "position": 1,
            "grams": 200,
        }],
        "tags": ["summer"],
    }
    payload.update(overrides)
    return payload


class TestParseProductsResponse:
    """Test single-page catalog validation."""

    def test_valid_payload(self):
        products = parse_products_response({"products": [product_payload(1), product_payload(2)]})

        assert [p.id for p in products] == [1, 2]
        assert isinstance(products[0], ShopifyProduct)
        assert products[0].images[0].src == "https://cdn.example.com/a.jpg"
        assert products[0].variants[0].price == "19.99"
        assert products[0].published_at is None

    def test_empty_catalog(self):
        assert parse_products_response({"products": []}) == []

    def test_missing_required_field(self):
        payload = product_payload(1)
        del payload["handle"]

        with pytest.raises(CatalogValidationError):
            parse_products_response({"products": [payload]})

    def test_invalid_variant(self):
        payload = product_payload(1)
        del payload["variants"][0]["price"]

        with pytest.raises(CatalogValidationError):
            parse_products_response({"products": [payload]})

    @pytest.mark.parametrize("payload", [None, [], {"items": []}, "products"])
    def test_wrong_shape(self, payload):
        with pytest.raises(CatalogValidationError):
            parse_products_response(payload)

    def test_products_are_immutable(self):
        product = parse_products_response({"products": [product_payload(1)]})[0]

        with pytest.raises(Exception):
            product.title = "Changed"


class TestParseProducts:
    """Test validation of an already-merged product list."""

    def test_list(self):
        assert [p.id for p in parse_products([product_payload(3)])] == [3]

    def test_not_a_list(self):
        with pytest.raises(CatalogValidationError):
            parse_products({"products": []})


class TestMergeCatalogPages:
    """Test paginated catalog merging."""

    def test_concatenates_pages(self):
        pages = [
            {"products": [product_payload(1), product_payload(2)]},
            {"products": [product_payload(3)]},
        ]

        assert [p.id for p in merge_catalog_pages(pages)] == [1, 2, 3]

    def test_stops_at_empty_page(self):
        pages = [
            {"products": [product_payload(1)]},
            {"products": []},
            {"products": [product_payload(9)]},
        ]

        assert [p.id for p in merge_catalog_pages(pages)] == [1]

    def test_invalid_page_raises(self):
        with pytest.raises(CatalogValidationError):
            merge_catalog_pages([{"products": [product_payload(1)]}, {"oops": True}])
