"""Storefront catalog payload schema (``/products.json``).

The orchestrator fetches the catalog; this module only validates what it
hands over, producing the product representation the sync diff consumes.
"""

import logging
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, ValidationError

logger = logging.getLogger(__name__)


class CatalogValidationError(Exception):
    """Raised when a catalog payload does not match the expected schema."""

    pass


class ShopifyImage(BaseModel):
    model_config = ConfigDict(frozen=True)

    src: str


class ShopifyVariant(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    title: str
    sku: Optional[str]
    price: str
    compare_at_price: Optional[str]
    available: bool
    position: int


class ShopifyProduct(BaseModel):
    """A product as listed by the live catalog."""

    model_config = ConfigDict(frozen=True)

    id: int
    title: str
    handle: str
    vendor: Optional[str]
    product_type: Optional[str]
    created_at: Optional[str]
    published_at: Optional[str]
    updated_at: Optional[str]
    images: List[ShopifyImage]
    variants: List[ShopifyVariant]


class ShopifyProductsResponse(BaseModel):
    products: List[ShopifyProduct]


def parse_products_response(payload: Any) -> List[ShopifyProduct]:
    """
    Validate one ``/products.json`` payload.

    Args:
        payload: Decoded JSON body, ``{"products": [...]}``

    Returns:
        Validated products in payload order

    Raises:
        CatalogValidationError: If the payload does not match the schema
    """
    try:
        response = ShopifyProductsResponse.model_validate(payload)
    except ValidationError as e:
        raise CatalogValidationError(
            f"Invalid catalog payload ({e.error_count()} errors): {e}"
        ) from e
    return response.products


def parse_products(items: Any) -> List[ShopifyProduct]:
    """Validate a bare list of catalog products (pages already merged)."""
    if not isinstance(items, list):
        raise CatalogValidationError(
            f"Expected a list of products, got {type(items).__name__}"
        )
    return parse_products_response({"products": items})


def merge_catalog_pages(pages: List[Any]) -> List[ShopifyProduct]:
    """
    Validate and concatenate paginated catalog payloads.

    Stops at the first empty page, matching how the storefront signals the
    end of legacy page-based pagination.
    """
    products: List[ShopifyProduct] = []
    for page_number, payload in enumerate(pages, start=1):
        page_products = parse_products_response(payload)
        if not page_products:
            logger.debug(f"Catalog page {page_number} empty, stopping")
            break
        products.extend(page_products)
    return products
