"""Normalize raw product objects and prices into canonical product data."""

import logging
import math
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    ValidationError,
    field_validator,
)

from storewatch.config import settings
from storewatch.ingest.base import ProductData, VariantData
from storewatch.normalize.video import extract_videos

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
ZERO_PRICE = "0.00"

# Everything except digits, separators and sign
_NON_PRICE_CHARS = re.compile(r"[^0-9.,-]")

# A variant needs at least one of these to be worth keeping
VARIANT_SHAPE_KEYS = ("id", "title", "price", "available")

JSON_LD_PRODUCT_TYPES = {"Product", "ProductGroup"}
SCHEMA_ORG_PREFIXES = ("http://schema.org/", "https://schema.org/")


class RawVariant(BaseModel):
    """Storefront variant as embedded in page JSON."""

    model_config = ConfigDict(extra="allow")

    id: Optional[StrictInt] = None
    title: StrictStr = "Default"
    price: Any = None
    compare_at_price: Any = None
    compare_at_price_camel: Any = Field(default=None, alias="compareAtPrice")
    available: StrictBool = True
    sku: Optional[StrictStr] = None


class RawProduct(BaseModel):
    """Storefront product as embedded in page JSON; field names vary by theme."""

    model_config = ConfigDict(extra="allow")

    title: Optional[StrictStr] = None
    vendor: Optional[StrictStr] = None
    product_type: Optional[StrictStr] = None
    product_type_camel: Optional[StrictStr] = Field(default=None, alias="productType")
    type: Optional[StrictStr] = None
    variants: List[Any] = Field(default_factory=list)
    images: List[Any] = Field(default_factory=list)
    media: List[Any] = Field(default_factory=list)

    @field_validator("variants", "images", "media", mode="before")
    @classmethod
    def coerce_list(cls, value: Any) -> List[Any]:
        """Treat null or non-array collections as empty."""
        return value if isinstance(value, list) else []

    def resolved_product_type(self) -> Optional[str]:
        for candidate in (self.product_type, self.product_type_camel, self.type):
            if candidate is not None:
                return candidate
        return None


def normalize_price(value: Any) -> str:
    """
    Normalize a price of unknown shape to canonical text.

    Strings keep only digits, ``.``, ``,`` and ``-``. Integral numbers at or
    above ``settings.cents_threshold`` are read as cents; other numbers are
    formatted to two decimals. Anything else becomes "0.00".

    Examples:
        "$1,299.00" -> "1,299.00"
        2999 -> "29.99"
        29.5 -> "29.50"
        None -> "0.00"
    """
    if isinstance(value, str):
        cleaned = _NON_PRICE_CHARS.sub("", value).strip()
        return cleaned or ZERO_PRICE

    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        return ZERO_PRICE

    try:
        if isinstance(value, float) and not math.isfinite(value):
            return ZERO_PRICE
        amount = Decimal(value)
        if not amount.is_finite():
            return ZERO_PRICE
        if amount == amount.to_integral_value() and amount >= settings.cents_threshold:
            amount = amount / 100
        return str(amount.quantize(CENT, rounding=ROUND_HALF_UP))
    except InvalidOperation:
        return ZERO_PRICE


def _normalize_variant(raw: Any) -> Optional[VariantData]:
    """Decode one variant, or None if it does not look like a variant."""
    if not isinstance(raw, dict) or not any(key in raw for key in VARIANT_SHAPE_KEYS):
        return None

    try:
        variant = RawVariant.model_validate(raw)
    except ValidationError as e:
        logger.debug(f"Dropping malformed variant: {e.error_count()} validation errors")
        return None

    if variant.compare_at_price is not None:
        compare_at_price = normalize_price(variant.compare_at_price)
    elif variant.compare_at_price_camel is not None:
        compare_at_price = normalize_price(variant.compare_at_price_camel)
    else:
        compare_at_price = None

    return VariantData(
        id=variant.id,
        title=variant.title,
        price=normalize_price(variant.price),
        compare_at_price=compare_at_price,
        available=variant.available,
        sku=variant.sku,
    )


def _image_url(image: Any) -> Optional[str]:
    if isinstance(image, str):
        return image
    if isinstance(image, dict):
        for key in ("src", "url"):
            if isinstance(image.get(key), str):
                return image[key]
    return None


def normalize_product(raw: Any) -> ProductData:
    """
    Normalize a storefront product object into ProductData.

    The object may come from any of the embedded-JSON strategies, so field
    names vary. A product that fails validation as a whole yields empty
    product data; individual malformed variants or images are skipped.

    Args:
        raw: Decoded JSON object

    Returns:
        ProductData
    """
    try:
        product = RawProduct.model_validate(raw)
    except ValidationError as e:
        logger.debug(f"Raw product failed validation: {e.error_count()} errors")
        return ProductData.build()

    variants = [
        variant
        for variant in (_normalize_variant(v) for v in product.variants)
        if variant is not None
    ]
    images = [
        url for url in (_image_url(img) for img in product.images) if url is not None
    ]

    return ProductData.build(
        title=product.title,
        vendor=product.vendor,
        product_type=product.resolved_product_type(),
        variants=variants,
        images=images,
        videos=extract_videos(product.media),
    )


def _is_json_ld_product(item: Any) -> bool:
    if not isinstance(item, dict):
        return False
    item_type = item.get("@type")
    return isinstance(item_type, str) and item_type in JSON_LD_PRODUCT_TYPES


def find_json_ld_products(data: Any) -> List[dict]:
    """
    Find schema.org Product / ProductGroup objects in a JSON-LD document.

    A matching top-level object is returned on its own; otherwise matching
    members of its ``@graph`` array are returned in order.
    """
    if not isinstance(data, dict):
        return []
    if _is_json_ld_product(data):
        return [data]

    graph = data.get("@graph")
    if isinstance(graph, list):
        return [item for item in graph if _is_json_ld_product(item)]
    return []


def _is_in_stock(availability: Any) -> bool:
    if not isinstance(availability, str):
        return False
    if availability == "InStock":
        return True
    return availability.startswith(SCHEMA_ORG_PREFIXES) and availability.endswith("/InStock")


def _json_ld_images(image: Any) -> List[str]:
    if isinstance(image, str):
        return [image]
    if isinstance(image, dict):
        image = [image]
    if not isinstance(image, list):
        return []

    urls = []
    for item in image:
        if isinstance(item, str):
            urls.append(item)
        elif isinstance(item, dict) and isinstance(item.get("url"), str):
            urls.append(item["url"])
    return urls


def _json_ld_variant(offer: dict) -> VariantData:
    price = offer.get("price")
    if price is None:
        price = offer.get("lowPrice", ZERO_PRICE)

    # JSON-LD offers carry no stable variant identity
    return VariantData(
        id=None,
        title=offer["name"] if isinstance(offer.get("name"), str) else "Default",
        price=normalize_price(price),
        compare_at_price=None,
        available=_is_in_stock(offer.get("availability")),
        sku=offer["sku"] if isinstance(offer.get("sku"), str) else None,
    )


def normalize_json_ld_product(ld: dict) -> ProductData:
    """
    Normalize a schema.org Product object into ProductData.

    Each offer becomes a variant with ``id=None``. JSON-LD has no media
    array, so videos are always empty.
    """
    title = ld.get("name") if isinstance(ld.get("name"), str) else None

    brand = ld.get("brand")
    if isinstance(brand, str):
        vendor = brand
    elif isinstance(brand, dict) and isinstance(brand.get("name"), str):
        vendor = brand["name"]
    else:
        vendor = None

    category = ld.get("category")
    product_type = category if isinstance(category, str) else None

    offers = ld.get("offers")
    if isinstance(offers, dict):
        offers = [offers]
    elif not isinstance(offers, list):
        offers = []

    variants = [_json_ld_variant(offer) for offer in offers if isinstance(offer, dict)]

    return ProductData.build(
        title=title,
        vendor=vendor,
        product_type=product_type,
        variants=variants,
        images=_json_ld_images(ld.get("image")),
        videos=[],
    )
