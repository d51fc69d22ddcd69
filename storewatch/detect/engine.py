"""Catalog sync change detection engine.

Reconciles a freshly fetched storefront catalog against the stored state of
the same store and reports what changed. Pure computation: persisting the
diff is up to the caller.
"""

import logging
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Optional

from storewatch.detect.rules import ChangeMagnitude, ChangeType, calculate_magnitude, parse_price
from storewatch.ingest.shopify import ShopifyProduct, ShopifyVariant

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")

IN_STOCK = "in_stock"
OUT_OF_STOCK = "out_of_stock"


@dataclass(frozen=True)
class ExistingVariant:
    """Stored variant state."""

    id: int
    price: str
    compare_at_price: Optional[str]
    available: bool
    title: str


@dataclass(frozen=True)
class ExistingImage:
    """Stored product image."""

    id: int
    url: str
    is_removed: bool = False


@dataclass(frozen=True)
class ExistingProductState:
    """Stored product state, including products previously marked removed."""

    id: int
    title: str
    is_removed: bool = False
    variants: List[ExistingVariant] = field(default_factory=list)
    images: List[ExistingImage] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "ExistingProductState":
        """Create stored product state from dictionary."""
        return cls(
            id=data["id"],
            title=data["title"],
            is_removed=data.get("is_removed", False),
            variants=[
                ExistingVariant(
                    id=v["id"],
                    price=v["price"],
                    compare_at_price=v.get("compare_at_price"),
                    available=v.get("available", True),
                    title=v.get("title", "Default"),
                )
                for v in data.get("variants", [])
            ],
            images=[
                ExistingImage(
                    id=img["id"],
                    url=img["url"],
                    is_removed=img.get("is_removed", False),
                )
                for img in data.get("images", [])
            ],
        )


@dataclass(frozen=True)
class ChangeEventData:
    """A single user-facing change."""

    change_type: ChangeType
    magnitude: ChangeMagnitude
    product_title: str
    variant_title: Optional[str] = None
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    price_change: Optional[str] = None
    product_shopify_id: Optional[int] = None

    def to_dict(self) -> dict:
        """Convert event to dictionary."""
        return {
            "change_type": self.change_type.value,
            "magnitude": self.magnitude.value,
            "product_title": self.product_title,
            "variant_title": self.variant_title,
            "old_value": self.old_value,
            "new_value": self.new_value,
            "price_change": self.price_change,
            "product_shopify_id": self.product_shopify_id,
        }


@dataclass(frozen=True)
class VariantChangeResult:
    """Per-variant comparison between stored and fetched state."""

    variant_id: int
    fetched_variant: ShopifyVariant
    existing_price: str
    existing_compare_at_price: Optional[str]
    existing_available: bool
    price_change: Optional[ChangeEventData]
    stock_change: Optional[ChangeEventData]
    needs_snapshot: bool

    def to_dict(self) -> dict:
        """Convert result to dictionary."""
        return {
            "variant_id": self.variant_id,
            "fetched_variant": self.fetched_variant.model_dump(),
            "existing_price": self.existing_price,
            "existing_compare_at_price": self.existing_compare_at_price,
            "existing_available": self.existing_available,
            "price_change": self.price_change.to_dict() if self.price_change else None,
            "stock_change": self.stock_change.to_dict() if self.stock_change else None,
            "needs_snapshot": self.needs_snapshot,
        }


@dataclass(frozen=True)
class RemovedProduct:
    id: int
    title: str


@dataclass(frozen=True)
class UpdatedProduct:
    product_id: int
    fetched: ShopifyProduct


@dataclass(frozen=True)
class SyncDiff:
    """Everything that changed between stored state and a fresh fetch."""

    new_products: List[ShopifyProduct] = field(default_factory=list)
    removed_product_ids: List[RemovedProduct] = field(default_factory=list)
    restored_product_ids: List[int] = field(default_factory=list)
    variant_changes: List[VariantChangeResult] = field(default_factory=list)
    image_changes: List[ChangeEventData] = field(default_factory=list)
    updated_products: List[UpdatedProduct] = field(default_factory=list)
    changes: List[ChangeEventData] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert diff to dictionary."""
        return {
            "new_products": [p.model_dump() for p in self.new_products],
            "removed_product_ids": [
                {"id": p.id, "title": p.title} for p in self.removed_product_ids
            ],
            "restored_product_ids": list(self.restored_product_ids),
            "variant_changes": [v.to_dict() for v in self.variant_changes],
            "image_changes": [c.to_dict() for c in self.image_changes],
            "updated_products": [
                {"product_id": u.product_id, "fetched": u.fetched.model_dump()}
                for u in self.updated_products
            ],
            "changes": [c.to_dict() for c in self.changes],
        }


def _stock_label(available: bool) -> str:
    return IN_STOCK if available else OUT_OF_STOCK


def detect_price_change(
    existing: ExistingVariant,
    fetched: ShopifyVariant,
    product_title: str,
    product_shopify_id: int,
) -> Optional[ChangeEventData]:
    """
    Detect a price change on one variant.

    Prices are compared as text; a changed string is a change even when the
    numeric value is equal.

    Returns:
        ChangeEventData or None if the price is unchanged
    """
    if existing.price == fetched.price:
        return None

    old = parse_price(existing.price)
    new = parse_price(fetched.price)

    if old is not None and new is not None:
        change_type = ChangeType.PRICE_DROPPED if new < old else ChangeType.PRICE_INCREASED
        price_change = str((new - old).quantize(CENT, rounding=ROUND_HALF_UP))
    else:
        change_type = ChangeType.PRICE_INCREASED
        price_change = None

    return ChangeEventData(
        change_type=change_type,
        magnitude=calculate_magnitude(existing.price, fetched.price),
        product_title=product_title,
        variant_title=existing.title,
        old_value=existing.price,
        new_value=fetched.price,
        price_change=price_change,
        product_shopify_id=product_shopify_id,
    )


def detect_stock_change(
    existing: ExistingVariant,
    fetched: ShopifyVariant,
    product_title: str,
    product_shopify_id: int,
) -> Optional[ChangeEventData]:
    """Detect an availability flip on one variant."""
    if existing.available == fetched.available:
        return None

    return ChangeEventData(
        change_type=ChangeType.BACK_IN_STOCK if fetched.available else ChangeType.OUT_OF_STOCK,
        magnitude=ChangeMagnitude.MEDIUM,
        product_title=product_title,
        variant_title=existing.title,
        old_value=_stock_label(existing.available),
        new_value=_stock_label(fetched.available),
        price_change=None,
        product_shopify_id=product_shopify_id,
    )


def detect_image_changes(
    existing: ExistingProductState,
    fetched: ShopifyProduct,
) -> Optional[ChangeEventData]:
    """
    Detect added or removed images on a product.

    Compares every image in ``existing.images`` (callers pass active images
    only) against the fetched image URLs. Added and removed URLs are
    reported comma-joined, in their original order.
    """
    existing_urls = [image.url for image in existing.images]
    fetched_urls = [image.src for image in fetched.images]

    existing_set = set(existing_urls)
    fetched_set = set(fetched_urls)

    added = [url for url in fetched_urls if url not in existing_set]
    removed = [url for url in existing_urls if url not in fetched_set]

    if not added and not removed:
        return None

    return ChangeEventData(
        change_type=ChangeType.IMAGES_CHANGED,
        magnitude=ChangeMagnitude.MEDIUM,
        product_title=existing.title,
        variant_title=None,
        old_value=",".join(removed) if removed else None,
        new_value=",".join(added) if added else None,
        price_change=None,
        product_shopify_id=existing.id,
    )


def _product_event(change_type: ChangeType, title: str, product_id: Optional[int]) -> ChangeEventData:
    return ChangeEventData(
        change_type=change_type,
        magnitude=ChangeMagnitude.MEDIUM,
        product_title=title,
        product_shopify_id=product_id,
    )


def compute_sync_diff(
    existing: Iterable[ExistingProductState],
    fetched: Iterable[ShopifyProduct],
) -> SyncDiff:
    """
    Compute the full diff between stored state and a fetched catalog.

    Args:
        existing: Stored products, removed ones included so that products
                  reappearing in the catalog are detected as restored
        fetched: Products from the fresh catalog fetch

    Returns:
        SyncDiff. ``changes`` lists events in fetched-catalog order followed
        by removals in stored order.
    """
    existing = list(existing)
    fetched = list(fetched)

    existing_by_id = {product.id: product for product in existing}
    fetched_ids = {product.id for product in fetched}

    changes: List[ChangeEventData] = []
    new_products: List[ShopifyProduct] = []
    removed_product_ids: List[RemovedProduct] = []
    restored_product_ids: List[int] = []
    variant_changes: List[VariantChangeResult] = []
    image_changes: List[ChangeEventData] = []
    updated_products: List[UpdatedProduct] = []

    for product in fetched:
        stored = existing_by_id.get(product.id)

        if stored is None:
            new_products.append(product)
            changes.append(_product_event(ChangeType.NEW_PRODUCT, product.title, product.id))
            continue

        if stored.is_removed:
            restored_product_ids.append(stored.id)

        updated_products.append(UpdatedProduct(product_id=stored.id, fetched=product))

        stored_variants = {variant.id: variant for variant in stored.variants}

        for fetched_variant in product.variants:
            stored_variant = stored_variants.get(fetched_variant.id)
            if stored_variant is None:
                continue

            price_change = detect_price_change(stored_variant, fetched_variant, stored.title, stored.id)
            if price_change:
                changes.append(price_change)

            stock_change = detect_stock_change(stored_variant, fetched_variant, stored.title, stored.id)
            if stock_change:
                changes.append(stock_change)

            # Compare-at price moves need a snapshot even without an event
            needs_snapshot = (
                stored_variant.price != fetched_variant.price
                or stored_variant.compare_at_price != fetched_variant.compare_at_price
                or stored_variant.available != fetched_variant.available
            )

            variant_changes.append(VariantChangeResult(
                variant_id=stored_variant.id,
                fetched_variant=fetched_variant,
                existing_price=stored_variant.price,
                existing_compare_at_price=stored_variant.compare_at_price,
                existing_available=stored_variant.available,
                price_change=price_change,
                stock_change=stock_change,
                needs_snapshot=needs_snapshot,
            ))

        active = ExistingProductState(
            id=stored.id,
            title=stored.title,
            is_removed=stored.is_removed,
            variants=stored.variants,
            images=[image for image in stored.images if not image.is_removed],
        )
        image_change = detect_image_changes(active, product)
        if image_change:
            image_changes.append(image_change)
            changes.append(image_change)

    for stored in existing:
        if stored.id not in fetched_ids and not stored.is_removed:
            removed_product_ids.append(RemovedProduct(id=stored.id, title=stored.title))
            # The removed product has no id in the new catalog context
            changes.append(_product_event(ChangeType.PRODUCT_REMOVED, stored.title, None))

    logger.info(
        f"Sync diff: {len(new_products)} new, {len(removed_product_ids)} removed, "
        f"{len(restored_product_ids)} restored, {len(changes)} change events"
    )

    return SyncDiff(
        new_products=new_products,
        removed_product_ids=removed_product_ids,
        restored_product_ids=restored_product_ids,
        variant_changes=variant_changes,
        image_changes=image_changes,
        updated_products=updated_products,
        changes=changes,
    )
